"""
SQLAlchemy async ORM models for profiles and generations.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    String,
    Integer,
    Text,
    DateTime,
    CheckConstraint,
    Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from src.core.prompts import STYLE_VALUES


GENERATION_STATUSES = ("pending", "completed", "failed")
TERMINAL_STATUSES = ("completed", "failed")


def _sql_in(values) -> str:
    return ", ".join(f"'{v}'" for v in values)


class Base(DeclarativeBase):
    pass


class Profile(Base):
    """One row per auth user, created by the handle_new_user trigger."""
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    full_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    subscription_plan: Mapped[str] = mapped_column(
        String(20), nullable=False, default="free"
    )
    generation_credits: Mapped[int] = mapped_column(
        Integer, nullable=False, default=10
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class Generation(Base):
    __tablename__ = "generations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False
    )
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    style: Mapped[str] = mapped_column(String(20), nullable=False)
    # data URI of the generated image; stays NULL unless completed
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint(
            f"status IN ({_sql_in(GENERATION_STATUSES)})",
            name="ck_generations_status",
        ),
        CheckConstraint(
            f"style IN ({_sql_in(STYLE_VALUES)})",
            name="ck_generations_style",
        ),
        CheckConstraint(
            "status = 'completed' OR image_url IS NULL",
            name="ck_generations_image_only_when_completed",
        ),
        Index("idx_generations_user_id", "user_id"),
        Index("idx_generations_created_at", "created_at"),
        Index("idx_generations_user_id_created_at", "user_id", "created_at"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
