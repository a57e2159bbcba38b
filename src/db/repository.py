"""
Repository layer: async CRUD operations for generations and profiles.

Ownership is checked on every owner-scoped call, on top of the row-level
security policies declared in the migrations.
"""

import uuid
from typing import Optional

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import GALLERY_LIMIT
from src.core.errors import AuthorizationError, GenerationNotFoundError, ValidationError
from src.db.models import Generation, Profile, TERMINAL_STATUSES


# ========================
# GENERATIONS
# ========================


async def create_generation(
    session: AsyncSession,
    *,
    user_id: uuid.UUID,
    prompt: str,
    style: str,
) -> Generation:
    generation = Generation(
        user_id=user_id,
        prompt=prompt,
        style=style,
        status="pending",
        image_url=None,
    )
    session.add(generation)
    await session.commit()
    await session.refresh(generation)
    return generation


async def get_generation(
    session: AsyncSession, generation_id: uuid.UUID
) -> Optional[Generation]:
    result = await session.execute(
        select(Generation).where(Generation.id == generation_id)
    )
    return result.scalar_one_or_none()


async def get_generation_for_user(
    session: AsyncSession, generation_id: uuid.UUID, user_id: uuid.UUID
) -> Generation:
    """Fetch a generation, raising unless it exists and belongs to user_id."""
    generation = await get_generation(session, generation_id)
    if generation is None:
        raise GenerationNotFoundError()
    if generation.user_id != user_id:
        raise AuthorizationError()
    return generation


async def list_generations_for_user(
    session: AsyncSession,
    user_id: uuid.UUID,
    limit: int = GALLERY_LIMIT,
) -> list[Generation]:
    """Newest-first generations for a user, never more than GALLERY_LIMIT."""
    limit = max(1, min(limit, GALLERY_LIMIT))
    result = await session.execute(
        select(Generation)
        .where(Generation.user_id == user_id)
        .order_by(Generation.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def mark_generation_terminal(
    session: AsyncSession,
    generation_id: uuid.UUID,
    *,
    status: str,
    image_url: Optional[str] = None,
) -> bool:
    """
    Move a pending generation to completed or failed.

    The UPDATE only matches rows that are still pending, so repeated calls
    for the same generation are no-ops. Returns True if this call made the
    transition.
    """
    if status not in TERMINAL_STATUSES:
        raise ValidationError(f"Invalid terminal status: {status}")
    if status == "completed" and not image_url:
        raise ValidationError("A completed generation requires an image")

    result = await session.execute(
        update(Generation)
        .where(Generation.id == generation_id, Generation.status == "pending")
        .values(
            status=status,
            image_url=image_url if status == "completed" else None,
        )
    )
    await session.commit()
    return result.rowcount == 1


async def update_generation(
    session: AsyncSession,
    generation_id: uuid.UUID,
    user_id: uuid.UUID,
    *,
    status: str,
    image_url: Optional[str] = None,
) -> Generation:
    """Owner-scoped status update; a terminal generation is returned unchanged."""
    generation = await get_generation_for_user(session, generation_id, user_id)
    if generation.is_terminal:
        return generation

    await mark_generation_terminal(
        session, generation_id, status=status, image_url=image_url
    )
    await session.refresh(generation)
    return generation


async def delete_generation(
    session: AsyncSession, generation_id: uuid.UUID, user_id: uuid.UUID
) -> None:
    await get_generation_for_user(session, generation_id, user_id)
    await session.execute(
        delete(Generation).where(
            Generation.id == generation_id, Generation.user_id == user_id
        )
    )
    await session.commit()


# ========================
# PROFILES
# ========================


async def get_profile(
    session: AsyncSession, user_id: uuid.UUID
) -> Optional[Profile]:
    result = await session.execute(select(Profile).where(Profile.id == user_id))
    return result.scalar_one_or_none()
