"""create profiles and generations

Revision ID: a7c1e2d3f4b5
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = 'a7c1e2d3f4b5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STYLES = (
    "cinematic", "anime", "realistic", "fantasy",
    "cyberpunk", "watercolor", "oil-painting", "3d-render",
)


def upgrade() -> None:
    # profiles
    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True), sa.ForeignKey("auth.users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("email", sa.Text, nullable=False),
        sa.Column("full_name", sa.Text, nullable=True),
        sa.Column("avatar_url", sa.Text, nullable=True),
        sa.Column("subscription_plan", sa.String(20), nullable=False, server_default="free"),
        sa.Column("generation_credits", sa.Integer, nullable=False, server_default="10"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    # generations
    style_list = ", ".join(f"'{s}'" for s in STYLES)
    op.create_table(
        "generations",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("auth.users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("prompt", sa.Text, nullable=False),
        sa.Column("style", sa.String(20), nullable=False),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status IN ('pending', 'completed', 'failed')", name="ck_generations_status"),
        sa.CheckConstraint(f"style IN ({style_list})", name="ck_generations_style"),
        sa.CheckConstraint(
            "status = 'completed' OR image_url IS NULL",
            name="ck_generations_image_only_when_completed",
        ),
    )
    op.create_index("idx_generations_user_id", "generations", ["user_id"])
    op.create_index("idx_generations_created_at", "generations", [sa.text("created_at DESC")])
    op.create_index(
        "idx_generations_user_id_created_at", "generations", ["user_id", sa.text("created_at DESC")]
    )

    # Row level security: owners only
    op.execute("ALTER TABLE public.profiles ENABLE ROW LEVEL SECURITY")
    op.execute("""
        CREATE POLICY "Users can view their own profile"
          ON public.profiles FOR SELECT
          USING (auth.uid() = id)
    """)
    op.execute("""
        CREATE POLICY "Users can update their own profile"
          ON public.profiles FOR UPDATE
          USING (auth.uid() = id)
    """)
    op.execute("""
        CREATE POLICY "Users can insert their own profile"
          ON public.profiles FOR INSERT
          WITH CHECK (auth.uid() = id)
    """)

    op.execute("ALTER TABLE public.generations ENABLE ROW LEVEL SECURITY")
    op.execute("""
        CREATE POLICY "Users can view their own generations"
          ON public.generations FOR SELECT
          USING (auth.uid() = user_id)
    """)
    op.execute("""
        CREATE POLICY "Users can create their own generations"
          ON public.generations FOR INSERT
          WITH CHECK (auth.uid() = user_id)
    """)
    op.execute("""
        CREATE POLICY "Users can update their own generations"
          ON public.generations FOR UPDATE
          USING (auth.uid() = user_id)
    """)
    op.execute("""
        CREATE POLICY "Users can delete their own generations"
          ON public.generations FOR DELETE
          USING (auth.uid() = user_id)
    """)

    # Profile row for every new auth user
    op.execute("""
        CREATE OR REPLACE FUNCTION public.handle_new_user()
        RETURNS trigger
        LANGUAGE plpgsql
        SECURITY DEFINER
        SET search_path TO 'public'
        AS $function$
        BEGIN
          INSERT INTO public.profiles (id, email, full_name)
          VALUES (NEW.id, NEW.email, NEW.raw_user_meta_data->>'full_name');
          RETURN NEW;
        END;
        $function$;
    """)
    op.execute("""
        CREATE TRIGGER on_auth_user_created
          AFTER INSERT ON auth.users
          FOR EACH ROW EXECUTE FUNCTION public.handle_new_user()
    """)


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS on_auth_user_created ON auth.users")
    op.execute("DROP FUNCTION IF EXISTS public.handle_new_user()")
    op.drop_index("idx_generations_user_id_created_at", table_name="generations")
    op.drop_index("idx_generations_created_at", table_name="generations")
    op.drop_index("idx_generations_user_id", table_name="generations")
    op.drop_table("generations")
    op.drop_table("profiles")
