"""Initial schema: auth tables, recipes, recipe_shares

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(nullable: bool = False) -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=nullable),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=nullable),
    ]


def upgrade() -> None:
    # Auth-owned tables
    op.create_table(
        "user",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("email", sa.Text, unique=True, nullable=False),
        sa.Column("email_verified", sa.Boolean, nullable=True),
        sa.Column("image", sa.Text, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "session",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("token", sa.Text, unique=True, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ip_address", sa.Text, nullable=True),
        sa.Column("user_agent", sa.Text, nullable=True),
        sa.Column("user_id", sa.Text, sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_session_user_id", "session", ["user_id"])

    op.create_table(
        "account",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("account_id", sa.Text, nullable=False),
        sa.Column("provider_id", sa.Text, nullable=False),
        sa.Column("user_id", sa.Text, sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("access_token", sa.Text, nullable=True),
        sa.Column("refresh_token", sa.Text, nullable=True),
        sa.Column("id_token", sa.Text, nullable=True),
        sa.Column("access_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refresh_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("scope", sa.Text, nullable=True),
        sa.Column("password", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_account_user_id", "account", ["user_id"])

    op.create_table(
        "verification",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("identifier", sa.Text, nullable=False),
        sa.Column("value", sa.Text, nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(nullable=True),
    )

    # Application tables
    op.create_table(
        "recipes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Text, sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("ingredients", postgresql.JSONB, nullable=False),
        sa.Column("instructions", postgresql.JSONB, nullable=False),
        sa.Column("nutritional_info", postgresql.JSONB, nullable=True),
        sa.Column("cooking_time", sa.Text, nullable=True),
        sa.Column("difficulty", sa.Text, nullable=True),
        sa.Column("cuisine", sa.Text, nullable=True),
        sa.Column("original_image_url", sa.Text, nullable=False),
        sa.Column("finished_dish_image_url", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_recipes_user_id_created_at", "recipes", ["user_id", sa.text("created_at DESC")]
    )

    op.create_table(
        "recipe_shares",
        sa.Column("id", sa.Text, primary_key=True),
        sa.Column("recipe_id", sa.Integer, sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_recipe_shares_recipe_id", "recipe_shares", ["recipe_id"])


def downgrade() -> None:
    op.drop_table("recipe_shares")
    op.drop_table("recipes")
    op.drop_table("verification")
    op.drop_table("account")
    op.drop_table("session")
    op.drop_table("user")
