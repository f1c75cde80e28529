"""
Add bookmarks and users tables.

Revision ID: 5b1c9e2f7a30
Revises:
Create Date: 2026-10-18 09:12:41.503117
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "5b1c9e2f7a30"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

REFERENCE_COLUMNS = ("read_later", "likes", "pinned", "history", "favorites")


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("description_html", sa.Text(), nullable=True),
        sa.Column(
            "tags", postgresql.ARRAY(sa.String()), server_default="{}", nullable=False,
        ),
        sa.Column("shared", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column(
            "last_accessed_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_bookmarks_user_id"), "bookmarks", ["user_id"], unique=False)
    op.create_index(op.f("ix_bookmarks_shared"), "bookmarks", ["shared"], unique=False)
    op.create_index(op.f("ix_bookmarks_created_at"), "bookmarks", ["created_at"], unique=False)
    op.create_index(
        op.f("ix_bookmarks_last_accessed_at"), "bookmarks", ["last_accessed_at"], unique=False,
    )
    op.create_index(
        "ix_bookmarks_user_id_location", "bookmarks", ["user_id", "location"], unique=False,
    )
    op.create_index(
        "uq_bookmarks_shared_location",
        "bookmarks",
        ["location"],
        unique=True,
        postgresql_where=sa.text("shared"),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=255), nullable=False, comment="'sub' claim of the access token"),  # noqa: E501
        *(
            sa.Column(
                name, postgresql.ARRAY(sa.Integer()), server_default="{}", nullable=False,
            )
            for name in REFERENCE_COLUMNS
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("clock_timestamp()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_created_at"), "users", ["created_at"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_users_created_at"), table_name="users")
    op.drop_table("users")
    op.drop_index("uq_bookmarks_shared_location", table_name="bookmarks")
    op.drop_index("ix_bookmarks_user_id_location", table_name="bookmarks")
    op.drop_index(op.f("ix_bookmarks_last_accessed_at"), table_name="bookmarks")
    op.drop_index(op.f("ix_bookmarks_created_at"), table_name="bookmarks")
    op.drop_index(op.f("ix_bookmarks_shared"), table_name="bookmarks")
    op.drop_index(op.f("ix_bookmarks_user_id"), table_name="bookmarks")
    op.drop_table("bookmarks")
