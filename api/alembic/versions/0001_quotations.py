"""quotations table

Revision ID: 0001_quotations
Revises:
Create Date: 2026-10-19

Quotations keyed by an opaque string id, with a unique index on
(content, lower(author_first_name), lower(author_last_name)).
"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_quotations"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "quotations",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_first_name", sa.String(255), nullable=False),
        sa.Column("author_last_name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_quotations_created_at", "quotations", ["created_at"], unique=False
    )
    op.create_index(
        "uq_quotations_content_author",
        "quotations",
        [
            sa.text("content"),
            sa.text("lower(author_first_name)"),
            sa.text("lower(author_last_name)"),
        ],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("uq_quotations_content_author", table_name="quotations")
    op.drop_index("ix_quotations_created_at", table_name="quotations")
    op.drop_table("quotations")
