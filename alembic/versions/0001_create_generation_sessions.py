"""create generation_sessions table

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "generation_sessions",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("root_namespace", sa.String(length=200), nullable=False),
        sa.Column("entity_names", sa.JSON(), nullable=False),
        sa.Column("output_dir", sa.Text(), nullable=False),
        sa.Column("files_generated", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("git_initialized", sa.Boolean(), nullable=False),
        sa.Column("git_committed", sa.Boolean(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
    )


def downgrade():
    op.drop_table("generation_sessions")
