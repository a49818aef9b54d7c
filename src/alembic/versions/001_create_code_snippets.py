"""Create code_snippets table

Revision ID: 001
Revises:
Create Date: 2025-05-18 03:36:04.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "code_snippets",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("username", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("language", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("tags", postgresql.ARRAY(sa.Text()), nullable=True),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column(
            "modification_code", sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False
        ),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_code_snippets_language", "code_snippets", ["language"], unique=False)
    op.create_index("ix_code_snippets_username", "code_snippets", ["username"], unique=False)
    op.create_index(
        "ix_code_snippets_modification_code",
        "code_snippets",
        ["modification_code"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ix_code_snippets_modification_code", table_name="code_snippets")
    op.drop_index("ix_code_snippets_username", table_name="code_snippets")
    op.drop_index("ix_code_snippets_language", table_name="code_snippets")
    op.drop_table("code_snippets")
