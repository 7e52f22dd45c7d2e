"""Create notes table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `notes` table of the self-hosted notes platform.
Rollback: downgrade() drops the table and every stored note.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "notes",
        sa.Column("id", sa.Uuid(), nullable=False,
                  comment="Opaque identifier assigned by the platform"),
        sa.Column("name", sa.String(255), nullable=False,
                  comment="Note title; also the attachment storage key"),
        sa.Column("description", sa.Text(), nullable=False, comment="Note body"),
        sa.Column("image", sa.String(255), nullable=True,
                  comment="Object-store key of the attachment, NULL when absent"),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this note was created (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_notes_created_at", "notes", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_notes_created_at", table_name="notes")
    op.drop_table("notes")
