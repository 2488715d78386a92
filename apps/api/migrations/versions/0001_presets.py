"""presets + saved_characters (local board store)

Mirrors the hosted store tables:
  - presets(id, name, created_at)
  - saved_characters(id, preset_id, name, image_url) + position for board order
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_presets"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "presets",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.Text(), nullable=False),
    )
    op.create_index("ix_presets_created_at", "presets", ["created_at"])

    op.create_table(
        "saved_characters",
        sa.Column("id", sa.Text(), primary_key=True),
        sa.Column("preset_id", sa.Text(), sa.ForeignKey("presets.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=False),
    )
    op.create_index("ix_saved_characters_preset_id", "saved_characters", ["preset_id"])


def downgrade() -> None:
    op.drop_index("ix_saved_characters_preset_id", table_name="saved_characters")
    op.drop_table("saved_characters")
    op.drop_index("ix_presets_created_at", table_name="presets")
    op.drop_table("presets")
