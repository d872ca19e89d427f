"""create relationships, tags and entity_tags

Revision ID: 8e2d5f1a6b47
Revises: 4c1e7a2b9d30
Create Date: 2025-11-26
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "8e2d5f1a6b47"
down_revision: Union[str, Sequence[str], None] = "4c1e7a2b9d30"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Endpoints are (type, id) pairs, deliberately without foreign keys
    op.create_table(
        "relationships",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("campaign_id", sa.String(length=36), sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("source_type", sa.String(length=32), nullable=False),
        sa.Column("source_id", sa.String(length=36), nullable=False),
        sa.Column("target_type", sa.String(length=32), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=False),
        sa.Column("relationship_type", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_bidirectional", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("strength", sa.Integer(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("idx_relationships_campaign", "relationships", ["campaign_id"], unique=False)
    op.create_index("idx_relationships_source", "relationships", ["source_type", "source_id"], unique=False)
    op.create_index("idx_relationships_target", "relationships", ["target_type", "target_id"], unique=False)

    op.create_table(
        "tags",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("campaign_id", sa.String(length=36), sa.ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("color", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("campaign_id", "name", name="ux_tags_campaign_name"),
    )
    op.create_index("idx_tags_campaign", "tags", ["campaign_id"], unique=False)

    op.create_table(
        "entity_tags",
        sa.Column("tag_id", sa.String(length=36), sa.ForeignKey("tags.id", ondelete="CASCADE"), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.PrimaryKeyConstraint("tag_id", "entity_type", "entity_id"),
    )
    op.create_index("idx_entity_tags_entity", "entity_tags", ["entity_type", "entity_id"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_entity_tags_entity", table_name="entity_tags")
    op.drop_table("entity_tags")
    op.drop_index("idx_tags_campaign", table_name="tags")
    op.drop_table("tags")
    op.drop_index("idx_relationships_target", table_name="relationships")
    op.drop_index("idx_relationships_source", table_name="relationships")
    op.drop_index("idx_relationships_campaign", table_name="relationships")
    op.drop_table("relationships")
