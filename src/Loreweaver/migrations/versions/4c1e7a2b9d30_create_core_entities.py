"""create campaign and core entity tables

Revision ID: 4c1e7a2b9d30
Revises:
Create Date: 2025-11-26
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4c1e7a2b9d30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(length=36), primary_key=True, nullable=False)


def _campaign_id() -> sa.Column:
    return sa.Column(
        "campaign_id",
        sa.String(length=36),
        sa.ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    op.create_table(
        "campaigns",
        _id(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("system", sa.String(length=200), nullable=True),
        sa.Column("settings_json", sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "players",
        _id(),
        _campaign_id(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("preferences", sa.Text(), nullable=True),
        sa.Column("boundaries", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_players_campaign", "players", ["campaign_id"], unique=False)

    op.create_table(
        "locations",
        _id(),
        _campaign_id(),
        sa.Column("parent_id", sa.String(length=36), sa.ForeignKey("locations.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("location_type", sa.String(length=32), nullable=False, server_default="settlement"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("gm_notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_locations_campaign", "locations", ["campaign_id"], unique=False)
    op.create_index("idx_locations_parent", "locations", ["parent_id"], unique=False)

    op.create_table(
        "characters",
        _id(),
        _campaign_id(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("lineage", sa.String(length=200), nullable=True),
        sa.Column("occupation", sa.String(length=200), nullable=True),
        sa.Column("is_alive", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("personality", sa.Text(), nullable=True),
        sa.Column("motivations", sa.Text(), nullable=True),
        sa.Column("secrets", sa.Text(), nullable=True),
        sa.Column("voice_notes", sa.Text(), nullable=True),
        sa.Column("stat_block_json", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_characters_campaign", "characters", ["campaign_id"], unique=False)

    op.create_table(
        "organizations",
        _id(),
        _campaign_id(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("org_type", sa.String(length=32), nullable=False, server_default="other"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("goals", sa.Text(), nullable=True),
        sa.Column("resources", sa.Text(), nullable=True),
        sa.Column("reputation", sa.Text(), nullable=True),
        sa.Column("secrets", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
    )
    op.create_index("idx_organizations_campaign", "organizations", ["campaign_id"], unique=False)

    op.create_table(
        "quests",
        _id(),
        _campaign_id(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="planned"),
        sa.Column("plot_type", sa.String(length=32), nullable=False, server_default="side"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("hook", sa.Text(), nullable=True),
        sa.Column("objectives", sa.Text(), nullable=True),
        sa.Column("complications", sa.Text(), nullable=True),
        sa.Column("resolution", sa.Text(), nullable=True),
        sa.Column("reward", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_quests_campaign", "quests", ["campaign_id"], unique=False)
    op.create_index("idx_quests_status", "quests", ["status"], unique=False)

    op.create_table(
        "heroes",
        _id(),
        _campaign_id(),
        sa.Column("player_id", sa.String(length=36), sa.ForeignKey("players.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("lineage", sa.String(length=200), nullable=True),
        sa.Column("classes", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("backstory", sa.Text(), nullable=True),
        sa.Column("goals", sa.Text(), nullable=True),
        sa.Column("bonds", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
    )
    op.create_index("idx_heroes_campaign", "heroes", ["campaign_id"], unique=False)
    op.create_index("idx_heroes_player", "heroes", ["player_id"], unique=False)

    op.create_table(
        "sessions",
        _id(),
        _campaign_id(),
        sa.Column("session_number", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=True),
        sa.Column("title", sa.String(length=200), nullable=True),
        sa.Column("planned_content", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("highlights", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("campaign_id", "session_number", name="ux_sessions_campaign_number"),
    )
    op.create_index("idx_sessions_campaign", "sessions", ["campaign_id"], unique=False)

    op.create_table(
        "timeline_events",
        _id(),
        _campaign_id(),
        sa.Column("date_display", sa.String(length=200), nullable=False),
        sa.Column("sort_order", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("significance", sa.String(length=32), nullable=False, server_default="local"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
    )
    op.create_index("idx_timeline_events_campaign", "timeline_events", ["campaign_id"], unique=False)

    op.create_table(
        "secrets",
        _id(),
        _campaign_id(),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("related_entity_type", sa.String(length=32), nullable=True),
        sa.Column("related_entity_id", sa.String(length=36), nullable=True),
        sa.Column("known_by", sa.Text(), nullable=True),
        sa.Column("revealed", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("revealed_in_session", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("idx_secrets_campaign", "secrets", ["campaign_id"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_secrets_campaign", table_name="secrets")
    op.drop_table("secrets")
    op.drop_index("idx_timeline_events_campaign", table_name="timeline_events")
    op.drop_table("timeline_events")
    op.drop_index("idx_sessions_campaign", table_name="sessions")
    op.drop_table("sessions")
    op.drop_index("idx_heroes_player", table_name="heroes")
    op.drop_index("idx_heroes_campaign", table_name="heroes")
    op.drop_table("heroes")
    op.drop_index("idx_quests_status", table_name="quests")
    op.drop_index("idx_quests_campaign", table_name="quests")
    op.drop_table("quests")
    op.drop_index("idx_organizations_campaign", table_name="organizations")
    op.drop_table("organizations")
    op.drop_index("idx_characters_campaign", table_name="characters")
    op.drop_table("characters")
    op.drop_index("idx_locations_parent", table_name="locations")
    op.drop_index("idx_locations_campaign", table_name="locations")
    op.drop_table("locations")
    op.drop_index("idx_players_campaign", table_name="players")
    op.drop_table("players")
    op.drop_table("campaigns")
