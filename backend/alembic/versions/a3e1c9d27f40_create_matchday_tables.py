"""create matchday tables

Revision ID: a3e1c9d27f40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ENUM

from alembic import op

# revision identifiers, used by Alembic.
revision: str | None = "a3e1c9d27f40"
down_revision: str | None = None
branch_labels: str | None = None
depends_on: str | None = None

competition_format_enum = ENUM(
    "LEAGUE", "KNOCKOUT", "HYBRID", name="competition_format", create_type=False
)
competition_status_enum = ENUM(
    "PENDING", "ONGOING", "COMPLETED", name="competition_status", create_type=False
)
fixture_status_enum = ENUM(
    "SCHEDULED", "LIVE", "COMPLETED", "POSTPONED", name="fixture_status", create_type=False
)

_PLAYER_COUNTERS = (
    "appearances",
    "goals",
    "own_goals",
    "assists",
    "yellow_cards",
    "red_cards",
    "clean_sheets",
)


def _player_counter_columns() -> list[sa.Column]:
    return [
        sa.Column(counter, sa.Integer(), server_default="0", nullable=False)
        for counter in _PLAYER_COUNTERS
    ]


def upgrade() -> None:
    bind = op.get_bind()
    competition_format_enum.create(bind, checkfirst=True)
    competition_status_enum.create(bind, checkfirst=True)
    fixture_status_enum.create(bind, checkfirst=True)

    op.create_table(
        "teams",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("shorthand", sa.String(), nullable=True),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_teams_id"), "teams", ["id"], unique=False)
    op.create_index(op.f("ix_teams_name"), "teams", ["name"], unique=False)

    op.create_table(
        "players",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("team_id", sa.BigInteger(), nullable=True),
        sa.Column("position", sa.String(), nullable=True),
        *_player_counter_columns(),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["team_id"], ["teams.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_players_id"), "players", ["id"], unique=False)
    op.create_index(op.f("ix_players_name"), "players", ["name"], unique=False)
    op.create_index(op.f("ix_players_team_id"), "players", ["team_id"], unique=False)

    op.create_table(
        "competitions",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("format", competition_format_enum, nullable=False),
        sa.Column("status", competition_status_enum, server_default="PENDING", nullable=False),
        sa.Column("team_ids", sa.JSON(), server_default="[]", nullable=False),
        sa.Column("stats", sa.JSON(), server_default="{}", nullable=False),
        sa.Column("state", sa.JSON(), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index(op.f("ix_competitions_id"), "competitions", ["id"], unique=False)
    op.create_index(op.f("ix_competitions_name"), "competitions", ["name"], unique=False)
    op.create_index(op.f("ix_competitions_status"), "competitions", ["status"], unique=False)

    op.create_table(
        "fixtures",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("competition_id", sa.BigInteger(), nullable=True),
        sa.Column("home_team_id", sa.BigInteger(), nullable=False),
        sa.Column("away_team_id", sa.BigInteger(), nullable=False),
        sa.Column("status", fixture_status_enum, server_default="SCHEDULED", nullable=False),
        sa.Column("result", sa.JSON(), nullable=True),
        sa.Column("statistics", sa.JSON(), nullable=True),
        sa.Column("match_events", sa.JSON(), server_default="[]", nullable=False),
        sa.Column("home_lineup", sa.JSON(), server_default="{}", nullable=False),
        sa.Column("away_lineup", sa.JSON(), server_default="{}", nullable=False),
        sa.Column("match_week", sa.Integer(), nullable=True),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"]),
        sa.ForeignKeyConstraint(["home_team_id"], ["teams.id"]),
        sa.ForeignKeyConstraint(["away_team_id"], ["teams.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_fixtures_id"), "fixtures", ["id"], unique=False)
    op.create_index(op.f("ix_fixtures_competition_id"), "fixtures", ["competition_id"], unique=False)
    op.create_index(op.f("ix_fixtures_home_team_id"), "fixtures", ["home_team_id"], unique=False)
    op.create_index(op.f("ix_fixtures_away_team_id"), "fixtures", ["away_team_id"], unique=False)
    op.create_index(op.f("ix_fixtures_status"), "fixtures", ["status"], unique=False)

    op.create_table(
        "player_competition_stats",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("player_id", sa.BigInteger(), nullable=False),
        sa.Column("competition_id", sa.BigInteger(), nullable=False),
        *_player_counter_columns(),
        sa.ForeignKeyConstraint(["player_id"], ["players.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["competition_id"], ["competitions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("player_id", "competition_id", name="uq_player_competition_stats"),
    )
    op.create_index(
        op.f("ix_player_competition_stats_id"), "player_competition_stats", ["id"], unique=False
    )
    op.create_index(
        op.f("ix_player_competition_stats_player_id"),
        "player_competition_stats",
        ["player_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_player_competition_stats_competition_id"),
        "player_competition_stats",
        ["competition_id"],
        unique=False,
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("actor_id", sa.BigInteger(), nullable=True),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("entity", sa.String(), nullable=False),
        sa.Column("entity_id", sa.BigInteger(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("previous_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_logs_id"), "audit_logs", ["id"], unique=False)
    op.create_index(op.f("ix_audit_logs_actor_id"), "audit_logs", ["actor_id"], unique=False)
    op.create_index(op.f("ix_audit_logs_entity"), "audit_logs", ["entity"], unique=False)
    op.create_index(op.f("ix_audit_logs_entity_id"), "audit_logs", ["entity_id"], unique=False)


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("player_competition_stats")
    op.drop_table("fixtures")
    op.drop_table("competitions")
    op.drop_table("players")
    op.drop_table("teams")

    bind = op.get_bind()
    fixture_status_enum.drop(bind, checkfirst=True)
    competition_status_enum.drop(bind, checkfirst=True)
    competition_format_enum.drop(bind, checkfirst=True)
