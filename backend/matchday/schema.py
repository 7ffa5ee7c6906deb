from sqlalchemy import Column, ForeignKey, Integer, String, Table, UniqueConstraint, func
from sqlalchemy.orm import declarative_base  # type: ignore[attr-defined]
from sqlalchemy.sql.sqltypes import JSON, BigInteger, DateTime, Enum, Text

Base = declarative_base()
metadata = Base.metadata
DateTimeTZ = DateTime(timezone=True)

teams = Table(
    "teams",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("name", String, nullable=False, index=True, unique=True),
    Column("shorthand", String, nullable=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
)

players = Table(
    "players",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("name", String, nullable=False, index=True),
    Column("team_id", BigInteger, ForeignKey("teams.id"), index=True, nullable=True),
    Column("position", String, nullable=True),
    Column("appearances", Integer, nullable=False, server_default="0"),
    Column("goals", Integer, nullable=False, server_default="0"),
    Column("own_goals", Integer, nullable=False, server_default="0"),
    Column("assists", Integer, nullable=False, server_default="0"),
    Column("yellow_cards", Integer, nullable=False, server_default="0"),
    Column("red_cards", Integer, nullable=False, server_default="0"),
    Column("clean_sheets", Integer, nullable=False, server_default="0"),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
)

competitions = Table(
    "competitions",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("name", String, nullable=False, index=True, unique=True),
    Column(
        "format",
        Enum("LEAGUE", "KNOCKOUT", "HYBRID", name="competition_format"),
        nullable=False,
    ),
    Column(
        "status",
        Enum("PENDING", "ONGOING", "COMPLETED", name="competition_status"),
        nullable=False,
        server_default="PENDING",
        index=True,
    ),
    Column("team_ids", JSON, nullable=False, server_default="[]"),
    Column("stats", JSON, nullable=False, server_default="{}"),
    Column("state", JSON, nullable=False),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
)

fixtures = Table(
    "fixtures",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("competition_id", BigInteger, ForeignKey("competitions.id"), index=True, nullable=True),
    Column("home_team_id", BigInteger, ForeignKey("teams.id"), index=True, nullable=False),
    Column("away_team_id", BigInteger, ForeignKey("teams.id"), index=True, nullable=False),
    Column(
        "status",
        Enum("SCHEDULED", "LIVE", "COMPLETED", "POSTPONED", name="fixture_status"),
        nullable=False,
        server_default="SCHEDULED",
        index=True,
    ),
    Column("result", JSON, nullable=True),
    Column("statistics", JSON, nullable=True),
    Column("match_events", JSON, nullable=False, server_default="[]"),
    Column("home_lineup", JSON, nullable=False, server_default="{}"),
    Column("away_lineup", JSON, nullable=False, server_default="{}"),
    Column("match_week", Integer, nullable=True),
    Column("scheduled_at", DateTimeTZ, nullable=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
)

player_competition_stats = Table(
    "player_competition_stats",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("player_id", BigInteger, ForeignKey("players.id"), index=True, nullable=False),
    Column(
        "competition_id", BigInteger, ForeignKey("competitions.id"), index=True, nullable=False
    ),
    Column("appearances", Integer, nullable=False, server_default="0"),
    Column("goals", Integer, nullable=False, server_default="0"),
    Column("own_goals", Integer, nullable=False, server_default="0"),
    Column("assists", Integer, nullable=False, server_default="0"),
    Column("yellow_cards", Integer, nullable=False, server_default="0"),
    Column("red_cards", Integer, nullable=False, server_default="0"),
    Column("clean_sheets", Integer, nullable=False, server_default="0"),
    UniqueConstraint("player_id", "competition_id", name="uq_player_competition_stats"),
)

audit_logs = Table(
    "audit_logs",
    metadata,
    Column("id", BigInteger, primary_key=True, index=True, autoincrement=True),
    Column("actor_id", BigInteger, nullable=True, index=True),
    Column("action", String, nullable=False),
    Column("entity", String, nullable=False, index=True),
    Column("entity_id", BigInteger, nullable=False, index=True),
    Column("message", Text, nullable=False),
    Column("previous_values", JSON, nullable=True),
    Column("new_values", JSON, nullable=True),
    Column("created", DateTimeTZ, nullable=False, server_default=func.now()),
)
