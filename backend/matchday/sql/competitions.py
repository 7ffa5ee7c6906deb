import json

from heliclockter import datetime_utc

from matchday.database import database
from matchday.models.db.competition import (
    Competition,
    CompetitionAggregateStats,
    CompetitionFormat,
    CompetitionState,
    CompetitionStatus,
    empty_state_for_format,
)
from matchday.models.db.fixture import FixtureStatus
from matchday.utils.id_types import CompetitionId, FixtureId, TeamId
from matchday.utils.types import assert_some

_COMPETITION_LOCK_SCOPE = 72001


async def sql_get_competition(competition_id: CompetitionId) -> Competition | None:
    query = """
        SELECT *
        FROM competitions
        WHERE id = :competition_id
    """
    result = await database.fetch_one(query=query, values={"competition_id": competition_id})
    return Competition.model_validate(dict(result._mapping)) if result is not None else None


async def sql_lock_competition(competition_id: CompetitionId) -> None:
    """Serialize every read-modify-write of one competition document until the transaction ends."""
    await database.execute(
        "SELECT pg_advisory_xact_lock(:lock_scope, :lock_key)",
        values={"lock_scope": _COMPETITION_LOCK_SCOPE, "lock_key": int(competition_id)},
    )


async def sql_create_competition(
    name: str, competition_format: CompetitionFormat, team_ids: list[TeamId]
) -> Competition:
    query = """
        INSERT INTO competitions (name, format, status, team_ids, stats, state, created)
        VALUES (:name, :format, :status, :team_ids, :stats, :state, :created)
        RETURNING *
    """
    result = await database.fetch_one(
        query=query,
        values={
            "name": name,
            "format": competition_format.value,
            "status": CompetitionStatus.PENDING.value,
            "team_ids": json.dumps([int(team_id) for team_id in team_ids]),
            "stats": json.dumps(CompetitionAggregateStats().model_dump(mode="json")),
            "state": json.dumps(empty_state_for_format(competition_format).model_dump(mode="json")),
            "created": datetime_utc.now(),
        },
    )
    return Competition.model_validate(dict(assert_some(result)._mapping))


async def sql_update_competition_document(
    competition_id: CompetitionId,
    *,
    stats: CompetitionAggregateStats,
    state: CompetitionState,
    status: CompetitionStatus,
) -> None:
    query = """
        UPDATE competitions
        SET stats = :stats, state = :state, status = :status
        WHERE id = :competition_id
    """
    await database.execute(
        query=query,
        values={
            "competition_id": competition_id,
            "stats": json.dumps(stats.model_dump(mode="json")),
            "state": json.dumps(state.model_dump(mode="json")),
            "status": status.value,
        },
    )


async def sql_get_completed_fixture_ids(competition_id: CompetitionId) -> set[FixtureId]:
    query = """
        SELECT id
        FROM fixtures
        WHERE competition_id = :competition_id
        AND status = :status
    """
    rows = await database.fetch_all(
        query=query,
        values={"competition_id": competition_id, "status": FixtureStatus.COMPLETED.value},
    )
    return {FixtureId(int(row._mapping["id"])) for row in rows}
