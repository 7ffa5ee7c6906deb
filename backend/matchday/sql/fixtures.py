import json
from collections.abc import Sequence

from heliclockter import datetime_utc

from matchday.database import database
from matchday.models.db.fixture import Fixture, FixtureResult, FixtureStatus
from matchday.utils.id_types import CompetitionId, FixtureId, TeamId
from matchday.utils.types import assert_some


async def sql_get_fixture(fixture_id: FixtureId, *, for_update: bool = False) -> Fixture | None:
    lock_clause = "FOR UPDATE" if for_update else ""
    query = f"""
        SELECT *
        FROM fixtures
        WHERE id = :fixture_id
        {lock_clause}
    """
    result = await database.fetch_one(query=query, values={"fixture_id": fixture_id})
    return Fixture.model_validate(dict(result._mapping)) if result is not None else None


async def sql_get_fixtures_by_ids(fixture_ids: Sequence[FixtureId]) -> dict[FixtureId, Fixture]:
    if len(fixture_ids) < 1:
        return {}

    query = """
        SELECT *
        FROM fixtures
        WHERE id = ANY(:fixture_ids)
    """
    rows = await database.fetch_all(
        query=query, values={"fixture_ids": [int(fixture_id) for fixture_id in fixture_ids]}
    )
    fixtures = [Fixture.model_validate(dict(row._mapping)) for row in rows]
    return {fixture.id: fixture for fixture in fixtures}


async def sql_create_fixture(
    home_team_id: TeamId,
    away_team_id: TeamId,
    competition_id: CompetitionId | None = None,
    *,
    match_week: int | None = None,
    scheduled_at: datetime_utc | None = None,
) -> Fixture:
    query = """
        INSERT INTO fixtures (
            competition_id, home_team_id, away_team_id, status, match_week, scheduled_at, created
        )
        VALUES (
            :competition_id, :home_team_id, :away_team_id, :status,
            :match_week, :scheduled_at, :created
        )
        RETURNING *
    """
    result = await database.fetch_one(
        query=query,
        values={
            "competition_id": competition_id,
            "home_team_id": home_team_id,
            "away_team_id": away_team_id,
            "status": FixtureStatus.SCHEDULED.value,
            "match_week": match_week,
            "scheduled_at": scheduled_at,
            "created": datetime_utc.now(),
        },
    )
    return Fixture.model_validate(dict(assert_some(result)._mapping))


async def sql_update_fixture_details(fixture: Fixture) -> None:
    """Store statistics, events and lineups. The result is written separately."""
    query = """
        UPDATE fixtures
        SET
            statistics = :statistics,
            match_events = :match_events,
            home_lineup = :home_lineup,
            away_lineup = :away_lineup
        WHERE id = :fixture_id
    """
    await database.execute(
        query=query,
        values={
            "fixture_id": fixture.id,
            "statistics": (
                json.dumps(fixture.statistics.model_dump(mode="json"))
                if fixture.statistics is not None
                else None
            ),
            "match_events": json.dumps(
                [event.model_dump(mode="json") for event in fixture.match_events]
            ),
            "home_lineup": json.dumps(fixture.home_lineup.model_dump(mode="json")),
            "away_lineup": json.dumps(fixture.away_lineup.model_dump(mode="json")),
        },
    )


async def sql_complete_fixture(fixture_id: FixtureId, result: FixtureResult) -> Fixture:
    query = """
        UPDATE fixtures
        SET result = :result, status = :status
        WHERE id = :fixture_id
        RETURNING *
    """
    row = await database.fetch_one(
        query=query,
        values={
            "fixture_id": fixture_id,
            "result": json.dumps(result.model_dump(mode="json")),
            "status": FixtureStatus.COMPLETED.value,
        },
    )
    return Fixture.model_validate(dict(assert_some(row)._mapping))


async def sql_delete_fixture(fixture_id: FixtureId) -> None:
    query = "DELETE FROM fixtures WHERE id = :fixture_id"
    await database.execute(query=query, values={"fixture_id": fixture_id})
