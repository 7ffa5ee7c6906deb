from collections.abc import Collection

from matchday.database import database
from matchday.logic.audit import AuditAction, log_action
from matchday.logic.errors import (
    AlreadyCompletedError,
    InvalidTransitionError,
    NotFoundError,
)
from matchday.logic.player_stats import apply_player_stat_deltas, get_player_stat_deltas
from matchday.logic.standings.groups import apply_result_to_groups, find_group_index_for_fixture
from matchday.logic.standings.knockout import advance_on_result
from matchday.logic.standings.outcome import determine_outcome
from matchday.logic.standings.statistics import apply_result_to_aggregate_stats
from matchday.logic.standings.table import apply_result_to_table, sort_and_rank
from matchday.models.competition import (
    FixtureCompletion,
    FixtureResultBody,
    KnockoutAdvancement,
)
from matchday.models.db.competition import (
    Competition,
    CompetitionStatus,
    HybridState,
    KnockoutState,
    LeagueState,
)
from matchday.models.db.fixture import (
    Fixture,
    FixtureStatus,
    MatchStatistics,
    MatchStatisticsSide,
)
from matchday.sql.competitions import (
    sql_get_competition,
    sql_get_completed_fixture_ids,
    sql_lock_competition,
    sql_update_competition_document,
)
from matchday.sql.fixtures import sql_complete_fixture, sql_get_fixture, sql_update_fixture_details
from matchday.utils.id_types import CompetitionId, FixtureId, UserId
from matchday.utils.logging import logger
from matchday.utils.types import assert_some


def _merge_statistics_side(
    existing: MatchStatisticsSide, reported: MatchStatisticsSide
) -> MatchStatisticsSide:
    return existing.model_copy(update=reported.model_dump(exclude_unset=True))


def merge_statistics(
    existing: MatchStatistics | None, reported: MatchStatistics | None
) -> MatchStatistics | None:
    if reported is None:
        return existing
    if existing is None:
        return reported

    return MatchStatistics(
        home=_merge_statistics_side(existing.home, reported.home),
        away=_merge_statistics_side(existing.away, reported.away),
    )


def merge_result_into_fixture(fixture: Fixture, body: FixtureResultBody) -> Fixture:
    """Return the fixture as it will look once completed. Nothing is persisted here."""
    for event in body.match_events:
        if event.team_id not in fixture.team_ids():
            raise InvalidTransitionError(
                f"Match event for team {event.team_id} does not belong to fixture {fixture.id}"
            )

    home_lineup = fixture.home_lineup
    if body.home_substitutes is not None:
        home_lineup = home_lineup.model_copy(update={"substitutes": body.home_substitutes})
    away_lineup = fixture.away_lineup
    if body.away_substitutes is not None:
        away_lineup = away_lineup.model_copy(update={"substitutes": body.away_substitutes})

    return fixture.model_copy(
        update={
            "result": body.result,
            "status": FixtureStatus.COMPLETED,
            "statistics": merge_statistics(fixture.statistics, body.statistics),
            "match_events": [*fixture.match_events, *body.match_events],
            "home_lineup": home_lineup,
            "away_lineup": away_lineup,
        }
    )


def apply_fixture_to_competition(
    competition: Competition,
    fixture: Fixture,
    games_played_before: int,
    completed_fixture_ids: Collection[FixtureId],
) -> tuple[Competition, KnockoutAdvancement]:
    """
    Fold one completed fixture into its competition.

    Exactly one structure is touched, chosen by the competition format: the league table,
    the group holding the fixture, or the knockout bracket. A hybrid fixture that is in no
    group is treated as a bracket fixture. `completed_fixture_ids` must already contain
    the fixture itself.
    """
    result = assert_some(fixture.result)
    outcome = determine_outcome(result)
    advancement = KnockoutAdvancement.NOT_APPLICABLE

    match competition.state:
        case LeagueState() as league:
            table = sort_and_rank(apply_result_to_table(league.table, fixture, result))
            state = league.model_copy(update={"table": table})
        case HybridState() as hybrid:
            if find_group_index_for_fixture(hybrid.groups, fixture.id) is not None:
                groups = apply_result_to_groups(hybrid.groups, fixture, result)
                state = hybrid.model_copy(update={"groups": groups})
            else:
                rounds, advancement = advance_on_result(
                    hybrid.knockout_rounds, fixture, outcome, completed_fixture_ids
                )
                state = hybrid.model_copy(update={"knockout_rounds": rounds})
        case KnockoutState() as knockout:
            rounds, advancement = advance_on_result(
                knockout.knockout_rounds, fixture, outcome, completed_fixture_ids
            )
            state = knockout.model_copy(update={"knockout_rounds": rounds})

    stats = apply_result_to_aggregate_stats(
        competition.stats, games_played_before, outcome, result, fixture.statistics
    )
    status = (
        CompetitionStatus.ONGOING
        if competition.status is CompetitionStatus.PENDING
        else competition.status
    )
    updated = competition.model_copy(update={"state": state, "stats": stats, "status": status})
    return updated, advancement


def get_advancement_notes(fixture: Fixture, advancement: KnockoutAdvancement) -> list[str]:
    match advancement:
        case KnockoutAdvancement.ROUND_NOT_FOUND:
            return [f"Fixture {fixture.id} is not part of any knockout round, nobody advanced"]
        case KnockoutAdvancement.NO_NEXT_ROUND:
            return [f"Fixture {fixture.id} was played in the last round, nobody advanced"]
        case _:
            return []


async def _lock_fixture_for_completion(
    fixture_id: FixtureId, competition_id: CompetitionId | None
) -> tuple[Fixture, Competition | None]:
    fixture = await sql_get_fixture(fixture_id)
    if fixture is None or (competition_id is not None and fixture.competition_id != competition_id):
        raise NotFoundError(f"Fixture {fixture_id} does not exist")

    # Competition lock first, fixture row second. Structural edits take them in the same order.
    competition = None
    if fixture.competition_id is not None:
        await sql_lock_competition(fixture.competition_id)
        competition = await sql_get_competition(fixture.competition_id)
        if competition is None:
            raise NotFoundError(f"Competition {fixture.competition_id} does not exist")

    locked_fixture = assert_some(await sql_get_fixture(fixture_id, for_update=True))
    if locked_fixture.status is FixtureStatus.COMPLETED:
        raise AlreadyCompletedError(f"Fixture {fixture_id} already has a result")
    return locked_fixture, competition


async def complete_fixture_result(
    fixture_id: FixtureId,
    body: FixtureResultBody,
    *,
    competition_id: CompetitionId | None = None,
    actor_id: UserId | None = None,
) -> FixtureCompletion:
    """
    Record the result of a fixture and propagate it to its competition, exactly once.

    Every check and every computation runs before the first write, so a rejected call
    leaves the fixture and the competition untouched. The result, the fixture details and
    the competition document are committed in one transaction. Player statistics and the
    audit log are collaborators: they run after the commit and can only add notes.
    """
    async with database.transaction():
        fixture, competition = await _lock_fixture_for_completion(fixture_id, competition_id)
        completed_fixture = merge_result_into_fixture(fixture, body)

        updated_competition = None
        advancement = KnockoutAdvancement.NOT_APPLICABLE
        if competition is not None:
            if competition.status is CompetitionStatus.COMPLETED:
                raise InvalidTransitionError(f"Competition {competition.id} is already finished")

            completed_before = await sql_get_completed_fixture_ids(competition.id)
            updated_competition, advancement = apply_fixture_to_competition(
                competition,
                completed_fixture,
                len(completed_before),
                {*completed_before, fixture.id},
            )

        await sql_update_fixture_details(completed_fixture)
        stored_fixture = await sql_complete_fixture(fixture.id, body.result)
        if updated_competition is not None:
            await sql_update_competition_document(
                updated_competition.id,
                stats=updated_competition.stats,
                state=updated_competition.state,
                status=updated_competition.status,
            )

    logger.info(
        f"Completed fixture {fixture.id} "
        f"({body.result.home_score}-{body.result.away_score}), "
        f"competition={fixture.competition_id}, advancement={advancement.value}"
    )

    notes = get_advancement_notes(fixture, advancement)
    for note in notes:
        logger.warning(note)

    notes.extend(
        await apply_player_stat_deltas(
            get_player_stat_deltas(stored_fixture), stored_fixture.competition_id
        )
    )

    await log_action(
        actor_id=actor_id,
        action=AuditAction.UPDATE,
        entity="fixture",
        entity_id=fixture.id,
        message=f"Completed fixture {fixture.id}",
        previous_values={"status": fixture.status.value},
        new_values={"status": stored_fixture.status.value, "result": body.result.model_dump()},
    )
    if competition is not None and updated_competition is not None:
        await log_action(
            actor_id=actor_id,
            action=AuditAction.UPDATE,
            entity="competition",
            entity_id=competition.id,
            message=f"Applied result of fixture {fixture.id} to {competition.name}",
            previous_values=competition.model_dump(mode="json", include={"stats", "state"}),
            new_values=updated_competition.model_dump(mode="json", include={"stats", "state"}),
        )

    return FixtureCompletion(
        fixture=stored_fixture,
        competition=updated_competition,
        bracket_advancement=advancement,
        notes=notes,
    )
