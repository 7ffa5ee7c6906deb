from collections.abc import Awaitable, Callable

from matchday.database import database
from matchday.logic.audit import AuditAction, log_action
from matchday.logic.errors import InvalidTransitionError, NotFoundError
from matchday.logic.standings import groups as group_stage
from matchday.logic.standings import knockout
from matchday.logic.standings.table import initialize_standings
from matchday.models.competition import CompetitionStatsView, GroupView, KnockoutRoundView
from matchday.models.db.competition import (
    Competition,
    CompetitionFormat,
    CompetitionState,
    CompetitionStatus,
    HybridState,
    KnockoutState,
    LeagueState,
)
from matchday.models.db.fixture import Fixture, FixtureStatus
from matchday.models.db.standings import (
    CompetitionGroup,
    KnockoutRound,
    QualificationRule,
    StandingsEntry,
)
from matchday.sql.competitions import (
    sql_get_competition,
    sql_lock_competition,
    sql_update_competition_document,
)
from matchday.sql.fixtures import sql_delete_fixture, sql_get_fixture, sql_get_fixtures_by_ids
from matchday.utils.id_types import CompetitionId, FixtureId, TeamId, UserId
from matchday.utils.logging import logger


async def get_competition_or_raise(competition_id: CompetitionId) -> Competition:
    competition = await sql_get_competition(competition_id)
    if competition is None:
        raise NotFoundError(f"Competition {competition_id} does not exist")
    return competition


def _require_format(competition: Competition, *formats: CompetitionFormat) -> None:
    if competition.format not in formats:
        raise InvalidTransitionError(
            f"Operation is not available for {competition.format.value} competitions"
        )


def _require_pending(competition: Competition) -> None:
    if competition.status is not CompetitionStatus.PENDING:
        raise InvalidTransitionError(
            f"Competition {competition.id} has already started, its groups are fixed"
        )


async def _get_competition_fixture(competition: Competition, fixture_id: FixtureId) -> Fixture:
    fixture = await sql_get_fixture(fixture_id)
    if fixture is None or fixture.competition_id != competition.id:
        raise NotFoundError(f"Fixture {fixture_id} does not exist in {competition.name}")
    return fixture


def _require_unplayed(fixture: Fixture, destination: str) -> None:
    # A result is applied once, to the structures the fixture belonged to at completion.
    if fixture.status is FixtureStatus.COMPLETED:
        raise InvalidTransitionError(
            f"Fixture {fixture.id} already has a result and cannot be added to {destination}"
        )


async def _get_round_fixtures(round_: KnockoutRound) -> dict[FixtureId, Fixture]:
    return await sql_get_fixtures_by_ids(round_.fixture_ids)


async def _mutate_competition(
    competition_id: CompetitionId,
    mutate: Callable[[Competition], Awaitable[Competition]],
    *,
    actor_id: UserId | None,
    message: str,
) -> Competition:
    """Run one structural edit of a competition document under the competition lock."""
    async with database.transaction():
        await sql_lock_competition(competition_id)
        competition = await get_competition_or_raise(competition_id)
        updated = await mutate(competition)
        await sql_update_competition_document(
            competition_id, stats=updated.stats, state=updated.state, status=updated.status
        )

    logger.info(f"{message} (competition {competition_id})")
    await log_action(
        actor_id=actor_id,
        action=AuditAction.UPDATE,
        entity="competition",
        entity_id=competition_id,
        message=message,
        previous_values=competition.model_dump(mode="json", include={"state", "status"}),
        new_values=updated.model_dump(mode="json", include={"state", "status"}),
    )
    return updated


def _with_state(competition: Competition, state: CompetitionState) -> Competition:
    return competition.model_copy(update={"state": state})


def _bracket_rounds(competition: Competition) -> list[KnockoutRound]:
    match competition.state:
        case HybridState() | KnockoutState() as state:
            return state.knockout_rounds
        case _:
            raise InvalidTransitionError(
                f"{competition.format.value} competitions have no knockout rounds"
            )


def _with_bracket_rounds(competition: Competition, rounds: list[KnockoutRound]) -> Competition:
    return _with_state(
        competition, competition.state.model_copy(update={"knockout_rounds": rounds})
    )


def _groups(competition: Competition) -> list[CompetitionGroup]:
    match competition.state:
        case HybridState() as state:
            return state.groups
        case _:
            raise InvalidTransitionError(f"{competition.format.value} competitions have no groups")


def _with_groups(competition: Competition, groups: list[CompetitionGroup]) -> Competition:
    return _with_state(competition, competition.state.model_copy(update={"groups": groups}))


async def initialize_league_table(
    competition_id: CompetitionId, *, actor_id: UserId | None = None
) -> Competition:
    async def mutate(competition: Competition) -> Competition:
        _require_format(competition, CompetitionFormat.LEAGUE)
        assert isinstance(competition.state, LeagueState)
        table = initialize_standings(competition.team_ids, competition.state.table)
        return competition.model_copy(
            update={
                "state": competition.state.model_copy(update={"table": table}),
                "status": CompetitionStatus.ONGOING,
            }
        )

    return await _mutate_competition(
        competition_id, mutate, actor_id=actor_id, message="Initialized league table"
    )


async def add_knockout_round(
    competition_id: CompetitionId,
    name: str,
    fixture_format: str | None = None,
    *,
    actor_id: UserId | None = None,
) -> Competition:
    async def mutate(competition: Competition) -> Competition:
        rounds = knockout.add_round(_bracket_rounds(competition), name, fixture_format)
        return _with_bracket_rounds(competition, rounds)

    return await _mutate_competition(
        competition_id, mutate, actor_id=actor_id, message=f"Added knockout round {name!r}"
    )


async def assign_fixture_to_round(
    competition_id: CompetitionId,
    round_name: str,
    fixture_id: FixtureId,
    *,
    actor_id: UserId | None = None,
) -> Competition:
    async def mutate(competition: Competition) -> Competition:
        rounds = _bracket_rounds(competition)
        fixture = await _get_competition_fixture(competition, fixture_id)
        _require_unplayed(fixture, f"knockout round {round_name!r}")
        if isinstance(competition.state, HybridState) and (
            group_stage.find_group_index_for_fixture(competition.state.groups, fixture_id)
            is not None
        ):
            raise InvalidTransitionError(
                f"Fixture {fixture_id} is a group fixture and cannot join the bracket"
            )
        return _with_bracket_rounds(
            competition, knockout.assign_fixture_to_round(rounds, round_name, fixture)
        )

    return await _mutate_competition(
        competition_id,
        mutate,
        actor_id=actor_id,
        message=f"Assigned fixture {fixture_id} to knockout round {round_name!r}",
    )


async def remove_fixture_from_round(
    competition_id: CompetitionId,
    round_name: str,
    fixture_id: FixtureId,
    *,
    actor_id: UserId | None = None,
) -> Competition:
    async def mutate(competition: Competition) -> Competition:
        rounds = _bracket_rounds(competition)
        fixture = await _get_competition_fixture(competition, fixture_id)
        if fixture.status is FixtureStatus.COMPLETED:
            raise InvalidTransitionError(
                f"Fixture {fixture_id} is completed and stays in its round"
            )
        round_ = rounds[knockout.get_round_index(rounds, round_name)]
        return _with_bracket_rounds(
            competition,
            knockout.remove_fixture_from_round(
                rounds, round_name, fixture_id, await _get_round_fixtures(round_)
            ),
        )

    return await _mutate_competition(
        competition_id,
        mutate,
        actor_id=actor_id,
        message=f"Removed fixture {fixture_id} from knockout round {round_name!r}",
    )


async def create_group(
    competition_id: CompetitionId,
    name: str,
    team_ids: list[TeamId],
    qualification_rules: list[QualificationRule],
    *,
    actor_id: UserId | None = None,
) -> Competition:
    async def mutate(competition: Competition) -> Competition:
        groups = _groups(competition)
        _require_pending(competition)
        return _with_groups(
            competition,
            group_stage.create_group(
                groups, name, team_ids, qualification_rules, competition.team_ids
            ),
        )

    return await _mutate_competition(
        competition_id, mutate, actor_id=actor_id, message=f"Created group {name!r}"
    )


async def add_team_to_group(
    competition_id: CompetitionId,
    group_name: str,
    team_id: TeamId,
    *,
    actor_id: UserId | None = None,
) -> Competition:
    async def mutate(competition: Competition) -> Competition:
        groups = _groups(competition)
        _require_pending(competition)
        return _with_groups(
            competition,
            group_stage.add_team_to_group(groups, group_name, team_id, competition.team_ids),
        )

    return await _mutate_competition(
        competition_id,
        mutate,
        actor_id=actor_id,
        message=f"Added team {team_id} to group {group_name!r}",
    )


async def remove_team_from_group(
    competition_id: CompetitionId,
    group_name: str,
    team_id: TeamId,
    *,
    actor_id: UserId | None = None,
) -> Competition:
    async def mutate(competition: Competition) -> Competition:
        groups = _groups(competition)
        _require_pending(competition)
        group = groups[group_stage.get_group_index(groups, group_name)]
        fixtures_by_id = await sql_get_fixtures_by_ids(group.fixture_ids)
        return _with_groups(
            competition,
            group_stage.remove_team_from_group(groups, group_name, team_id, fixtures_by_id),
        )

    return await _mutate_competition(
        competition_id,
        mutate,
        actor_id=actor_id,
        message=f"Removed team {team_id} from group {group_name!r}",
    )


async def assign_fixture_to_group(
    competition_id: CompetitionId,
    group_name: str,
    fixture_id: FixtureId,
    *,
    actor_id: UserId | None = None,
) -> Competition:
    async def mutate(competition: Competition) -> Competition:
        groups = _groups(competition)
        fixture = await _get_competition_fixture(competition, fixture_id)
        _require_unplayed(fixture, f"group {group_name!r}")
        rounds = _bracket_rounds(competition)
        if knockout.find_round_index_for_fixture(rounds, fixture_id) is not None:
            raise InvalidTransitionError(
                f"Fixture {fixture_id} is a knockout fixture and cannot join a group"
            )
        return _with_groups(
            competition, group_stage.assign_fixture_to_group(groups, group_name, fixture)
        )

    return await _mutate_competition(
        competition_id,
        mutate,
        actor_id=actor_id,
        message=f"Assigned fixture {fixture_id} to group {group_name!r}",
    )


async def remove_fixture_from_group(
    competition_id: CompetitionId,
    group_name: str,
    fixture_id: FixtureId,
    *,
    actor_id: UserId | None = None,
) -> Competition:
    async def mutate(competition: Competition) -> Competition:
        groups = _groups(competition)
        fixture = await _get_competition_fixture(competition, fixture_id)
        if fixture.status is FixtureStatus.COMPLETED:
            raise InvalidTransitionError(
                f"Fixture {fixture_id} is completed and stays in its group"
            )
        return _with_groups(
            competition, group_stage.remove_fixture_from_group(groups, group_name, fixture_id)
        )

    return await _mutate_competition(
        competition_id,
        mutate,
        actor_id=actor_id,
        message=f"Removed fixture {fixture_id} from group {group_name!r}",
    )


def _without_fixture(
    state: CompetitionState,
    fixture_id: FixtureId,
    first_round_fixtures: dict[FixtureId, Fixture],
) -> CompetitionState:
    if isinstance(state, LeagueState):
        return state

    update: dict[str, list[KnockoutRound] | list[CompetitionGroup]] = {}
    rounds = state.knockout_rounds
    round_index = knockout.find_round_index_for_fixture(rounds, fixture_id)
    if round_index is not None:
        update["knockout_rounds"] = knockout.remove_fixture_from_round(
            rounds, rounds[round_index].name, fixture_id, first_round_fixtures
        )

    if isinstance(state, HybridState):
        group_index = group_stage.find_group_index_for_fixture(state.groups, fixture_id)
        if group_index is not None:
            update["groups"] = group_stage.remove_fixture_from_group(
                state.groups, state.groups[group_index].name, fixture_id
            )

    return state.model_copy(update=update)


async def delete_fixture(fixture_id: FixtureId, *, actor_id: UserId | None = None) -> None:
    """Delete a fixture that has no result yet, dropping it from its round or group."""
    fixture = await sql_get_fixture(fixture_id)
    if fixture is None:
        raise NotFoundError(f"Fixture {fixture_id} does not exist")

    async with database.transaction():
        competition = None
        if fixture.competition_id is not None:
            await sql_lock_competition(fixture.competition_id)
            competition = await get_competition_or_raise(fixture.competition_id)

        locked_fixture = await sql_get_fixture(fixture_id, for_update=True)
        if locked_fixture is None:
            raise NotFoundError(f"Fixture {fixture_id} does not exist")
        if locked_fixture.status is FixtureStatus.COMPLETED:
            raise InvalidTransitionError(
                f"Fixture {fixture_id} is completed and cannot be deleted"
            )

        if competition is not None:
            first_round_fixtures: dict[FixtureId, Fixture] = {}
            state = competition.state
            if not isinstance(state, LeagueState) and state.knockout_rounds:
                first_round_fixtures = await _get_round_fixtures(state.knockout_rounds[0])
            await sql_update_competition_document(
                competition.id,
                stats=competition.stats,
                state=_without_fixture(competition.state, fixture_id, first_round_fixtures),
                status=competition.status,
            )
        await sql_delete_fixture(fixture_id)

    logger.info(f"Deleted fixture {fixture_id}")
    await log_action(
        actor_id=actor_id,
        action=AuditAction.DELETE,
        entity="fixture",
        entity_id=fixture_id,
        message=f"Deleted fixture {fixture_id}",
        previous_values=locked_fixture.model_dump(
            mode="json", include={"competition_id", "home_team_id", "away_team_id", "status"}
        ),
    )


async def get_standings(competition_id: CompetitionId) -> list[StandingsEntry]:
    competition = await get_competition_or_raise(competition_id)
    match competition.state:
        case LeagueState() as league:
            return league.table
        case _:
            raise InvalidTransitionError(
                f"{competition.format.value} competitions have no league table"
            )


async def _get_group_views(groups: list[CompetitionGroup]) -> list[GroupView]:
    fixtures_by_id = await sql_get_fixtures_by_ids(
        [fixture_id for group in groups for fixture_id in group.fixture_ids]
    )
    return [
        GroupView(
            **group.model_dump(exclude={"standings"}),
            standings=group.standings,
            fixtures=[
                fixtures_by_id[fixture_id]
                for fixture_id in group.fixture_ids
                if fixture_id in fixtures_by_id
            ],
        )
        for group in groups
    ]


async def get_groups(competition_id: CompetitionId) -> list[GroupView]:
    competition = await get_competition_or_raise(competition_id)
    return await _get_group_views(_groups(competition))


async def get_group(competition_id: CompetitionId, group_name: str) -> GroupView:
    competition = await get_competition_or_raise(competition_id)
    groups = _groups(competition)
    group = groups[group_stage.get_group_index(groups, group_name)]
    [group_view] = await _get_group_views([group])
    return group_view


async def get_knockout_rounds(competition_id: CompetitionId) -> list[KnockoutRoundView]:
    competition = await get_competition_or_raise(competition_id)
    rounds = _bracket_rounds(competition)
    fixtures_by_id = await sql_get_fixtures_by_ids(
        [fixture_id for round_ in rounds for fixture_id in round_.fixture_ids]
    )
    return knockout.get_knockout_round_views(rounds, fixtures_by_id)


async def get_competition_stats(competition_id: CompetitionId) -> CompetitionStatsView:
    competition = await get_competition_or_raise(competition_id)
    return CompetitionStatsView.from_stats(competition.stats)
