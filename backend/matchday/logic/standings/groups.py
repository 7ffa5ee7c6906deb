from collections.abc import Collection, Sequence

from matchday.logic.errors import DuplicateNameError, InvalidTransitionError, NotFoundError
from matchday.logic.standings.table import (
    apply_result_to_table,
    initialize_standings,
    sort_and_rank,
)
from matchday.models.db.fixture import Fixture, FixtureResult
from matchday.models.db.standings import (
    CompetitionGroup,
    QualificationRule,
    QualifiedTeam,
    StandingsEntry,
)
from matchday.utils.id_types import FixtureId, TeamId


def get_group_index(groups: Sequence[CompetitionGroup], group_name: str) -> int:
    index = next((i for i, group in enumerate(groups) if group.name == group_name), None)
    if index is None:
        raise NotFoundError(f"Group {group_name!r} does not exist")
    return index


def find_group_index_for_fixture(
    groups: Sequence[CompetitionGroup], fixture_id: FixtureId
) -> int | None:
    return next((i for i, group in enumerate(groups) if fixture_id in group.fixture_ids), None)


def _replace_group(
    groups: Sequence[CompetitionGroup], index: int, group: CompetitionGroup
) -> list[CompetitionGroup]:
    return [group if i == index else current for i, current in enumerate(groups)]


def _check_teams_available(
    groups: Sequence[CompetitionGroup],
    team_ids: Collection[TeamId],
    registered_team_ids: Collection[TeamId],
) -> None:
    unregistered = [team_id for team_id in team_ids if team_id not in registered_team_ids]
    if len(unregistered) > 0:
        raise NotFoundError(f"Teams {unregistered} are not registered in this competition")

    for group in groups:
        taken = [team_id for team_id in team_ids if team_id in group.team_ids()]
        if len(taken) > 0:
            raise InvalidTransitionError(f"Teams {taken} are already in group {group.name!r}")


def create_group(
    groups: Sequence[CompetitionGroup],
    name: str,
    team_ids: Sequence[TeamId],
    qualification_rules: Sequence[QualificationRule],
    registered_team_ids: Collection[TeamId],
) -> list[CompetitionGroup]:
    if any(group.name == name for group in groups):
        raise DuplicateNameError(f"Group {name!r} already exists")

    _check_teams_available(groups, team_ids, registered_team_ids)
    group = CompetitionGroup(
        name=name,
        standings=initialize_standings(team_ids),
        qualification_rules=list(qualification_rules),
    )
    return [*groups, group]


def add_team_to_group(
    groups: Sequence[CompetitionGroup],
    group_name: str,
    team_id: TeamId,
    registered_team_ids: Collection[TeamId],
) -> list[CompetitionGroup]:
    index = get_group_index(groups, group_name)
    _check_teams_available(groups, [team_id], registered_team_ids)

    group = groups[index]
    entry = StandingsEntry(team_id=team_id, position=len(group.standings) + 1)
    return _replace_group(
        groups, index, group.model_copy(update={"standings": [*group.standings, entry]})
    )


def remove_team_from_group(
    groups: Sequence[CompetitionGroup],
    group_name: str,
    team_id: TeamId,
    fixtures_by_id: dict[FixtureId, Fixture],
) -> list[CompetitionGroup]:
    index = get_group_index(groups, group_name)
    group = groups[index]
    if team_id not in group.team_ids():
        raise NotFoundError(f"Team {team_id} is not in group {group_name!r}")

    for fixture_id in group.fixture_ids:
        fixture = fixtures_by_id.get(fixture_id)
        if fixture is not None and team_id in fixture.team_ids():
            raise InvalidTransitionError(
                f"Team {team_id} still plays fixture {fixture_id} in group {group_name!r}"
            )

    standings = [
        entry.model_copy(update={"position": position})
        for position, entry in enumerate(
            (entry for entry in group.standings if entry.team_id != team_id), start=1
        )
    ]
    return _replace_group(groups, index, group.model_copy(update={"standings": standings}))


def assign_fixture_to_group(
    groups: Sequence[CompetitionGroup], group_name: str, fixture: Fixture
) -> list[CompetitionGroup]:
    index = get_group_index(groups, group_name)
    if find_group_index_for_fixture(groups, fixture.id) is not None:
        raise InvalidTransitionError(f"Fixture {fixture.id} already belongs to a group")

    group = groups[index]
    if any(team_id not in group.team_ids() for team_id in fixture.team_ids()):
        raise InvalidTransitionError(
            f"Both teams of fixture {fixture.id} must be members of group {group_name!r}"
        )

    return _replace_group(
        groups, index, group.model_copy(update={"fixture_ids": [*group.fixture_ids, fixture.id]})
    )


def remove_fixture_from_group(
    groups: Sequence[CompetitionGroup], group_name: str, fixture_id: FixtureId
) -> list[CompetitionGroup]:
    index = get_group_index(groups, group_name)
    group = groups[index]
    if fixture_id not in group.fixture_ids:
        raise NotFoundError(f"Fixture {fixture_id} is not part of group {group_name!r}")

    fixture_ids = [current for current in group.fixture_ids if current != fixture_id]
    return _replace_group(groups, index, group.model_copy(update={"fixture_ids": fixture_ids}))


def get_qualified_teams(group: CompetitionGroup) -> list[QualifiedTeam]:
    """Map every qualification rule onto the team currently holding that position."""
    team_by_position = {entry.position: entry.team_id for entry in group.standings}
    return [
        QualifiedTeam(
            team_id=team_by_position[rule.position],
            original_position=rule.position,
            qualified_as=(
                f"best loser of {group.name}"
                if rule.is_best_loser_candidate
                else f"{group.name} #{rule.position}"
            ),
            destination=rule.destination,
            knockout_round=rule.knockout_round,
        )
        for rule in sorted(group.qualification_rules, key=lambda rule: rule.position)
        if rule.position in team_by_position
    ]


def apply_result_to_groups(
    groups: Sequence[CompetitionGroup], fixture: Fixture, result: FixtureResult
) -> list[CompetitionGroup]:
    """
    Update the standings of the single group the fixture belongs to.

    Every other group is returned untouched.
    """
    index = find_group_index_for_fixture(groups, fixture.id)
    if index is None:
        raise NotFoundError(f"Fixture {fixture.id} does not belong to any group")

    group = groups[index]
    standings = sort_and_rank(apply_result_to_table(group.standings, fixture, result))
    updated_group = group.model_copy(update={"standings": standings})
    updated_group = updated_group.model_copy(
        update={"qualified_teams": get_qualified_teams(updated_group)}
    )
    return _replace_group(groups, index, updated_group)
