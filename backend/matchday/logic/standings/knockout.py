from collections.abc import Collection, Mapping, Sequence

from matchday.logic.errors import DuplicateNameError, InvalidTransitionError, NotFoundError
from matchday.logic.standings.outcome import FixtureOutcome, determine_outcome, get_winner_team_id
from matchday.models.competition import (
    BracketFixtureView,
    KnockoutAdvancement,
    KnockoutRoundView,
)
from matchday.models.db.fixture import Fixture
from matchday.models.db.standings import KnockoutRound
from matchday.utils.id_types import FixtureId


def get_round_index(rounds: Sequence[KnockoutRound], round_name: str) -> int:
    index = next((i for i, round_ in enumerate(rounds) if round_.name == round_name), None)
    if index is None:
        raise NotFoundError(f"Knockout round {round_name!r} does not exist")
    return index


def find_round_index_for_fixture(
    rounds: Sequence[KnockoutRound], fixture_id: FixtureId
) -> int | None:
    return next(
        (i for i, round_ in enumerate(rounds) if fixture_id in round_.fixture_ids),
        None,
    )


def _replace_round(
    rounds: Sequence[KnockoutRound], index: int, round_: KnockoutRound
) -> list[KnockoutRound]:
    return [round_ if i == index else current for i, current in enumerate(rounds)]


def add_round(
    rounds: Sequence[KnockoutRound], name: str, fixture_format: str | None = None
) -> list[KnockoutRound]:
    if any(round_.name == name for round_ in rounds):
        raise DuplicateNameError(f"Knockout round {name!r} already exists")

    return [*rounds, KnockoutRound(name=name, fixture_format=fixture_format)]


def assign_fixture_to_round(
    rounds: Sequence[KnockoutRound], round_name: str, fixture: Fixture
) -> list[KnockoutRound]:
    """
    Teams of a later round must have advanced into it before they can be paired.

    The first round has no previous round to advance from, so it takes any pairing and
    registers both teams as its entrants.
    """
    index = get_round_index(rounds, round_name)
    if find_round_index_for_fixture(rounds, fixture.id) is not None:
        raise InvalidTransitionError(f"Fixture {fixture.id} is already part of the bracket")

    round_ = rounds[index]
    team_ids = list(round_.team_ids)
    if index == 0:
        team_ids.extend(team_id for team_id in fixture.team_ids() if team_id not in team_ids)
    elif any(team_id not in round_.team_ids for team_id in fixture.team_ids()):
        raise InvalidTransitionError(
            f"Both teams of fixture {fixture.id} must have advanced into {round_name!r}"
        )

    return _replace_round(
        rounds,
        index,
        round_.model_copy(
            update={
                "fixture_ids": [*round_.fixture_ids, fixture.id],
                "team_ids": team_ids,
                "completed": False,
            }
        ),
    )


def remove_fixture_from_round(
    rounds: Sequence[KnockoutRound],
    round_name: str,
    fixture_id: FixtureId,
    fixtures_by_id: Mapping[FixtureId, Fixture],
) -> list[KnockoutRound]:
    """
    `fixtures_by_id` holds the fixtures that stay in the round.

    Entrants of the first round come from its fixtures, so a team that no longer plays any of
    them leaves the round together with its last fixture.
    """
    index = get_round_index(rounds, round_name)
    round_ = rounds[index]
    if fixture_id not in round_.fixture_ids:
        raise NotFoundError(f"Fixture {fixture_id} is not part of {round_name!r}")

    fixture_ids = [current for current in round_.fixture_ids if current != fixture_id]
    team_ids = round_.team_ids
    if index == 0:
        playing = {
            team_id
            for current in fixture_ids
            if current in fixtures_by_id
            for team_id in fixtures_by_id[current].team_ids()
        }
        team_ids = [team_id for team_id in round_.team_ids if team_id in playing]

    return _replace_round(
        rounds,
        index,
        round_.model_copy(update={"fixture_ids": fixture_ids, "team_ids": team_ids}),
    )


def advance_on_result(
    rounds: Sequence[KnockoutRound],
    fixture: Fixture,
    outcome: FixtureOutcome,
    completed_fixture_ids: Collection[FixtureId],
) -> tuple[list[KnockoutRound], KnockoutAdvancement]:
    """
    Push the winner of a completed bracket fixture into the round after its own.

    A fixture outside the bracket, or in the last round, advances nobody. That is reported
    through the returned `KnockoutAdvancement` instead of an error.
    """
    current_index = find_round_index_for_fixture(rounds, fixture.id)
    if current_index is None:
        return list(rounds), KnockoutAdvancement.ROUND_NOT_FOUND

    winner_team_id = get_winner_team_id(fixture, outcome)
    if winner_team_id is None:
        raise InvalidTransitionError(
            f"Knockout fixture {fixture.id} needs a winner, settle draws with penalties"
        )

    current_round = rounds[current_index]
    round_completed = all(
        fixture_id in completed_fixture_ids for fixture_id in current_round.fixture_ids
    )
    updated_rounds = _replace_round(
        rounds, current_index, current_round.model_copy(update={"completed": round_completed})
    )

    next_index = current_index + 1
    if next_index >= len(updated_rounds):
        return updated_rounds, KnockoutAdvancement.NO_NEXT_ROUND

    next_round = updated_rounds[next_index]
    if winner_team_id not in next_round.team_ids:
        next_round = next_round.model_copy(
            update={"team_ids": [*next_round.team_ids, winner_team_id]}
        )
    return _replace_round(updated_rounds, next_index, next_round), KnockoutAdvancement.ADVANCED


def get_bracket_fixture_view(fixture: Fixture) -> BracketFixtureView:
    result = fixture.result
    winner_team_id = None
    if result is not None:
        winner_team_id = get_winner_team_id(fixture, determine_outcome(result))

    return BracketFixtureView(
        fixture_id=fixture.id,
        team_ids=fixture.team_ids(),
        status=fixture.status,
        score=(result.home_score, result.away_score) if result is not None else None,
        penalty_score=(
            (result.home_penalty, result.away_penalty)
            if result is not None
            and result.is_penalty_shootout
            and result.home_penalty is not None
            and result.away_penalty is not None
            else None
        ),
        winner_team_id=winner_team_id,
        scheduled_at=fixture.scheduled_at,
    )


def get_knockout_round_views(
    rounds: Sequence[KnockoutRound], fixtures_by_id: dict[FixtureId, Fixture]
) -> list[KnockoutRoundView]:
    return [
        KnockoutRoundView(
            **round_.model_dump(),
            bracket=[
                get_bracket_fixture_view(fixtures_by_id[fixture_id])
                for fixture_id in round_.fixture_ids
                if fixture_id in fixtures_by_id
            ],
        )
        for round_ in rounds
    ]
