import pytest

from matchday.logic.errors import DuplicateNameError, InvalidTransitionError, NotFoundError
from matchday.logic.standings.knockout import (
    add_round,
    advance_on_result,
    assign_fixture_to_round,
    get_knockout_round_views,
    remove_fixture_from_round,
)
from matchday.logic.standings.outcome import FixtureOutcome
from matchday.models.competition import KnockoutAdvancement
from matchday.models.db.fixture import FixtureResult, FixtureStatus
from matchday.models.db.standings import KnockoutRound
from matchday.utils.id_types import FixtureId, TeamId
from tests.unit_tests.fakes import make_fixture

TEAM_A, TEAM_B, TEAM_C, TEAM_D = 1, 2, 3, 4


def _quarter_and_semi() -> list[KnockoutRound]:
    return add_round(add_round([], "QF"), "SF")


def test_add_round_appends_empty_round() -> None:
    rounds = add_round([], "Final", "single leg")

    assert rounds == [KnockoutRound(name="Final", fixture_format="single leg")]


def test_add_round_rejects_duplicate_name() -> None:
    with pytest.raises(DuplicateNameError):
        add_round(_quarter_and_semi(), "SF")


def test_first_round_records_fixture_teams() -> None:
    rounds = assign_fixture_to_round(_quarter_and_semi(), "QF", make_fixture(1, TEAM_A, TEAM_B))

    assert rounds[0].fixture_ids == [1]
    assert rounds[0].team_ids == [TEAM_A, TEAM_B]
    assert rounds[1].fixture_ids == []


def test_assign_to_missing_round() -> None:
    with pytest.raises(NotFoundError):
        assign_fixture_to_round(_quarter_and_semi(), "Final", make_fixture(1, TEAM_A, TEAM_B))


def test_assign_fixture_twice() -> None:
    fixture = make_fixture(1, TEAM_A, TEAM_B)
    rounds = assign_fixture_to_round(_quarter_and_semi(), "QF", fixture)

    with pytest.raises(InvalidTransitionError):
        assign_fixture_to_round(rounds, "QF", fixture)


def test_later_round_needs_advanced_teams() -> None:
    rounds = _quarter_and_semi()
    rounds[1] = rounds[1].model_copy(update={"team_ids": [TeamId(TEAM_A)]})

    with pytest.raises(InvalidTransitionError):
        assign_fixture_to_round(rounds, "SF", make_fixture(5, TEAM_A, TEAM_C))

    with pytest.raises(InvalidTransitionError):
        assign_fixture_to_round(_quarter_and_semi(), "SF", make_fixture(5, TEAM_A, TEAM_C))


def test_remove_fixture_from_round() -> None:
    rounds = assign_fixture_to_round(_quarter_and_semi(), "QF", make_fixture(1, TEAM_A, TEAM_B))

    rounds = remove_fixture_from_round(rounds, "QF", FixtureId(1), {})

    assert rounds[0].fixture_ids == []
    assert rounds[0].team_ids == []
    with pytest.raises(NotFoundError):
        remove_fixture_from_round(rounds, "QF", FixtureId(1), {})


def test_first_round_keeps_teams_of_remaining_fixtures() -> None:
    first = make_fixture(1, TEAM_A, TEAM_B)
    second = make_fixture(2, TEAM_B, TEAM_C)
    rounds = assign_fixture_to_round(_quarter_and_semi(), "QF", first)
    rounds = assign_fixture_to_round(rounds, "QF", second)
    assert rounds[0].team_ids == [TEAM_A, TEAM_B, TEAM_C]

    rounds = remove_fixture_from_round(rounds, "QF", FixtureId(2), {FixtureId(1): first})

    assert rounds[0].fixture_ids == [1]
    assert rounds[0].team_ids == [TEAM_A, TEAM_B]


def test_later_round_keeps_advanced_teams() -> None:
    fixture = make_fixture(5, TEAM_A, TEAM_C)
    rounds = _quarter_and_semi()
    rounds[1] = rounds[1].model_copy(update={"team_ids": [TeamId(TEAM_A), TeamId(TEAM_C)]})
    rounds = assign_fixture_to_round(rounds, "SF", fixture)

    rounds = remove_fixture_from_round(rounds, "SF", FixtureId(5), {})

    assert rounds[1].fixture_ids == []
    assert rounds[1].team_ids == [TEAM_A, TEAM_C]


def test_winner_advances_to_next_round() -> None:
    fixture = make_fixture(1, TEAM_A, TEAM_B)
    rounds = assign_fixture_to_round(_quarter_and_semi(), "QF", fixture)
    rounds = assign_fixture_to_round(rounds, "QF", make_fixture(2, TEAM_C, TEAM_D))

    rounds, advancement = advance_on_result(
        rounds, fixture, FixtureOutcome.HOME_WIN, {FixtureId(1)}
    )

    assert advancement is KnockoutAdvancement.ADVANCED
    assert TEAM_A in rounds[1].team_ids
    assert TEAM_B not in rounds[1].team_ids
    assert rounds[0].completed is False


def test_round_completes_with_its_last_fixture() -> None:
    first = make_fixture(1, TEAM_A, TEAM_B)
    second = make_fixture(2, TEAM_C, TEAM_D)
    rounds = assign_fixture_to_round(_quarter_and_semi(), "QF", first)
    rounds = assign_fixture_to_round(rounds, "QF", second)

    rounds, _ = advance_on_result(rounds, first, FixtureOutcome.HOME_WIN, {FixtureId(1)})
    rounds, _ = advance_on_result(
        rounds, second, FixtureOutcome.AWAY_WIN, {FixtureId(1), FixtureId(2)}
    )

    assert rounds[0].completed is True
    assert rounds[1].team_ids == [TEAM_A, TEAM_D]


def test_final_round_is_terminal() -> None:
    fixture = make_fixture(2, TEAM_A, TEAM_C)
    rounds = assign_fixture_to_round(add_round([], "Final"), "Final", fixture)

    rounds, advancement = advance_on_result(
        rounds, fixture, FixtureOutcome.AWAY_WIN, {FixtureId(2)}
    )

    assert advancement is KnockoutAdvancement.NO_NEXT_ROUND
    assert rounds[0].completed is True


def test_fixture_outside_bracket_is_reported() -> None:
    rounds = _quarter_and_semi()

    updated, advancement = advance_on_result(
        rounds, make_fixture(9, TEAM_A, TEAM_B), FixtureOutcome.HOME_WIN, {FixtureId(9)}
    )

    assert advancement is KnockoutAdvancement.ROUND_NOT_FOUND
    assert updated == rounds


def test_draw_cannot_decide_a_tie() -> None:
    fixture = make_fixture(1, TEAM_A, TEAM_B)
    rounds = assign_fixture_to_round(_quarter_and_semi(), "QF", fixture)

    with pytest.raises(InvalidTransitionError):
        advance_on_result(rounds, fixture, FixtureOutcome.DRAW, {FixtureId(1)})


def test_winner_is_not_added_twice() -> None:
    fixture = make_fixture(1, TEAM_A, TEAM_B)
    rounds = assign_fixture_to_round(_quarter_and_semi(), "QF", fixture)
    rounds[1] = rounds[1].model_copy(update={"team_ids": [TeamId(TEAM_A)]})

    rounds, _ = advance_on_result(rounds, fixture, FixtureOutcome.HOME_WIN, {FixtureId(1)})

    assert rounds[1].team_ids == [TEAM_A]


def test_bracket_view_shows_shootout_winner() -> None:
    fixture = make_fixture(
        1,
        TEAM_A,
        TEAM_B,
        status=FixtureStatus.COMPLETED,
        result=FixtureResult(home_score=1, away_score=1, home_penalty=3, away_penalty=5),
    )
    rounds = assign_fixture_to_round(add_round([], "Final"), "Final", fixture)

    [view] = get_knockout_round_views(rounds, {fixture.id: fixture})

    [row] = view.bracket
    assert row.score == (1, 1)
    assert row.penalty_score == (3, 5)
    assert row.winner_team_id == TEAM_B
    assert view.name == "Final"
