import pytest

from matchday.logic.errors import AlreadyInitializedError, InvalidTransitionError, NotFoundError
from matchday.logic.standings.table import (
    apply_result_to_table,
    initialize_standings,
    sort_and_rank,
)
from matchday.models.db.fixture import FixtureResult
from matchday.models.db.standings import FormCode, StandingsEntry
from matchday.utils.id_types import TeamId
from tests.unit_tests.fakes import make_fixture


def _entry(team_id: int, points: int, goals_for: int, goals_against: int) -> StandingsEntry:
    return StandingsEntry(
        team_id=TeamId(team_id), points=points, goals_for=goals_for, goals_against=goals_against
    )


def test_initialize_standings_zeroes_every_team() -> None:
    table = initialize_standings([TeamId(3), TeamId(1), TeamId(3), TeamId(2)])

    assert [entry.team_id for entry in table] == [3, 1, 2]
    assert [entry.position for entry in table] == [1, 2, 3]
    assert all(entry.played == 0 and entry.points == 0 and entry.form == [] for entry in table)


def test_initialize_standings_refuses_existing_table() -> None:
    table = initialize_standings([TeamId(1), TeamId(2)])

    with pytest.raises(AlreadyInitializedError):
        initialize_standings([TeamId(1), TeamId(2)], table)


def test_home_win_updates_both_rows() -> None:
    table = initialize_standings([TeamId(1), TeamId(2)])
    fixture = make_fixture(1, 1, 2)

    table = sort_and_rank(
        apply_result_to_table(table, fixture, FixtureResult(home_score=2, away_score=1))
    )
    home, away = table

    assert home.team_id == 1
    assert (home.played, home.wins, home.points, home.goal_difference) == (1, 1, 3, 1)
    assert home.form == [FormCode.WIN]
    assert home.position == 1
    assert away.team_id == 2
    assert (away.played, away.losses, away.points, away.goal_difference) == (1, 1, 0, -1)
    assert away.form == [FormCode.LOSS]
    assert away.position == 2


def test_draw_without_penalties() -> None:
    table = initialize_standings([TeamId(1), TeamId(2)])

    table = apply_result_to_table(
        table, make_fixture(1, 1, 2), FixtureResult(home_score=1, away_score=1)
    )

    for entry in table:
        assert (entry.draws, entry.wins, entry.losses, entry.points) == (1, 0, 0, 1)
        assert entry.form == [FormCode.DRAW]


def test_points_and_goal_difference_laws_hold_over_many_results() -> None:
    team_ids = [TeamId(1), TeamId(2), TeamId(3)]
    table = initialize_standings(team_ids)
    scores = [(1, 2, 3, 0), (2, 3, 1, 1), (3, 1, 2, 4), (1, 3, 0, 0), (2, 1, 5, 2)]

    for fixture_id, (home, away, home_score, away_score) in enumerate(scores, start=1):
        table = sort_and_rank(
            apply_result_to_table(
                table,
                make_fixture(fixture_id, home, away),
                FixtureResult(home_score=home_score, away_score=away_score),
            )
        )
        for entry in table:
            assert entry.points == 3 * entry.wins + entry.draws
            assert entry.played == entry.wins + entry.draws + entry.losses
            assert entry.goal_difference == entry.goals_for - entry.goals_against

    assert sum(entry.played for entry in table) == 2 * len(scores)


def test_apply_result_rejects_unknown_team() -> None:
    table = initialize_standings([TeamId(1), TeamId(2)])

    with pytest.raises(NotFoundError):
        apply_result_to_table(
            table, make_fixture(1, 1, 9), FixtureResult(home_score=1, away_score=0)
        )


def test_apply_result_rejects_duplicate_rows() -> None:
    table = [_entry(1, 0, 0, 0), _entry(1, 0, 0, 0), _entry(2, 0, 0, 0)]

    with pytest.raises(ValueError, match="more than one"):
        apply_result_to_table(
            table, make_fixture(1, 1, 2), FixtureResult(home_score=1, away_score=0)
        )


def test_apply_result_rejects_team_playing_itself() -> None:
    table = initialize_standings([TeamId(1), TeamId(2)])
    fixture = make_fixture(1, 1, 2).model_copy(update={"away_team_id": TeamId(1)})

    with pytest.raises(InvalidTransitionError):
        apply_result_to_table(table, fixture, FixtureResult(home_score=1, away_score=0))


def test_sort_and_rank_tie_breaks() -> None:
    table = [
        _entry(1, points=4, goals_for=3, goals_against=3),
        _entry(2, points=4, goals_for=5, goals_against=3),
        _entry(3, points=4, goals_for=4, goals_against=2),
        _entry(4, points=7, goals_for=1, goals_against=0),
    ]

    ranked = sort_and_rank(table)

    assert [entry.team_id for entry in ranked] == [4, 2, 3, 1]
    assert [entry.position for entry in ranked] == [1, 2, 3, 4]


def test_sort_and_rank_is_stable_for_full_ties() -> None:
    table = [_entry(5, 3, 2, 1), _entry(2, 3, 2, 1), _entry(9, 3, 2, 1)]

    ranked = sort_and_rank(table)

    assert [entry.team_id for entry in ranked] == [5, 2, 9]
