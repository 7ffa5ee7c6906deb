import pytest

from matchday.logic.errors import AlreadyCompletedError, InvalidTransitionError, NotFoundError
from matchday.logic.fixture_results import complete_fixture_result, merge_statistics
from matchday.logic.standings.groups import assign_fixture_to_group, create_group
from matchday.logic.standings.knockout import add_round, assign_fixture_to_round
from matchday.logic.standings.table import initialize_standings
from matchday.models.competition import FixtureResultBody, KnockoutAdvancement
from matchday.models.db.competition import (
    CompetitionFormat,
    CompetitionStatus,
    HybridState,
    KnockoutState,
    LeagueState,
)
from matchday.models.db.fixture import (
    FixtureResult,
    FixtureStatus,
    LineupPlayer,
    MatchStatistics,
    MatchStatisticsSide,
)
from matchday.models.db.standings import FormCode
from matchday.utils.id_types import CompetitionId, FixtureId, PlayerId, TeamId, UserId
from tests.unit_tests.fakes import FakeStore, make_competition, make_fixture

TEAM_A, TEAM_B, TEAM_C, TEAM_D = 1, 2, 3, 4


def _league_store(*fixtures: tuple[int, int, int]) -> FakeStore:
    competition = make_competition(
        7,
        CompetitionFormat.LEAGUE,
        [TEAM_A, TEAM_B, TEAM_C],
        state=LeagueState(
            table=initialize_standings([TeamId(TEAM_A), TeamId(TEAM_B), TeamId(TEAM_C)])
        ),
    )
    return FakeStore(
        [competition],
        [make_fixture(fixture_id, home, away, 7) for fixture_id, home, away in fixtures],
    )


def _knockout_store() -> FakeStore:
    quarter_final = make_fixture(1, TEAM_A, TEAM_B, 8)
    other_quarter_final = make_fixture(2, TEAM_C, TEAM_D, 8)
    final = make_fixture(3, TEAM_A, TEAM_C, 8)
    rounds = add_round(add_round([], "QF"), "SF")
    rounds = assign_fixture_to_round(rounds, "QF", quarter_final)
    rounds = assign_fixture_to_round(rounds, "QF", other_quarter_final)
    competition = make_competition(
        8,
        CompetitionFormat.KNOCKOUT,
        [TEAM_A, TEAM_B, TEAM_C, TEAM_D],
        state=KnockoutState(knockout_rounds=rounds),
        status=CompetitionStatus.ONGOING,
    )
    return FakeStore([competition], [quarter_final, other_quarter_final, final])


def _body(home_score: int, away_score: int, **kwargs: object) -> FixtureResultBody:
    return FixtureResultBody.model_validate(
        {"result": {"home_score": home_score, "away_score": away_score}, **kwargs}
    )


@pytest.mark.asyncio
async def test_league_result_updates_table_and_stats(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _league_store((1, TEAM_A, TEAM_B))
    store.install(monkeypatch)

    completion = await complete_fixture_result(FixtureId(1), _body(2, 1), actor_id=UserId(5))

    assert completion.fixture.status is FixtureStatus.COMPLETED
    assert completion.bracket_advancement is KnockoutAdvancement.NOT_APPLICABLE
    assert completion.notes == []

    competition = store.competitions[CompetitionId(7)]
    assert competition == completion.competition
    assert competition.status is CompetitionStatus.ONGOING
    assert isinstance(competition.state, LeagueState)
    winner, third, loser = competition.state.table
    winner_row = (winner.team_id, winner.position, winner.played, winner.wins, winner.points)
    assert winner_row == (TEAM_A, 1, 1, 1, 3)
    assert winner.goal_difference == 1
    assert winner.form == [FormCode.WIN]
    assert (third.team_id, third.played) == (TEAM_C, 0)
    assert (loser.team_id, loser.played, loser.losses, loser.points) == (TEAM_B, 1, 1, 0)
    assert loser.goal_difference == -1
    assert loser.form == [FormCode.LOSS]

    assert competition.stats.total_goals == 3
    assert competition.stats.home_wins_percentage == 1.0
    assert competition.stats.draws_percentage == 0.0
    assert store.locked == [CompetitionId(7)]
    assert [log["entity"] for log in store.audit_logs] == ["fixture", "competition"]
    assert store.audit_logs[0]["actor_id"] == UserId(5)


@pytest.mark.asyncio
async def test_second_result_is_rejected_without_changes(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _league_store((1, TEAM_A, TEAM_B))
    store.install(monkeypatch)
    await complete_fixture_result(FixtureId(1), _body(2, 1))
    fixture_after_first = store.fixtures[FixtureId(1)].model_dump_json()
    competition_after_first = store.competitions[CompetitionId(7)].model_dump_json()

    with pytest.raises(AlreadyCompletedError):
        await complete_fixture_result(FixtureId(1), _body(0, 4))

    assert store.fixtures[FixtureId(1)].model_dump_json() == fixture_after_first
    assert store.competitions[CompetitionId(7)].model_dump_json() == competition_after_first


@pytest.mark.asyncio
async def test_draw_gives_both_teams_a_point(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _league_store((1, TEAM_A, TEAM_B))
    store.install(monkeypatch)

    completion = await complete_fixture_result(FixtureId(1), _body(1, 1))

    assert completion.competition is not None
    assert isinstance(completion.competition.state, LeagueState)
    entries = {entry.team_id: entry for entry in completion.competition.state.table}
    for team_id in (TEAM_A, TEAM_B):
        assert (entries[team_id].draws, entries[team_id].wins, entries[team_id].losses) == (1, 0, 0)
        assert entries[team_id].points == 1
    assert completion.competition.stats.draws_percentage == 1.0


@pytest.mark.asyncio
async def test_aggregate_stats_use_previous_game_count(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _league_store((1, TEAM_A, TEAM_B), (2, TEAM_C, TEAM_A))
    store.install(monkeypatch)

    await complete_fixture_result(
        FixtureId(1),
        _body(2, 1, statistics={"home": {"yellow_cards": 2}, "away": {"yellow_cards": 2}}),
    )
    completion = await complete_fixture_result(
        FixtureId(2),
        _body(0, 0, statistics={"home": {"yellow_cards": 1}, "away": {"red_cards": 1}}),
    )

    assert completion.competition is not None
    stats = completion.competition.stats
    assert stats.home_wins_percentage == pytest.approx(0.5)
    assert stats.draws_percentage == pytest.approx(0.5)
    assert stats.away_wins_percentage == pytest.approx(0.0)
    assert stats.yellow_cards_avg == pytest.approx(2.5)
    assert stats.red_cards_avg == pytest.approx(0.5)
    assert stats.total_goals == 3


@pytest.mark.asyncio
async def test_knockout_winner_advances(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _knockout_store()
    store.install(monkeypatch)

    completion = await complete_fixture_result(
        FixtureId(1), _body(3, 0), competition_id=CompetitionId(8)
    )

    assert completion.bracket_advancement is KnockoutAdvancement.ADVANCED
    state = store.competitions[CompetitionId(8)].state
    assert isinstance(state, KnockoutState)
    assert TEAM_A in state.knockout_rounds[1].team_ids
    assert TEAM_B not in state.knockout_rounds[1].team_ids
    assert state.knockout_rounds[0].completed is False
    assert store.competitions[CompetitionId(8)].stats.total_goals == 3


@pytest.mark.asyncio
async def test_knockout_shootout_decides_the_tie(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _knockout_store()
    store.install(monkeypatch)

    await complete_fixture_result(
        FixtureId(1),
        FixtureResultBody(
            result=FixtureResult(home_score=1, away_score=1, home_penalty=2, away_penalty=4)
        ),
    )

    state = store.competitions[CompetitionId(8)].state
    assert isinstance(state, KnockoutState)
    assert state.knockout_rounds[1].team_ids == [TEAM_B]


@pytest.mark.asyncio
async def test_knockout_draw_is_rejected_before_any_write(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _knockout_store()
    store.install(monkeypatch)
    competition_before = store.competitions[CompetitionId(8)]

    with pytest.raises(InvalidTransitionError):
        await complete_fixture_result(FixtureId(1), _body(1, 1))

    assert store.fixtures[FixtureId(1)].status is FixtureStatus.SCHEDULED
    assert store.fixtures[FixtureId(1)].result is None
    assert store.competitions[CompetitionId(8)] is competition_before
    assert store.player_deltas == []


@pytest.mark.asyncio
async def test_last_round_is_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    final = make_fixture(2, TEAM_A, TEAM_C, 9)
    competition = make_competition(
        9,
        CompetitionFormat.KNOCKOUT,
        [TEAM_A, TEAM_C],
        state=KnockoutState(
            knockout_rounds=assign_fixture_to_round(add_round([], "Final"), "Final", final)
        ),
    )
    store = FakeStore([competition], [final])
    store.install(monkeypatch)

    completion = await complete_fixture_result(FixtureId(2), _body(0, 1))

    assert completion.bracket_advancement is KnockoutAdvancement.NO_NEXT_ROUND
    assert completion.notes == ["Fixture 2 was played in the last round, nobody advanced"]
    assert completion.fixture.status is FixtureStatus.COMPLETED
    state = store.competitions[CompetitionId(9)].state
    assert isinstance(state, KnockoutState)
    assert state.knockout_rounds[0].completed is True
    assert store.competitions[CompetitionId(9)].stats.away_wins_percentage == 1.0


@pytest.mark.asyncio
async def test_fixture_outside_bracket_still_completes(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _knockout_store()
    store.install(monkeypatch)

    completion = await complete_fixture_result(FixtureId(3), _body(2, 0))

    assert completion.bracket_advancement is KnockoutAdvancement.ROUND_NOT_FOUND
    assert len(completion.notes) == 1
    assert store.fixtures[FixtureId(3)].status is FixtureStatus.COMPLETED
    assert store.competitions[CompetitionId(8)].stats.total_goals == 2


@pytest.mark.asyncio
async def test_hybrid_group_fixture_updates_only_its_group(monkeypatch: pytest.MonkeyPatch) -> None:
    group_fixture = make_fixture(1, TEAM_A, TEAM_B, 10)
    groups = create_group(
        [],
        "A",
        [TeamId(TEAM_A), TeamId(TEAM_B)],
        [],
        [TeamId(TEAM_A), TeamId(TEAM_B), TeamId(TEAM_C), TeamId(TEAM_D)],
    )
    groups = create_group(
        groups, "B", [TeamId(TEAM_C), TeamId(TEAM_D)], [], [TeamId(TEAM_C), TeamId(TEAM_D)]
    )
    groups = assign_fixture_to_group(groups, "A", group_fixture)
    competition = make_competition(
        10,
        CompetitionFormat.HYBRID,
        [TEAM_A, TEAM_B, TEAM_C, TEAM_D],
        state=HybridState(groups=groups, knockout_rounds=add_round([], "Final")),
    )
    store = FakeStore([competition], [group_fixture])
    store.install(monkeypatch)

    completion = await complete_fixture_result(FixtureId(1), _body(0, 2))

    assert completion.bracket_advancement is KnockoutAdvancement.NOT_APPLICABLE
    state = store.competitions[CompetitionId(10)].state
    assert isinstance(state, HybridState)
    assert [entry.team_id for entry in state.groups[0].standings] == [TEAM_B, TEAM_A]
    assert state.groups[1] == groups[1]
    assert state.knockout_rounds == competition.state.knockout_rounds


@pytest.mark.asyncio
async def test_friendly_skips_competition(monkeypatch: pytest.MonkeyPatch) -> None:
    store = FakeStore([], [make_fixture(4, TEAM_A, TEAM_B)])
    store.install(monkeypatch)

    completion = await complete_fixture_result(FixtureId(4), _body(5, 5))

    assert completion.competition is None
    assert completion.bracket_advancement is KnockoutAdvancement.NOT_APPLICABLE
    assert store.locked == []
    assert store.fixtures[FixtureId(4)].result == FixtureResult(home_score=5, away_score=5)


@pytest.mark.asyncio
async def test_unknown_fixture(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _league_store((1, TEAM_A, TEAM_B))
    store.install(monkeypatch)

    with pytest.raises(NotFoundError):
        await complete_fixture_result(FixtureId(99), _body(1, 0))
    with pytest.raises(NotFoundError):
        await complete_fixture_result(FixtureId(1), _body(1, 0), competition_id=CompetitionId(8))


@pytest.mark.asyncio
async def test_event_for_foreign_team_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _league_store((1, TEAM_A, TEAM_B))
    store.install(monkeypatch)

    with pytest.raises(InvalidTransitionError):
        await complete_fixture_result(
            FixtureId(1),
            _body(
                1,
                0,
                match_events=[
                    {"event_type": "GOAL", "player_id": 1, "team_id": TEAM_C, "minute": 10}
                ],
            ),
        )

    assert store.fixtures[FixtureId(1)].status is FixtureStatus.SCHEDULED


@pytest.mark.asyncio
async def test_player_stat_failure_does_not_undo_standings(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _league_store((1, TEAM_A, TEAM_B))
    store.failing_player_ids = {PlayerId(11)}
    store.install(monkeypatch)

    completion = await complete_fixture_result(
        FixtureId(1),
        _body(
            1,
            0,
            home_substitutes=[LineupPlayer(player_id=PlayerId(12))],
            match_events=[{"event_type": "GOAL", "player_id": 11, "team_id": TEAM_A, "minute": 44}],
        ),
    )

    assert completion.notes == ["Statistic GOALS of player 11 was not updated"]
    assert (PlayerId(12), "APPEARANCES") in {
        (player_id, stat_field.value) for player_id, stat_field, _, _ in store.player_deltas
    }
    assert completion.competition is not None
    assert isinstance(completion.competition.state, LeagueState)
    assert completion.competition.state.table[0].points == 3
    assert len(store.fixtures[FixtureId(1)].match_events) == 1


def test_merge_statistics_keeps_unreported_fields() -> None:
    existing = MatchStatistics(home=MatchStatisticsSide(corners=4, fouls=9))
    reported = MatchStatistics.model_validate({"home": {"fouls": 11, "yellow_cards": 1}})

    merged = merge_statistics(existing, reported)

    assert merged is not None
    assert merged.home.corners == 4
    assert merged.home.fouls == 11
    assert merged.home.yellow_cards == 1
    assert merge_statistics(None, reported) is reported
    assert merge_statistics(existing, None) is existing
