from typing import Any

import pytest
from fastapi.testclient import TestClient

from matchday.app import app
from matchday.logic.errors import AlreadyCompletedError
from matchday.logic.standings.table import initialize_standings
from matchday.models.competition import FixtureResultBody
from matchday.models.db.competition import CompetitionFormat, LeagueState
from matchday.routes import fixtures as fixtures_routes
from matchday.utils.id_types import FixtureId, TeamId, UserId
from tests.unit_tests.fakes import FakeStore, make_competition, make_fixture


def _league_store() -> FakeStore:
    competition = make_competition(
        3,
        CompetitionFormat.LEAGUE,
        [1, 2],
        state=LeagueState(table=initialize_standings([TeamId(1), TeamId(2)])),
    )
    return FakeStore([competition], [make_fixture(5, 1, 2, 3)])


@pytest.mark.asyncio
async def test_complete_fixture_route_passes_actor(monkeypatch: pytest.MonkeyPatch) -> None:
    store = _league_store()
    store.install(monkeypatch)

    response = await fixtures_routes.complete_fixture(
        FixtureId(5),
        FixtureResultBody.model_validate({"result": {"home_score": 0, "away_score": 2}}),
        UserId(42),
    )

    assert response.data.competition is not None
    assert isinstance(response.data.competition.state, LeagueState)
    assert response.data.competition.state.table[0].team_id == 2
    assert store.audit_logs[0]["actor_id"] == 42


def test_domain_errors_are_mapped_to_json(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_complete_fixture_result(*_: Any, **__: Any) -> None:
        raise AlreadyCompletedError("Fixture 5 already has a result")

    monkeypatch.setattr(fixtures_routes, "complete_fixture_result", fake_complete_fixture_result)

    response = TestClient(app).post(
        "/fixtures/5/result",
        json={"result": {"home_score": 1, "away_score": 0}},
        headers={"X-Actor-Id": "42"},
    )

    assert response.status_code == 409
    assert response.json() == {
        "detail": "Fixture 5 already has a result",
        "code": "ALREADY_COMPLETED",
    }


def test_standings_route(monkeypatch: pytest.MonkeyPatch) -> None:
    _league_store().install(monkeypatch)

    response = TestClient(app).get("/competitions/3/standings")

    assert response.status_code == 200
    rows = response.json()["data"]
    assert [row["team_id"] for row in rows] == [1, 2]
    assert rows[0]["goal_difference"] == 0


def test_unknown_competition_is_404(monkeypatch: pytest.MonkeyPatch) -> None:
    FakeStore([], []).install(monkeypatch)

    response = TestClient(app).get("/competitions/9/stats")

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_invalid_result_body_is_rejected() -> None:
    response = TestClient(app).post(
        "/fixtures/5/result",
        json={"result": {"home_score": 2, "away_score": 1, "home_penalty": 4, "away_penalty": 3}},
    )

    assert response.status_code == 422
