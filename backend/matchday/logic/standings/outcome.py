from enum import auto

from matchday.models.db.fixture import Fixture, FixtureResult
from matchday.models.db.standings import FormCode
from matchday.utils.id_types import TeamId
from matchday.utils.types import EnumAutoStr


class FixtureOutcome(EnumAutoStr):
    HOME_WIN = auto()
    AWAY_WIN = auto()
    DRAW = auto()


def determine_outcome(result: FixtureResult) -> FixtureOutcome:
    """Penalties only decide a fixture when the score is level and both sides took them."""
    if result.home_score > result.away_score:
        return FixtureOutcome.HOME_WIN
    if result.home_score < result.away_score:
        return FixtureOutcome.AWAY_WIN

    if result.home_penalty is None or result.away_penalty is None:
        return FixtureOutcome.DRAW
    if result.home_penalty > result.away_penalty:
        return FixtureOutcome.HOME_WIN
    if result.home_penalty < result.away_penalty:
        return FixtureOutcome.AWAY_WIN
    return FixtureOutcome.DRAW


def form_code_for_side(outcome: FixtureOutcome, *, is_home: bool) -> FormCode:
    match outcome:
        case FixtureOutcome.DRAW:
            return FormCode.DRAW
        case FixtureOutcome.HOME_WIN:
            return FormCode.WIN if is_home else FormCode.LOSS
        case FixtureOutcome.AWAY_WIN:
            return FormCode.LOSS if is_home else FormCode.WIN


def get_winner_team_id(fixture: Fixture, outcome: FixtureOutcome) -> TeamId | None:
    match outcome:
        case FixtureOutcome.HOME_WIN:
            return fixture.home_team_id
        case FixtureOutcome.AWAY_WIN:
            return fixture.away_team_id
        case FixtureOutcome.DRAW:
            return None
