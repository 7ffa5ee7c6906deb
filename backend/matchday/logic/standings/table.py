from collections.abc import Iterable, Sequence

from matchday.logic.errors import AlreadyInitializedError, InvalidTransitionError, NotFoundError
from matchday.logic.standings.form import push_form_result
from matchday.logic.standings.outcome import determine_outcome, form_code_for_side
from matchday.models.db.fixture import Fixture, FixtureResult
from matchday.models.db.standings import FormCode, StandingsEntry
from matchday.utils.id_types import TeamId

POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1


def initialize_standings(
    team_ids: Iterable[TeamId], existing: Sequence[StandingsEntry] = ()
) -> list[StandingsEntry]:
    if len(existing) > 0:
        raise AlreadyInitializedError("Standings table is already initialized")

    unique_team_ids = list(dict.fromkeys(team_ids))
    return [
        StandingsEntry(team_id=team_id, position=index + 1)
        for index, team_id in enumerate(unique_team_ids)
    ]


def get_entries_by_team(table: Sequence[StandingsEntry]) -> dict[TeamId, StandingsEntry]:
    entries: dict[TeamId, StandingsEntry] = {}
    for entry in table:
        if entry.team_id in entries:
            raise ValueError(f"Team {entry.team_id} has more than one standings entry")
        entries[entry.team_id] = entry
    return entries


def _apply_side_result(
    entry: StandingsEntry, *, scored: int, conceded: int, code: FormCode
) -> StandingsEntry:
    update = {
        "played": entry.played + 1,
        "goals_for": entry.goals_for + scored,
        "goals_against": entry.goals_against + conceded,
        "form": push_form_result(entry.form, code),
    }
    match code:
        case FormCode.WIN:
            update["wins"] = entry.wins + 1
            update["points"] = entry.points + POINTS_FOR_WIN
        case FormCode.DRAW:
            update["draws"] = entry.draws + 1
            update["points"] = entry.points + POINTS_FOR_DRAW
        case FormCode.LOSS:
            update["losses"] = entry.losses + 1

    return entry.model_copy(update=update)


def apply_result_to_table(
    table: Sequence[StandingsEntry], fixture: Fixture, result: FixtureResult
) -> list[StandingsEntry]:
    """
    Update the rows of both teams of a fixture, once each, from the same result.

    The returned table keeps the input order, call `sort_and_rank` afterwards.
    """
    if fixture.home_team_id == fixture.away_team_id:
        raise InvalidTransitionError("A team cannot play against itself")

    entries = get_entries_by_team(table)
    missing = [team_id for team_id in fixture.team_ids() if team_id not in entries]
    if len(missing) > 0:
        raise NotFoundError(
            f"Teams {', '.join(str(team_id) for team_id in missing)} are not in the standings"
        )

    outcome = determine_outcome(result)
    updated_entries = {
        fixture.home_team_id: _apply_side_result(
            entries[fixture.home_team_id],
            scored=result.home_score,
            conceded=result.away_score,
            code=form_code_for_side(outcome, is_home=True),
        ),
        fixture.away_team_id: _apply_side_result(
            entries[fixture.away_team_id],
            scored=result.away_score,
            conceded=result.home_score,
            code=form_code_for_side(outcome, is_home=False),
        ),
    }
    return [updated_entries.get(entry.team_id, entry) for entry in table]


def sort_and_rank(table: Sequence[StandingsEntry]) -> list[StandingsEntry]:
    # sorted() is stable, so rows level on all three keys keep their previous order.
    ordered = sorted(
        table,
        key=lambda entry: (-entry.points, -entry.goal_difference, -entry.goals_for),
    )
    return [entry.model_copy(update={"position": index + 1}) for index, entry in enumerate(ordered)]
