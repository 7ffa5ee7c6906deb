from collections import Counter

from matchday.models.db.fixture import Fixture, Lineup, MatchEventType
from matchday.models.db.player import PlayerStatDelta, PlayerStatField
from matchday.sql.players import sql_apply_player_stat_delta
from matchday.utils.id_types import CompetitionId, PlayerId
from matchday.utils.logging import logger

GOALKEEPER_POSITIONS = frozenset({"GK", "GOALKEEPER"})

_STAT_FIELD_BY_EVENT_TYPE = {
    MatchEventType.GOAL: PlayerStatField.GOALS,
    MatchEventType.OWN_GOAL: PlayerStatField.OWN_GOALS,
    MatchEventType.ASSIST: PlayerStatField.ASSISTS,
    MatchEventType.YELLOW_CARD: PlayerStatField.YELLOW_CARDS,
    MatchEventType.RED_CARD: PlayerStatField.RED_CARDS,
}


def _get_starting_goalkeepers(lineup: Lineup) -> list[PlayerId]:
    return [
        player.player_id
        for player in lineup.starting_xi
        if player.position is not None and player.position.upper() in GOALKEEPER_POSITIONS
    ]


def get_player_stat_deltas(fixture: Fixture) -> list[PlayerStatDelta]:
    """
    Derive the counter increments a completed fixture earns its players.

    Everyone named in either lineup gets one appearance. Events map one-to-one onto goals,
    own goals, assists and cards, substitutions earn nothing. Starting goalkeepers of a side
    that conceded nothing get a clean sheet.
    """
    counts: Counter[tuple[PlayerId, PlayerStatField]] = Counter()

    appearing_player_ids = dict.fromkeys(
        [*fixture.home_lineup.player_ids(), *fixture.away_lineup.player_ids()]
    )
    for player_id in appearing_player_ids:
        counts[(player_id, PlayerStatField.APPEARANCES)] += 1

    for event in fixture.match_events:
        stat_field = _STAT_FIELD_BY_EVENT_TYPE.get(event.event_type)
        if stat_field is not None:
            counts[(event.player_id, stat_field)] += 1

    if fixture.result is not None:
        if fixture.result.away_score == 0:
            for player_id in _get_starting_goalkeepers(fixture.home_lineup):
                counts[(player_id, PlayerStatField.CLEAN_SHEETS)] += 1
        if fixture.result.home_score == 0:
            for player_id in _get_starting_goalkeepers(fixture.away_lineup):
                counts[(player_id, PlayerStatField.CLEAN_SHEETS)] += 1

    return [
        PlayerStatDelta(player_id=player_id, stat_field=stat_field, count=count)
        for (player_id, stat_field), count in counts.items()
    ]


async def apply_player_stat_deltas(
    deltas: list[PlayerStatDelta], competition_id: CompetitionId | None
) -> list[str]:
    """Apply every delta, returning a note for each one that could not be stored."""
    notes = []
    for delta in deltas:
        try:
            await sql_apply_player_stat_delta(
                delta.player_id, delta.stat_field, delta.count, competition_id
            )
        except Exception as exc:
            logger.warning(
                f"Could not apply {delta.stat_field.value} +{delta.count} "
                f"to player {delta.player_id}: {exc}"
            )
            notes.append(
                f"Statistic {delta.stat_field.value} of player {delta.player_id} was not updated"
            )
    return notes
