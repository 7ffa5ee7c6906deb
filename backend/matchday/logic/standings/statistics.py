from matchday.logic.standings.outcome import FixtureOutcome
from matchday.models.db.competition import CompetitionAggregateStats
from matchday.models.db.fixture import FixtureResult, MatchStatistics


def update_running_average(
    current_average: float, games_played_before: int, new_sample: float
) -> float:
    """
    Blend one new sample into an average over `games_played_before` games.

    Works for outcome percentages (stored as fractions, samples are 0 or 1) as well as for
    per-game averages such as cards. No rounding happens here.
    """
    if games_played_before < 0:
        raise ValueError(f"games_played_before must be non-negative, got {games_played_before}")

    implied_total = current_average * games_played_before
    return (implied_total + new_sample) / (games_played_before + 1)


def apply_result_to_aggregate_stats(
    stats: CompetitionAggregateStats,
    games_played_before: int,
    outcome: FixtureOutcome,
    result: FixtureResult,
    statistics: MatchStatistics | None,
) -> CompetitionAggregateStats:
    update: dict[str, float] = {
        "total_goals": stats.total_goals + result.home_score + result.away_score,
        "home_wins_percentage": update_running_average(
            stats.home_wins_percentage,
            games_played_before,
            int(outcome is FixtureOutcome.HOME_WIN),
        ),
        "away_wins_percentage": update_running_average(
            stats.away_wins_percentage,
            games_played_before,
            int(outcome is FixtureOutcome.AWAY_WIN),
        ),
        "draws_percentage": update_running_average(
            stats.draws_percentage,
            games_played_before,
            int(outcome is FixtureOutcome.DRAW),
        ),
    }

    # Card averages only move when the fixture reported its statistics.
    if statistics is not None:
        update["yellow_cards_avg"] = update_running_average(
            stats.yellow_cards_avg,
            games_played_before,
            statistics.home.yellow_cards + statistics.away.yellow_cards,
        )
        update["red_cards_avg"] = update_running_average(
            stats.red_cards_avg,
            games_played_before,
            statistics.home.red_cards + statistics.away.red_cards,
        )

    return stats.model_copy(update=update)
