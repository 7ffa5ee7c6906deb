#!/usr/bin/env python3
import argparse
import asyncio
from itertools import combinations

from heliclockter import datetime_utc, timedelta

from matchday.database import database
from matchday.logic.competitions import (
    add_knockout_round,
    assign_fixture_to_round,
    initialize_league_table,
)
from matchday.logic.fixture_results import complete_fixture_result
from matchday.logic.standings.outcome import determine_outcome, get_winner_team_id
from matchday.models.competition import FixtureResultBody
from matchday.models.db.competition import CompetitionFormat
from matchday.models.db.fixture import (
    Fixture,
    FixtureResult,
    Lineup,
    LineupPlayer,
    MatchEvent,
    MatchEventType,
)
from matchday.models.db.team import Team
from matchday.sql.competitions import sql_create_competition
from matchday.sql.fixtures import sql_create_fixture, sql_update_fixture_details
from matchday.sql.players import sql_create_player
from matchday.sql.teams import sql_create_team
from matchday.utils.id_types import CompetitionId, TeamId
from matchday.utils.types import assert_some

TEAM_NAMES = [
    "Harbour Town",
    "Northgate Rovers",
    "Millbrook United",
    "Eastfield Athletic",
    "Castle Vale",
    "Riverside Wanderers",
    "Westmoor City",
    "Ashdown Albion",
]

POSITIONS = ["GK", "DF", "DF", "DF", "DF", "MF", "MF", "MF", "FW", "FW", "FW", "MF", "FW"]


def determine_score(seed1: int, seed2: int, round_index: int) -> tuple[int, int]:
    home = (seed1 * 3 + round_index) % 4
    away = (seed2 * 2 + round_index + 1) % 3
    return home, away


async def create_team_with_squad(name: str, suffix: str) -> tuple[Team, Lineup]:
    team = await sql_create_team(f"{name} {suffix}".strip(), shorthand=name[:3].upper())
    squad = [
        await sql_create_player(f"{team.shorthand} player {index + 1}", team.id, position)
        for index, position in enumerate(POSITIONS)
    ]
    lineup = Lineup(
        starting_xi=[
            LineupPlayer(player_id=player.id, position=player.position) for player in squad[:11]
        ],
        substitutes=[
            LineupPlayer(player_id=player.id, position=player.position) for player in squad[11:]
        ],
    )
    return team, lineup


def build_result_body(
    fixture: Fixture, lineups: dict[TeamId, Lineup], score: tuple[int, int], penalties: bool
) -> FixtureResultBody:
    home_score, away_score = score
    events = [
        MatchEvent(
            event_type=MatchEventType.GOAL,
            player_id=lineups[fixture.home_team_id].starting_xi[8 + goal % 3].player_id,
            team_id=fixture.home_team_id,
            minute=10 + goal * 17,
        )
        for goal in range(home_score)
    ] + [
        MatchEvent(
            event_type=MatchEventType.GOAL,
            player_id=lineups[fixture.away_team_id].starting_xi[8 + goal % 3].player_id,
            team_id=fixture.away_team_id,
            minute=15 + goal * 19,
        )
        for goal in range(away_score)
    ]
    return FixtureResultBody(
        result=FixtureResult(
            home_score=home_score,
            away_score=away_score,
            home_penalty=5 if penalties else None,
            away_penalty=4 if penalties else None,
        ),
        match_events=events,
    )


async def schedule_fixture(
    competition_id: CompetitionId,
    home: Team,
    away: Team,
    lineups: dict[TeamId, Lineup],
    week: int,
) -> Fixture:
    fixture = await sql_create_fixture(
        home.id,
        away.id,
        competition_id,
        match_week=week,
        scheduled_at=datetime_utc.now() + timedelta(days=7 * week),
    )
    fixture = fixture.model_copy(
        update={"home_lineup": lineups[home.id], "away_lineup": lineups[away.id]}
    )
    await sql_update_fixture_details(fixture)
    return fixture


async def seed_league(teams: list[Team], lineups: dict[TeamId, Lineup], name: str) -> None:
    competition = await sql_create_competition(
        name, CompetitionFormat.LEAGUE, [team.id for team in teams]
    )
    await initialize_league_table(competition.id)

    for week, (home, away) in enumerate(combinations(teams, 2), start=1):
        fixture = await schedule_fixture(competition.id, home, away, lineups, week)
        score = determine_score(teams.index(home), teams.index(away), week)
        completion = await complete_fixture_result(
            fixture.id, build_result_body(fixture, lineups, score, penalties=False)
        )
        for note in completion.notes:
            print(f"  note: {note}")

    print(f"Seeded league {name!r} with {len(teams)} teams")


async def seed_knockout(teams: list[Team], lineups: dict[TeamId, Lineup], name: str) -> None:
    competition = await sql_create_competition(
        name, CompetitionFormat.KNOCKOUT, [team.id for team in teams]
    )
    round_names = ["Quarter-finals", "Semi-finals", "Final"]
    for round_name in round_names:
        await add_knockout_round(competition.id, round_name)

    entrants = list(teams)
    for round_index, round_name in enumerate(round_names):
        fixtures = []
        for home, away in zip(entrants[::2], entrants[1::2]):
            fixture = await schedule_fixture(competition.id, home, away, lineups, round_index + 1)
            await assign_fixture_to_round(competition.id, round_name, fixture.id)
            fixtures.append(fixture)

        winners = []
        for fixture in fixtures:
            home_score, away_score = determine_score(
                fixture.home_team_id, fixture.away_team_id, round_index
            )
            completion = await complete_fixture_result(
                fixture.id,
                build_result_body(
                    fixture,
                    lineups,
                    (home_score, away_score),
                    penalties=home_score == away_score,
                ),
            )
            outcome = determine_outcome(assert_some(completion.fixture.result))
            winners.append(assert_some(get_winner_team_id(fixture, outcome)))
            print(f"  {round_name}: fixture {fixture.id} -> {completion.bracket_advancement.value}")

        entrants = [next(team for team in teams if team.id == winner) for winner in winners]

    print(f"Seeded knockout {name!r}, winner: {entrants[0].name}")


async def async_main() -> None:
    parser = argparse.ArgumentParser(
        description=(
            "Seed sample data: teams with squads, a played league and a played knockout bracket."
        )
    )
    parser.add_argument("--suffix", type=str, default="", help="Appended to every team name.")
    parser.add_argument("--league-name", type=str, default="Sample League")
    parser.add_argument("--cup-name", type=str, default="Sample Cup")
    args = parser.parse_args()

    await database.connect()
    try:
        teams = []
        lineups: dict[TeamId, Lineup] = {}
        for name in TEAM_NAMES:
            team, lineup = await create_team_with_squad(name, args.suffix)
            teams.append(team)
            lineups[team.id] = lineup

        await seed_league(teams, lineups, args.league_name)
        await seed_knockout(teams, lineups, args.cup_name)
    finally:
        await database.disconnect()


if __name__ == "__main__":
    asyncio.run(async_main())
