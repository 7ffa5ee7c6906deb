from enum import auto

from heliclockter import datetime_utc
from pydantic import BaseModel, Field

from matchday.models.db.competition import Competition, CompetitionAggregateStats
from matchday.models.db.fixture import (
    Fixture,
    FixtureResult,
    FixtureStatus,
    LineupPlayer,
    MatchEvent,
    MatchStatistics,
)
from matchday.models.db.standings import (
    CompetitionGroup,
    KnockoutRound,
    QualificationRule,
)
from matchday.utils.id_types import FixtureId, TeamId
from matchday.utils.types import EnumAutoStr


class KnockoutAdvancement(EnumAutoStr):
    ADVANCED = auto()
    NO_NEXT_ROUND = auto()
    ROUND_NOT_FOUND = auto()
    NOT_APPLICABLE = auto()


class FixtureResultBody(BaseModel):
    result: FixtureResult
    statistics: MatchStatistics | None = None
    match_events: list[MatchEvent] = Field(default_factory=list)
    home_substitutes: list[LineupPlayer] | None = None
    away_substitutes: list[LineupPlayer] | None = None


class FixtureCompletion(BaseModel):
    fixture: Fixture
    competition: Competition | None = None
    bracket_advancement: KnockoutAdvancement = KnockoutAdvancement.NOT_APPLICABLE
    notes: list[str] = Field(default_factory=list)


class KnockoutRoundCreateBody(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    fixture_format: str | None = None


class KnockoutRoundFixtureBody(BaseModel):
    round_name: str


class GroupCreateBody(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    team_ids: list[TeamId] = Field(default_factory=list)
    qualification_rules: list[QualificationRule] = Field(default_factory=list)


class GroupFixtureBody(BaseModel):
    group_name: str


class GroupTeamBody(BaseModel):
    group_name: str


class CompetitionStatsView(BaseModel):
    total_goals: int
    home_wins_percentage: float
    away_wins_percentage: float
    draws_percentage: float
    yellow_cards_avg: float
    red_cards_avg: float

    @classmethod
    def from_stats(cls, stats: CompetitionAggregateStats) -> "CompetitionStatsView":
        return cls(
            total_goals=stats.total_goals,
            home_wins_percentage=round(stats.home_wins_percentage * 100, 2),
            away_wins_percentage=round(stats.away_wins_percentage * 100, 2),
            draws_percentage=round(stats.draws_percentage * 100, 2),
            yellow_cards_avg=round(stats.yellow_cards_avg, 2),
            red_cards_avg=round(stats.red_cards_avg, 2),
        )


class BracketFixtureView(BaseModel):
    fixture_id: FixtureId
    team_ids: tuple[TeamId, TeamId]
    status: FixtureStatus
    score: tuple[int, int] | None = None
    penalty_score: tuple[int, int] | None = None
    winner_team_id: TeamId | None = None
    scheduled_at: datetime_utc | None = None


class KnockoutRoundView(KnockoutRound):
    bracket: list[BracketFixtureView] = Field(default_factory=list)


class GroupView(CompetitionGroup):
    fixtures: list[Fixture] = Field(default_factory=list)
