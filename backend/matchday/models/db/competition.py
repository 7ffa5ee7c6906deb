from enum import auto
from typing import Annotated, Any, Literal, Self

from heliclockter import datetime_utc
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from matchday.models.db.shared import BaseModelORM, parse_json_column
from matchday.models.db.standings import (
    CompetitionGroup,
    KnockoutRound,
    StandingsEntry,
    ensure_unique_teams,
)
from matchday.utils.id_types import CompetitionId, TeamId
from matchday.utils.types import EnumAutoStr


class CompetitionFormat(EnumAutoStr):
    LEAGUE = auto()
    KNOCKOUT = auto()
    HYBRID = auto()


class CompetitionStatus(EnumAutoStr):
    PENDING = auto()
    ONGOING = auto()
    COMPLETED = auto()


class CompetitionAggregateStats(BaseModel):
    """
    Running competition-wide statistics.

    The three outcome percentages are stored as unrounded fractions in [0, 1], the card
    values as unrounded per-game averages. Rounding only happens in `CompetitionStatsView`.
    """

    model_config = ConfigDict(frozen=True)

    total_goals: int = 0
    home_wins_percentage: float = 0
    away_wins_percentage: float = 0
    draws_percentage: float = 0
    yellow_cards_avg: float = 0
    red_cards_avg: float = 0


class LeagueState(BaseModel):
    format: Literal["LEAGUE"] = "LEAGUE"
    table: list[StandingsEntry] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_table(self) -> Self:
        ensure_unique_teams(self.table)
        return self


class HybridState(BaseModel):
    format: Literal["HYBRID"] = "HYBRID"
    groups: list[CompetitionGroup] = Field(default_factory=list)
    knockout_rounds: list[KnockoutRound] = Field(default_factory=list)


class KnockoutState(BaseModel):
    format: Literal["KNOCKOUT"] = "KNOCKOUT"
    knockout_rounds: list[KnockoutRound] = Field(default_factory=list)


CompetitionState = Annotated[
    LeagueState | HybridState | KnockoutState, Field(discriminator="format")
]


def empty_state_for_format(competition_format: CompetitionFormat) -> CompetitionState:
    match competition_format:
        case CompetitionFormat.LEAGUE:
            return LeagueState()
        case CompetitionFormat.HYBRID:
            return HybridState()
        case CompetitionFormat.KNOCKOUT:
            return KnockoutState()


class CompetitionInsertable(BaseModelORM):
    name: str
    format: CompetitionFormat
    status: CompetitionStatus = CompetitionStatus.PENDING
    team_ids: list[TeamId] = Field(default_factory=list)
    created: datetime_utc


class Competition(CompetitionInsertable):
    id: CompetitionId
    stats: CompetitionAggregateStats = Field(default_factory=CompetitionAggregateStats)
    state: CompetitionState

    @field_validator("team_ids", "stats", "state", mode="before")
    @classmethod
    def parse_json(cls, value: Any) -> Any:
        return parse_json_column(value)

    @model_validator(mode="after")
    def validate_state_format(self) -> Self:
        if self.state.format != self.format.value:
            raise ValueError(
                f"Competition state is {self.state.format}, expected {self.format.value}"
            )
        return self
