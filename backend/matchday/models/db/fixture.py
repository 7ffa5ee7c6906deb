from enum import auto
from typing import Any, Self

from heliclockter import datetime_utc
from pydantic import BaseModel, Field, field_validator, model_validator

from matchday.models.db.shared import BaseModelORM, parse_json_column
from matchday.utils.id_types import CompetitionId, FixtureId, PlayerId, TeamId
from matchday.utils.types import EnumAutoStr


class FixtureStatus(EnumAutoStr):
    SCHEDULED = auto()
    LIVE = auto()
    COMPLETED = auto()
    POSTPONED = auto()


class MatchEventType(EnumAutoStr):
    GOAL = auto()
    OWN_GOAL = auto()
    ASSIST = auto()
    YELLOW_CARD = auto()
    RED_CARD = auto()
    SUBSTITUTION = auto()


class FixtureResult(BaseModel):
    home_score: int = Field(ge=0)
    away_score: int = Field(ge=0)
    home_penalty: int | None = Field(default=None, ge=0)
    away_penalty: int | None = Field(default=None, ge=0)
    is_penalty_shootout: bool = False

    @model_validator(mode="after")
    def validate_penalties(self) -> Self:
        has_home_penalty = self.home_penalty is not None
        has_away_penalty = self.away_penalty is not None
        if has_home_penalty != has_away_penalty:
            raise ValueError("Both penalty scores are required for a penalty shootout")

        if not has_home_penalty:
            if self.is_penalty_shootout:
                raise ValueError("A penalty shootout needs both penalty scores")
            return self

        if self.home_score != self.away_score:
            raise ValueError("Penalty scores are only allowed when the score is level")

        self.is_penalty_shootout = True
        return self


class MatchEvent(BaseModel):
    event_type: MatchEventType
    player_id: PlayerId
    team_id: TeamId
    minute: int = Field(ge=0, le=150)
    # Player coming on, only set for substitutions.
    substituted_for: PlayerId | None = None


class LineupPlayer(BaseModel):
    player_id: PlayerId
    position: str | None = None


class Lineup(BaseModel):
    starting_xi: list[LineupPlayer] = Field(default_factory=list)
    substitutes: list[LineupPlayer] = Field(default_factory=list)

    def player_ids(self) -> list[PlayerId]:
        return [player.player_id for player in [*self.starting_xi, *self.substitutes]]


class MatchStatisticsSide(BaseModel):
    shots_on_target: int = Field(default=0, ge=0)
    shots_off_target: int = Field(default=0, ge=0)
    shots_blocked: int = Field(default=0, ge=0)
    corners: int = Field(default=0, ge=0)
    fouls: int = Field(default=0, ge=0)
    offsides: int = Field(default=0, ge=0)
    yellow_cards: int = Field(default=0, ge=0)
    red_cards: int = Field(default=0, ge=0)
    possession: float | None = Field(default=None, ge=0, le=100)


class MatchStatistics(BaseModel):
    home: MatchStatisticsSide = Field(default_factory=MatchStatisticsSide)
    away: MatchStatisticsSide = Field(default_factory=MatchStatisticsSide)


class FixtureInsertable(BaseModelORM):
    competition_id: CompetitionId | None = None
    home_team_id: TeamId
    away_team_id: TeamId
    status: FixtureStatus = FixtureStatus.SCHEDULED
    match_week: int | None = None
    scheduled_at: datetime_utc | None = None
    created: datetime_utc

    @model_validator(mode="after")
    def validate_teams(self) -> Self:
        if self.home_team_id == self.away_team_id:
            raise ValueError("A team cannot play against itself")
        return self


class Fixture(FixtureInsertable):
    id: FixtureId
    result: FixtureResult | None = None
    statistics: MatchStatistics | None = None
    match_events: list[MatchEvent] = Field(default_factory=list)
    home_lineup: Lineup = Field(default_factory=Lineup)
    away_lineup: Lineup = Field(default_factory=Lineup)

    @field_validator(
        "result", "statistics", "match_events", "home_lineup", "away_lineup", mode="before"
    )
    @classmethod
    def parse_json(cls, value: Any) -> Any:
        return parse_json_column(value)

    @property
    def is_friendly(self) -> bool:
        return self.competition_id is None

    def team_ids(self) -> tuple[TeamId, TeamId]:
        return self.home_team_id, self.away_team_id
