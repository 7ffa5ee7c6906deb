from collections.abc import Sequence
from enum import auto
from typing import Self

from pydantic import BaseModel, Field, computed_field, model_validator

from matchday.utils.id_types import FixtureId, TeamId
from matchday.utils.types import EnumAutoStr, EnumValues


class FormCode(EnumValues):
    WIN = "W"
    DRAW = "D"
    LOSS = "L"


class QualificationDestination(EnumAutoStr):
    KNOCKOUT = auto()
    PLAYOFFS = auto()
    ELIMINATED = auto()


class StandingsEntry(BaseModel):
    team_id: TeamId
    played: int = 0
    wins: int = 0
    draws: int = 0
    losses: int = 0
    points: int = 0
    goals_for: int = 0
    goals_against: int = 0
    form: list[FormCode] = Field(default_factory=list)
    position: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against


def ensure_unique_teams(standings: Sequence[StandingsEntry]) -> None:
    team_ids = [entry.team_id for entry in standings]
    if len(team_ids) != len(set(team_ids)):
        raise ValueError("A team can only have one standings entry per table")


class QualificationRule(BaseModel):
    position: int = Field(ge=1)
    destination: QualificationDestination
    knockout_round: str | None = None
    is_best_loser_candidate: bool = False


class QualifiedTeam(BaseModel):
    team_id: TeamId
    original_position: int
    qualified_as: str
    destination: QualificationDestination
    knockout_round: str | None = None


class CompetitionGroup(BaseModel):
    name: str
    standings: list[StandingsEntry] = Field(default_factory=list)
    fixture_ids: list[FixtureId] = Field(default_factory=list)
    qualification_rules: list[QualificationRule] = Field(default_factory=list)
    qualified_teams: list[QualifiedTeam] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_group(self) -> Self:
        ensure_unique_teams(self.standings)
        positions = [rule.position for rule in self.qualification_rules]
        if len(positions) != len(set(positions)):
            raise ValueError("Every group position can only have one qualification rule")
        return self

    def team_ids(self) -> list[TeamId]:
        return [entry.team_id for entry in self.standings]


class KnockoutRound(BaseModel):
    name: str
    fixture_format: str | None = None
    fixture_ids: list[FixtureId] = Field(default_factory=list)
    team_ids: list[TeamId] = Field(default_factory=list)
    completed: bool = False
