from typing import Generic, TypeVar

from pydantic import BaseModel

from matchday.models.competition import (
    CompetitionStatsView,
    FixtureCompletion,
    GroupView,
    KnockoutRoundView,
)
from matchday.models.db.competition import Competition
from matchday.models.db.standings import StandingsEntry


class SuccessResponse(BaseModel):
    success: bool = True


DataT = TypeVar("DataT")


class DataResponse(BaseModel, Generic[DataT]):
    data: DataT


class CompetitionResponse(DataResponse[Competition]):
    pass


class StandingsResponse(DataResponse[list[StandingsEntry]]):
    pass


class GroupsResponse(DataResponse[list[GroupView]]):
    pass


class GroupResponse(DataResponse[GroupView]):
    pass


class KnockoutRoundsResponse(DataResponse[list[KnockoutRoundView]]):
    pass


class CompetitionStatsResponse(DataResponse[CompetitionStatsView]):
    pass


class FixtureCompletionResponse(DataResponse[FixtureCompletion]):
    pass
