from fastapi import APIRouter, Depends

from matchday.config import config
from matchday.logic import competitions
from matchday.models.competition import (
    GroupCreateBody,
    GroupFixtureBody,
    GroupTeamBody,
    KnockoutRoundCreateBody,
    KnockoutRoundFixtureBody,
)
from matchday.routes.models import (
    CompetitionResponse,
    CompetitionStatsResponse,
    GroupResponse,
    GroupsResponse,
    KnockoutRoundsResponse,
    StandingsResponse,
)
from matchday.routes.util import actor_id_dependency
from matchday.utils.id_types import CompetitionId, FixtureId, TeamId, UserId

router = APIRouter(prefix=config.api_prefix)


@router.get("/competitions/{competition_id}", response_model=CompetitionResponse)
async def get_competition(competition_id: CompetitionId) -> CompetitionResponse:
    return CompetitionResponse(data=await competitions.get_competition_or_raise(competition_id))


@router.get("/competitions/{competition_id}/standings", response_model=StandingsResponse)
async def get_standings(competition_id: CompetitionId) -> StandingsResponse:
    return StandingsResponse(data=await competitions.get_standings(competition_id))


@router.post("/competitions/{competition_id}/standings", response_model=CompetitionResponse)
async def initialize_league_table(
    competition_id: CompetitionId,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> CompetitionResponse:
    return CompetitionResponse(
        data=await competitions.initialize_league_table(competition_id, actor_id=actor_id)
    )


@router.get("/competitions/{competition_id}/stats", response_model=CompetitionStatsResponse)
async def get_competition_stats(competition_id: CompetitionId) -> CompetitionStatsResponse:
    return CompetitionStatsResponse(data=await competitions.get_competition_stats(competition_id))


@router.get("/competitions/{competition_id}/knockout_rounds", response_model=KnockoutRoundsResponse)
async def get_knockout_rounds(competition_id: CompetitionId) -> KnockoutRoundsResponse:
    return KnockoutRoundsResponse(data=await competitions.get_knockout_rounds(competition_id))


@router.post("/competitions/{competition_id}/knockout_rounds", response_model=CompetitionResponse)
async def create_knockout_round(
    competition_id: CompetitionId,
    body: KnockoutRoundCreateBody,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> CompetitionResponse:
    return CompetitionResponse(
        data=await competitions.add_knockout_round(
            competition_id, body.name, body.fixture_format, actor_id=actor_id
        )
    )


@router.put(
    "/competitions/{competition_id}/knockout_rounds/fixtures/{fixture_id}",
    response_model=CompetitionResponse,
)
async def assign_fixture_to_round(
    competition_id: CompetitionId,
    fixture_id: FixtureId,
    body: KnockoutRoundFixtureBody,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> CompetitionResponse:
    return CompetitionResponse(
        data=await competitions.assign_fixture_to_round(
            competition_id, body.round_name, fixture_id, actor_id=actor_id
        )
    )


@router.delete(
    "/competitions/{competition_id}/knockout_rounds/{round_name}/fixtures/{fixture_id}",
    response_model=CompetitionResponse,
)
async def remove_fixture_from_round(
    competition_id: CompetitionId,
    round_name: str,
    fixture_id: FixtureId,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> CompetitionResponse:
    return CompetitionResponse(
        data=await competitions.remove_fixture_from_round(
            competition_id, round_name, fixture_id, actor_id=actor_id
        )
    )


@router.get("/competitions/{competition_id}/groups", response_model=GroupsResponse)
async def get_groups(competition_id: CompetitionId) -> GroupsResponse:
    return GroupsResponse(data=await competitions.get_groups(competition_id))


@router.get("/competitions/{competition_id}/groups/{group_name}", response_model=GroupResponse)
async def get_group(competition_id: CompetitionId, group_name: str) -> GroupResponse:
    return GroupResponse(data=await competitions.get_group(competition_id, group_name))


@router.post("/competitions/{competition_id}/groups", response_model=CompetitionResponse)
async def create_group(
    competition_id: CompetitionId,
    body: GroupCreateBody,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> CompetitionResponse:
    return CompetitionResponse(
        data=await competitions.create_group(
            competition_id,
            body.name,
            body.team_ids,
            body.qualification_rules,
            actor_id=actor_id,
        )
    )


@router.put(
    "/competitions/{competition_id}/groups/fixtures/{fixture_id}",
    response_model=CompetitionResponse,
)
async def assign_fixture_to_group(
    competition_id: CompetitionId,
    fixture_id: FixtureId,
    body: GroupFixtureBody,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> CompetitionResponse:
    return CompetitionResponse(
        data=await competitions.assign_fixture_to_group(
            competition_id, body.group_name, fixture_id, actor_id=actor_id
        )
    )


@router.delete(
    "/competitions/{competition_id}/groups/{group_name}/fixtures/{fixture_id}",
    response_model=CompetitionResponse,
)
async def remove_fixture_from_group(
    competition_id: CompetitionId,
    group_name: str,
    fixture_id: FixtureId,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> CompetitionResponse:
    return CompetitionResponse(
        data=await competitions.remove_fixture_from_group(
            competition_id, group_name, fixture_id, actor_id=actor_id
        )
    )


@router.put(
    "/competitions/{competition_id}/groups/teams/{team_id}",
    response_model=CompetitionResponse,
)
async def add_team_to_group(
    competition_id: CompetitionId,
    team_id: TeamId,
    body: GroupTeamBody,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> CompetitionResponse:
    return CompetitionResponse(
        data=await competitions.add_team_to_group(
            competition_id, body.group_name, team_id, actor_id=actor_id
        )
    )


@router.delete(
    "/competitions/{competition_id}/groups/{group_name}/teams/{team_id}",
    response_model=CompetitionResponse,
)
async def remove_team_from_group(
    competition_id: CompetitionId,
    group_name: str,
    team_id: TeamId,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> CompetitionResponse:
    return CompetitionResponse(
        data=await competitions.remove_team_from_group(
            competition_id, group_name, team_id, actor_id=actor_id
        )
    )
