from fastapi import APIRouter, Depends

from matchday.config import config
from matchday.logic.competitions import delete_fixture
from matchday.logic.fixture_results import complete_fixture_result
from matchday.models.competition import FixtureResultBody
from matchday.routes.models import FixtureCompletionResponse, SuccessResponse
from matchday.routes.util import actor_id_dependency
from matchday.utils.id_types import CompetitionId, FixtureId, UserId

router = APIRouter(prefix=config.api_prefix)


@router.post("/fixtures/{fixture_id}/result", response_model=FixtureCompletionResponse)
async def complete_fixture(
    fixture_id: FixtureId,
    body: FixtureResultBody,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> FixtureCompletionResponse:
    return FixtureCompletionResponse(
        data=await complete_fixture_result(fixture_id, body, actor_id=actor_id)
    )


@router.post(
    "/competitions/{competition_id}/fixtures/{fixture_id}/result",
    response_model=FixtureCompletionResponse,
)
async def complete_competition_fixture(
    competition_id: CompetitionId,
    fixture_id: FixtureId,
    body: FixtureResultBody,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> FixtureCompletionResponse:
    return FixtureCompletionResponse(
        data=await complete_fixture_result(
            fixture_id, body, competition_id=competition_id, actor_id=actor_id
        )
    )


@router.delete("/fixtures/{fixture_id}", response_model=SuccessResponse)
async def delete_fixture_by_id(
    fixture_id: FixtureId,
    actor_id: UserId | None = Depends(actor_id_dependency),
) -> SuccessResponse:
    await delete_fixture(fixture_id, actor_id=actor_id)
    return SuccessResponse()
