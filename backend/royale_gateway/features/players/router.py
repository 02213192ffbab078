"""Player batch endpoint."""

from fastapi import APIRouter

from royale_gateway.core.dependencies import CredentialDep
from .dependencies import PlayerBatchServiceDep, RequestedTagsDep
from .schemas import PlayerBatchResponse

router = APIRouter(prefix="/players", tags=["players"])


@router.get(
    "",
    response_model=PlayerBatchResponse,
    response_model_exclude_none=True,
)
async def get_player_projections(
    tags: RequestedTagsDep,
    credential: CredentialDep,
    service: PlayerBatchServiceDep,
) -> PlayerBatchResponse:
    """
    Fetch projections for a batch of players.

    Results come back in request order. A single failing tag fails the whole
    batch; no partial results are returned.

    Examples:
        GET /players?tags=%23ABC123,%23DEF456
    """
    items = await service.resolve_batch(credential, tags)
    return PlayerBatchResponse(items=items)
