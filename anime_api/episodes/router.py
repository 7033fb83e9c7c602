"""Episodes API endpoint."""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from anime_api.app_state import AppState
from anime_api.cache import get_or_set
from anime_api.episodes.aggregator import cache_key
from anime_api.episodes.schemas import ErrorResponse, ProviderBundle
from anime_api.exceptions import AggregationError
from anime_api.rate_limit import limiter
from anime_api.settings import settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/episodes", tags=["Episodes"])


def get_app_state(request: Request) -> AppState:
    """Dependency injection for application state."""
    return request.app.state.app_state


@router.get(
    "/{anime_id}",
    response_model=list[ProviderBundle],
    responses={500: {"model": ErrorResponse}},
)
@limiter.limit(settings.episodes_rate_limit)
async def get_episodes(
    request: Request,
    anime_id: str,
    app_state: AppState = Depends(get_app_state)
):
    """Episodes of an anime grouped by provider, cached per anime."""
    try:
        bundles = await get_or_set(
            app_state.cache,
            cache_key(anime_id),
            lambda: app_state.aggregator.aggregate(anime_id),
            app_state.cache_ttl_seconds,
        )
    except AggregationError:
        raise
    except Exception as e:
        logger.exception(f"Error aggregating episodes for: {anime_id}")
        raise AggregationError(f"unexpected failure for {anime_id}") from e

    return JSONResponse(content=bundles)
