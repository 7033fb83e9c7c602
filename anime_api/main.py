"""Anime episodes API aggregating episode data from multiple content providers."""
import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from anime_api import __version__
from anime_api.app_state import AppState, init_app_state
from anime_api.config import HTTP_INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE
from anime_api.episodes.router import router as episodes_router
from anime_api.exceptions import EpisodesError
from anime_api.rate_limit import limiter
from anime_api.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

v1_router = APIRouter(prefix="/api/v1", tags=["v1"])


def get_app_state(request: Request) -> AppState:
    """Dependency injection for application state."""
    return request.app.state.app_state


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create shared HTTP client and cache backend at startup."""
    app_state = init_app_state()
    app.state.app_state = app_state

    logger.info("Initializing upstream clients and cache...")
    await app_state.startup(settings)
    logger.info("Startup complete")

    yield

    logger.info("Shutting down")
    await app_state.shutdown()


app = FastAPI(
    title="Anime Episodes API",
    version=__version__,
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)


@app.exception_handler(EpisodesError)
async def episodes_error_handler(request: Request, exc: EpisodesError):
    """Collapse every unrecoverable aggregation failure into a generic 500."""
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=HTTP_INTERNAL_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE, "status": HTTP_INTERNAL_ERROR},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log request method, path, status, and duration."""
    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    if request.url.path not in ["/health", "/"]:
        logger.info(f"{request.method} {request.url.path} | Status: {response.status_code} | Duration: {duration:.3f}s")

    return response


@app.get("/")
async def root(app_state: AppState = Depends(get_app_state)):
    """Root endpoint returns the health check."""
    return await health(app_state)


@app.get("/health")
async def health(app_state: AppState = Depends(get_app_state)):
    """Health check endpoint for monitoring."""
    return await app_state.get_health_status()


v1_router.include_router(episodes_router)
app.include_router(v1_router)


if __name__ == "__main__":
    uvicorn.run("anime_api.main:app", host="0.0.0.0", port=8000, reload=True)
