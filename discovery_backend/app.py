from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Callable
from typing import Any, TypeVar

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import require_user
from .discovery.config import DEFAULT_DISCOVERY_CONFIG
from .discovery.errors import DiscoveryError, DiscoveryInternalError
from .discovery.geo import validate_coordinate
from .discovery.schemas import (
    HomepageRecommendation,
    NearbyUsersResponse,
    ProfileViewersResponse,
    ViewRecordedResponse,
)
from .discovery.service import DiscoveryService
from .discovery.store import get_stores

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

T = TypeVar("T")

app = FastAPI(title="User Discovery API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "discovery-secret-change-in-production"),
)


def get_discovery_service() -> DiscoveryService:
    return DiscoveryService(get_stores(), DEFAULT_DISCOVERY_CONFIG)


async def _run(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking service call under the request-scoped timeout."""
    timeout = DEFAULT_DISCOVERY_CONFIG.request_timeout_seconds
    try:
        return await asyncio.wait_for(asyncio.to_thread(func, *args, **kwargs), timeout)
    except asyncio.TimeoutError:
        logger.error("%s timed out after %.1fs", func.__name__, timeout)
        raise DiscoveryInternalError("Request timed out.") from None


@app.exception_handler(DiscoveryError)
async def discovery_error_handler(request: Request, exc: DiscoveryError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Discovery endpoints ──────────────────────────────────────────────────


@app.get("/users/discovery/homepage", response_model=list[HomepageRecommendation], response_model_exclude_none=True)
async def homepage_recommendations(
    user: dict = Depends(require_user),
    service: DiscoveryService = Depends(get_discovery_service),
) -> list[HomepageRecommendation]:
    return await _run(service.get_homepage_recommendations, user["id"])


@app.get("/users/discovery/nearby", response_model=NearbyUsersResponse)
async def nearby_users(
    latitude: str = Query(...),
    longitude: str = Query(...),
    radius_in_km: float = Query(5.0, alias="radiusInKm", gt=0, le=500),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    active_only: bool = Query(False, alias="activeOnly"),
    active_within_minutes: int = Query(30, alias="activeWithinMinutes", ge=1),
    user: dict = Depends(require_user),
    service: DiscoveryService = Depends(get_discovery_service),
) -> NearbyUsersResponse:
    # Non-numeric input is a 400 like any other bad coordinate
    origin = validate_coordinate(latitude, longitude)
    return await _run(
        service.find_nearby_users,
        user["id"],
        origin.latitude,
        origin.longitude,
        radius_in_km=radius_in_km,
        limit=limit,
        offset=offset,
        active_only=active_only,
        active_within_minutes=active_within_minutes,
    )


@app.get("/users/discovery/recommended", response_model=NearbyUsersResponse)
async def recommended_users(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: dict = Depends(require_user),
    service: DiscoveryService = Depends(get_discovery_service),
) -> NearbyUsersResponse:
    return await _run(service.get_recommended_users, user["id"], limit=limit, offset=offset)


@app.get("/users/discovery/profile-viewers", response_model=ProfileViewersResponse)
async def profile_viewers(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    days_back: int = Query(30, alias="daysBack", ge=1, le=365),
    user: dict = Depends(require_user),
    service: DiscoveryService = Depends(get_discovery_service),
) -> ProfileViewersResponse:
    return await _run(
        service.get_profile_viewers, user["id"], limit=limit, offset=offset, days_back=days_back,
    )


@app.post("/users/{user_id}/views", response_model=ViewRecordedResponse, status_code=201)
async def record_profile_view(
    user_id: str,
    user: dict = Depends(require_user),
    service: DiscoveryService = Depends(get_discovery_service),
) -> ViewRecordedResponse:
    # The write is skipped if the deadline passes before the insert
    deadline = time.monotonic() + DEFAULT_DISCOVERY_CONFIG.request_timeout_seconds
    return await _run(service.record_profile_view, user["id"], user_id, deadline=deadline)
