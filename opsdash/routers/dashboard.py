"""
Dashboard Router — Authenticated dashboard endpoints.

Endpoints:
  GET /dashboard      — Aggregated dashboard for a date range + hotel selection
  GET /dashboard/me   — Profile of the signed-in user with the tenant's hotels
"""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from opsdash.config import settings
from opsdash.models.dashboard import DashboardResponse, DateRange, SavingsAssumptions
from opsdash.models.tenant import DashboardUser, UserProfile
from opsdash.services.auth import verify_user_jwt
from opsdash.services.dashboard.aggregator import empty_dashboard, refresh_dashboard
from opsdash.services.dashboard.intervals import (
    PRESETS,
    date_range_preset,
    default_date_range,
    parse_interval,
)
from opsdash.services.dashboard.store import get_dashboard_store
from opsdash.services.rate_limiter import get_rate_limiter
from opsdash.services.tenants import build_user_profile, resolve_hotel_selection

logger = logging.getLogger(__name__)

router = APIRouter()

# Labels collide beyond this many buckets on the shortest formats
MAX_POINTS_LIMIT = 12


# =============================================================================
# RATE LIMITING DEPENDENCY
# =============================================================================


async def _dashboard_rate_limit(request: Request) -> None:
    """Rate limit dashboard requests per bearer token."""
    auth_header = request.headers.get("Authorization", "")
    token_hash = hashlib.sha256(auth_header.encode()).hexdigest()[:16]

    limiter = get_rate_limiter()
    if not limiter.check(token_hash, "dashboard", settings.dashboard_rate_limit_rpm):
        raise HTTPException(status_code=429, detail="Rate limit exceeded")


# =============================================================================
# REQUEST PARSING
# =============================================================================


def _today() -> date:
    return date.today()


def _parse_hotels(raw: str | None) -> list[str]:
    """Parse the ``hotels`` query value: a JSON array of ids."""
    if raw is None or not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise HTTPException(status_code=422, detail="hotels must be a JSON array")
    if not isinstance(value, list) or not all(
        isinstance(h, (str, int)) and not isinstance(h, bool) for h in value
    ):
        raise HTTPException(status_code=422, detail="hotels must be a JSON array of ids")
    return [str(h) for h in value]


def _resolve_range(
    date_from: date | None,
    date_to: date | None,
    preset: str | None,
) -> DateRange:
    if preset:
        if preset not in PRESETS:
            raise HTTPException(status_code=422, detail=f"Unknown preset: {preset}")
        return date_range_preset(preset, _today())

    if date_from is None and date_to is None:
        return default_date_range(_today())

    date_to = date_to or _today()
    date_from = date_from or date_to
    if date_from > date_to:
        raise HTTPException(status_code=422, detail="from must be on or before to")
    return DateRange(date_from=date_from, date_to=date_to)


# =============================================================================
# DASHBOARD
# =============================================================================


@router.get("")
async def get_dashboard(
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    preset: str | None = Query(None),
    hotels: str | None = Query(None, description='JSON array, e.g. ["h1","h2"]'),
    interval: str | None = Query(None, description="auto, day, week, month, quarter, year (optionally with a step, e.g. week2)"),
    max_points: int | None = Query(None, ge=1, le=MAX_POINTS_LIMIT),
    minutes_per_email: float | None = Query(None, ge=0),
    hourly_rate: float | None = Query(None, ge=0),
    _rate: None = Depends(_dashboard_rate_limit),
    user: DashboardUser = Depends(verify_user_jwt),
) -> DashboardResponse:
    """Aggregated dashboard for the caller's hotels.

    Always 200 once the request is valid: upstream failures are reported in
    ``error`` alongside the last good (or empty) dashboard.
    """
    date_range = _resolve_range(date_from, date_to, preset)

    if interval and interval != "auto" and parse_interval(interval) is None:
        raise HTTPException(status_code=422, detail=f"Unknown interval: {interval}")

    hotel_ids = resolve_hotel_selection(_parse_hotels(hotels), user.hotel_ids)
    if not hotel_ids:
        raise HTTPException(status_code=403, detail="None of the requested hotels are accessible")

    points = max_points or settings.dashboard_max_points
    savings = SavingsAssumptions(
        minutes_per_email=(
            minutes_per_email
            if minutes_per_email is not None
            else settings.savings_minutes_per_email
        ),
        hourly_rate=hourly_rate if hourly_rate is not None else settings.savings_hourly_rate,
    )

    store = get_dashboard_store(user.sub)
    token, snapshot = await refresh_dashboard(
        store,
        date_range=date_range,
        hotel_ids=hotel_ids,
        access_token=user.access_token,
        interval=interval,
        max_points=points,
        savings=savings,
    )

    model = snapshot.model
    if model is None:
        model = empty_dashboard(date_range, max_points=points, interval=interval)

    return DashboardResponse(
        data=model,
        error=snapshot.error,
        generation=snapshot.generation,
        superseded=not store.is_current(token),
    )


# =============================================================================
# PROFILE
# =============================================================================


@router.get("/me")
async def get_profile(
    _rate: None = Depends(_dashboard_rate_limit),
    user: DashboardUser = Depends(verify_user_jwt),
) -> UserProfile:
    """Profile of the signed-in user."""
    return build_user_profile(user)
