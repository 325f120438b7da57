"""
Metrics API Service — Client for the pre-aggregated hotel metrics endpoint.

GET {METRICS_API_URL}/metrics?from=YYYY-MM-DD&to=YYYY-MM-DD&hotels=["id",...]

Network errors and non-2xx responses raise MetricsTransportError. A body that
is not a JSON object is treated as an empty payload: the call itself worked,
the data is just missing.
"""

import json
import logging
from typing import Any

import httpx

from opsdash.config import settings
from opsdash.models.dashboard import DateRange

logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None


class MetricsTransportError(Exception):
    """The metrics request failed before a usable response came back."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


async def get_metrics_client() -> httpx.AsyncClient:
    """Get or create the shared async HTTP client."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(
            base_url=settings.metrics_api_url.rstrip("/"),
            timeout=settings.metrics_timeout_seconds,
        )
    return _client


async def close_metrics_client() -> None:
    """Close the shared client (call on shutdown)."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


async def fetch_metrics(
    date_range: DateRange,
    hotel_ids: list[str],
    access_token: str,
    interval: str | None = None,
) -> dict[str, Any]:
    """Fetch the raw metrics payload for one period."""
    params: dict[str, str] = {
        "from": date_range.date_from.isoformat(),
        "to": date_range.date_to.isoformat(),
        "hotels": json.dumps(hotel_ids),
    }
    if interval and interval != "auto":
        params["interval"] = interval

    client = await get_metrics_client()
    try:
        resp = await client.get(
            "/metrics",
            params=params,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )
    except httpx.HTTPError as e:
        logger.error(
            "Metrics fetch failed (%s → %s): %s: %s",
            params["from"], params["to"], type(e).__name__, e,
        )
        raise MetricsTransportError(str(e)) from e

    if not resp.is_success:
        logger.error(
            "Metrics API returned %d for %s → %s",
            resp.status_code, params["from"], params["to"],
        )
        raise MetricsTransportError(
            f"Metrics API error: {resp.status_code}", status_code=resp.status_code
        )

    try:
        payload = resp.json()
    except ValueError:
        logger.warning("Metrics API returned a non-JSON body, treating as empty")
        return {}

    if not isinstance(payload, dict):
        logger.warning(
            "Metrics API returned %s instead of an object, treating as empty",
            type(payload).__name__,
        )
        return {}
    return payload
