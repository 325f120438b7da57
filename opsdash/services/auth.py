"""
Dashboard Auth — JWT verification for dashboard users.

Users sign in through Supabase Auth. The browser sends the access token as a
Bearer token; we verify it against Supabase's JWKS endpoint and resolve the
email claim through the tenant registry.

The public key is fetched from:
  {SUPABASE_URL}/auth/v1/.well-known/jwks.json

Cached in-process with a 1-hour TTL to avoid hitting the endpoint on every request.
The raw token is kept on the user so it can be forwarded to the metrics API.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import jwt
from fastapi import HTTPException, Request
from jwt import PyJWKClient

from opsdash.config import settings
from opsdash.models.tenant import DashboardUser
from opsdash.services.tenants import get_tenant_hotel_ids, get_user_config

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# JWKS client — cached singleton with 1-hour TTL
# ---------------------------------------------------------------------------

_jwks_client: PyJWKClient | None = None
_jwks_client_created_at: float = 0
_JWKS_TTL_SECONDS = 3600


def _get_jwks_client() -> PyJWKClient:
    """Get or create the JWKS client (cached with TTL)."""
    global _jwks_client, _jwks_client_created_at
    now = time.monotonic()

    if _jwks_client is None or (now - _jwks_client_created_at) > _JWKS_TTL_SECONDS:
        _jwks_client = PyJWKClient(settings.jwks_url, cache_keys=True)
        _jwks_client_created_at = now
        logger.info("JWKS client initialized: %s", settings.jwks_url)

    return _jwks_client


def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing authorization token")
    token = auth_header[7:].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Missing authorization token")
    return token


# ---------------------------------------------------------------------------
# Auth dependency
# ---------------------------------------------------------------------------


async def verify_user_jwt(request: Request) -> DashboardUser:
    """FastAPI dependency: verify the Supabase JWT and return the dashboard user.

    Raises 401 on missing/invalid token, 403 when the email has no user or
    hotel configuration, 500 if the configuration lookup itself breaks.
    """
    token = _bearer_token(request)

    try:
        jwks_client = _get_jwks_client()
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        payload: dict[str, Any] = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256", "ES256"],
            audience=settings.auth_jwt_audience,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Dashboard auth: invalid token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid token")
    except Exception as e:
        logger.error("Dashboard auth: JWKS verification failed: %s", e)
        raise HTTPException(status_code=401, detail="Token verification failed")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: no subject")

    email = payload.get("email")
    if not email:
        raise HTTPException(status_code=401, detail="Invalid token: no email")

    try:
        config = get_user_config(email)
        hotel_ids = get_tenant_hotel_ids(config.tenant_id) if config else []
    except Exception:
        logger.exception("Dashboard auth: configuration lookup failed")
        raise HTTPException(status_code=500, detail="Internal error")

    if config is None:
        logger.warning("Dashboard auth: no configuration for %s", email)
        raise HTTPException(
            status_code=403, detail="No dashboard access configured for this account"
        )

    if config.status != "active":
        raise HTTPException(status_code=403, detail="Account deactivated")

    if not hotel_ids:
        raise HTTPException(status_code=403, detail="No hotels assigned to this account")

    return DashboardUser(
        email=email,
        sub=user_id,
        tenant_id=config.tenant_id,
        hotel_ids=hotel_ids,
        display_name=config.display_name,
        role=config.role,
        access_token=token,
    )
