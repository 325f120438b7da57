"""
Tenant Service — Resolve users to hotel groups and hotels.

Three JSON maps come from settings:
  USER_CONFIGS         email      -> {tenant_id, full_name, role, ...}
  HOTEL_GROUP_CONFIGS  tenant_id  -> {id: [hotel_id, ...], name}
  HOTEL_CONFIGS        hotel_id   -> {name, stars, rooms, location, ...}

Lookups never raise on missing entries; callers decide the HTTP status.
"""

from __future__ import annotations

import logging
from typing import Iterable

from pydantic import ValidationError

from opsdash.config import settings
from opsdash.models.tenant import DashboardUser, HotelInfo, UserConfig, UserProfile

logger = logging.getLogger(__name__)


def get_user_config(email: str) -> UserConfig | None:
    """Configuration for ``email`` (case-insensitive), or None."""
    if not email:
        return None
    raw = settings.user_configs.get(email)
    if raw is None:
        wanted = email.casefold()
        raw = next(
            (v for k, v in settings.user_configs.items() if k.casefold() == wanted),
            None,
        )
    if raw is None:
        return None
    try:
        return UserConfig(**raw)
    except ValidationError as e:
        logger.error("Invalid user configuration for %s: %s", email, e)
        return None


def get_tenant_hotel_ids(tenant_id: str) -> list[str]:
    """Hotel ids of a tenant's group, in configured order."""
    group = settings.hotel_group_configs.get(tenant_id)
    if group is None:
        logger.warning("Hotel group not configured: %s", tenant_id)
        return []
    ids = group.get("id") or []
    if isinstance(ids, str):
        ids = [ids]
    return [str(hotel_id) for hotel_id in ids]


def get_hotel_info(hotel_id: str) -> HotelInfo | None:
    """Public descriptor of one hotel, or None if not configured."""
    raw = settings.hotel_configs.get(hotel_id)
    if raw is None:
        return None
    try:
        return HotelInfo(**{"id": hotel_id, **raw})
    except ValidationError as e:
        logger.error("Invalid hotel configuration for %s: %s", hotel_id, e)
        return None


def resolve_hotel_selection(
    requested: Iterable[str] | None,
    allowed: list[str],
) -> list[str]:
    """Restrict a hotel selection to the tenant's hotels.

    An empty or missing selection means every hotel of the tenant. Ids the
    tenant does not own are dropped. Order follows ``allowed``.
    """
    wanted = {str(h) for h in requested or []}
    if not wanted:
        return list(allowed)
    selected = [hotel_id for hotel_id in allowed if hotel_id in wanted]
    foreign = wanted.difference(allowed)
    if foreign:
        logger.warning("Ignoring hotels outside tenant: %s", sorted(foreign))
    return selected


def build_user_profile(user: DashboardUser) -> UserProfile:
    """Non-sensitive profile with the tenant's public hotel data."""
    config = get_user_config(user.email)
    hotels = []
    for hotel_id in user.hotel_ids:
        info = get_hotel_info(hotel_id)
        if info is None:
            logger.warning("Hotel configuration not found: %s", hotel_id)
            continue
        hotels.append(info)

    return UserProfile(
        email=user.email,
        full_name=user.display_name,
        role=user.role,
        tenant_id=user.tenant_id,
        profile_image=config.profile_image if config else None,
        hotel_ids=list(user.hotel_ids),
        hotels=hotels,
    )
