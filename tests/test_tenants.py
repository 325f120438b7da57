"""
Tests for the Tenant Service and Rate Limiter.
"""

import time
from unittest.mock import patch

import pytest

from opsdash.models.tenant import DashboardUser
from opsdash.services.rate_limiter import RateLimiter
from opsdash.services.tenants import (
    build_user_profile,
    get_hotel_info,
    get_tenant_hotel_ids,
    get_user_config,
    resolve_hotel_selection,
)

_ALLOWED = ["h1", "h2", "h3"]


# ===========================================================================
# TestTenantLookups
# ===========================================================================


@pytest.mark.unit
class TestTenantLookups:
    def test_user_config(self) -> None:
        config = get_user_config("ana@hotel.test")
        assert config.tenant_id == "grupo-sol"
        assert config.display_name == "Ana Ruiz"
        assert config.profile_image == "ana.png"

    def test_user_lookup_ignores_case(self) -> None:
        assert get_user_config("ANA@Hotel.test") is not None

    def test_unknown_user(self) -> None:
        assert get_user_config("nobody@hotel.test") is None
        assert get_user_config("") is None

    def test_tenant_hotels_in_configured_order(self) -> None:
        assert get_tenant_hotel_ids("grupo-sol") == _ALLOWED

    def test_unknown_tenant_has_no_hotels(self) -> None:
        assert get_tenant_hotel_ids("grupo-desconocido") == []

    def test_hotel_info_is_public_only(self) -> None:
        info = get_hotel_info("h1")
        assert info.id == "h1"
        assert info.name == "Sol Playa"
        assert info.stars == 4
        assert "postgres" not in info.model_dump()

    def test_unknown_hotel(self) -> None:
        assert get_hotel_info("h3") is None


# ===========================================================================
# TestHotelSelection
# ===========================================================================


@pytest.mark.unit
class TestHotelSelection:
    def test_empty_selection_means_all(self) -> None:
        assert resolve_hotel_selection([], _ALLOWED) == _ALLOWED
        assert resolve_hotel_selection(None, _ALLOWED) == _ALLOWED

    def test_foreign_hotels_dropped(self) -> None:
        assert resolve_hotel_selection(["h2", "other-chain"], _ALLOWED) == ["h2"]

    def test_only_foreign_hotels_gives_nothing(self) -> None:
        assert resolve_hotel_selection(["other-chain"], _ALLOWED) == []

    def test_order_follows_tenant(self) -> None:
        assert resolve_hotel_selection(["h3", "h1"], _ALLOWED) == ["h1", "h3"]


# ===========================================================================
# TestUserProfile
# ===========================================================================


@pytest.mark.unit
class TestUserProfile:
    def test_profile_lists_configured_hotels(self) -> None:
        user = DashboardUser(
            email="ana@hotel.test",
            sub="user-123",
            tenant_id="grupo-sol",
            hotel_ids=_ALLOWED,
            display_name="Ana Ruiz",
            role="manager",
            access_token="tok",
        )
        profile = build_user_profile(user)

        assert profile.full_name == "Ana Ruiz"
        assert profile.profile_image == "ana.png"
        assert profile.hotel_ids == _ALLOWED
        # h3 has no hotel configuration and is skipped
        assert [h.id for h in profile.hotels] == ["h1", "h2"]
        assert "access_token" not in profile.model_dump()


# ===========================================================================
# TestRateLimiter
# ===========================================================================


@pytest.mark.unit
class TestRateLimiter:
    """In-memory sliding window rate limiter."""

    def test_allows_up_to_limit(self) -> None:
        limiter = RateLimiter()
        for i in range(10):
            assert limiter.check("user-1", "dashboard", rpm_limit=10) is True, f"Request {i+1}"
        assert limiter.check("user-1", "dashboard", rpm_limit=10) is False

    def test_users_have_separate_windows(self) -> None:
        limiter = RateLimiter()
        for _ in range(10):
            limiter.check("user-1", "dashboard", rpm_limit=10)
        assert limiter.check("user-2", "dashboard", rpm_limit=10) is True

    def test_scopes_have_separate_windows(self) -> None:
        limiter = RateLimiter()
        for _ in range(10):
            limiter.check("user-1", "dashboard", rpm_limit=10)
        assert limiter.check("user-1", "profile", rpm_limit=10) is True

    def test_window_expiry_allows_new_requests(self) -> None:
        limiter = RateLimiter()
        now = time.monotonic()
        for _ in range(10):
            limiter.check("user-1", "dashboard", rpm_limit=10)

        with patch("opsdash.services.rate_limiter.time") as mock_time:
            mock_time.monotonic.return_value = now + 61.0
            assert limiter.check("user-1", "dashboard", rpm_limit=10) is True

    def test_reset_clears_all_windows(self) -> None:
        limiter = RateLimiter()
        for _ in range(10):
            limiter.check("user-1", "dashboard", rpm_limit=10)
        limiter.reset()
        assert limiter.check("user-1", "dashboard", rpm_limit=10) is True
