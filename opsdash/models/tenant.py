"""
Tenant Models — Users, hotel groups and the public hotel descriptors.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# CONFIGURATION ENTRIES
# =============================================================================


class UserConfig(BaseModel):
    """Entry of USER_CONFIGS, keyed by email."""

    tenant_id: str
    full_name: str | None = None
    name: str | None = None
    role: str = "viewer"
    status: str = "active"
    profile_image: str | None = Field(default=None, alias="profileImage")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def display_name(self) -> str | None:
        return self.full_name or self.name


class HotelInfo(BaseModel):
    """Public data of a single hotel. Connection details never leave config."""

    id: str
    name: str
    stars: int | None = None
    rooms: int | None = None
    location: str | None = None

    model_config = ConfigDict(extra="ignore")


# =============================================================================
# AUTHENTICATED USER
# =============================================================================


class DashboardUser(BaseModel):
    """Verified caller, resolved through the tenant registry."""

    email: str
    sub: str
    tenant_id: str
    hotel_ids: list[str] = Field(default_factory=list)
    display_name: str | None = None
    role: str = "viewer"
    access_token: str = Field(repr=False)


class UserProfile(BaseModel):
    """GET /dashboard/me response. Only non-sensitive fields."""

    email: str
    full_name: str | None = None
    role: str
    tenant_id: str
    profile_image: str | None = None
    hotel_ids: list[str] = Field(default_factory=list)
    hotels: list[HotelInfo] = Field(default_factory=list)
