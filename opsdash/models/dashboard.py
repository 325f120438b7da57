"""
Dashboard Models — Pydantic models for the aggregated dashboard.

Everything the presentation layer receives is defined here. All fields are
already defaulted, so chart components never need to null-check a series.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Granularity = Literal["day", "week", "month", "quarter", "year"]

# =============================================================================
# DATE RANGE / BUCKETS
# =============================================================================


class DateRange(BaseModel):
    """Inclusive calendar range. Immutable once built."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date_from: date = Field(alias="from")
    date_to: date = Field(alias="to")

    @model_validator(mode="after")
    def _check_order(self) -> DateRange:
        if self.date_from > self.date_to:
            raise ValueError("date_from must be on or before date_to")
        return self


class IntervalPlan(BaseModel):
    """Bucketing decision for one refresh cycle."""

    model_config = ConfigDict(frozen=True)

    granularity: Granularity
    step: int = 1  # multiplier of the granularity, e.g. 2 for "week2"
    interval_days: int  # approximate length of one bucket
    points: int


class Bucket(BaseModel):
    """One x-axis slot. ``label`` is derived from ``start``."""

    model_config = ConfigDict(frozen=True)

    index: int
    start: date
    label: str


# =============================================================================
# KPIs
# =============================================================================


class Variation(BaseModel):
    """Magnitude and direction of change between two readings."""

    model_config = ConfigDict(frozen=True)

    percentage: float = Field(ge=0)
    is_increase: bool


class SavingsAssumptions(BaseModel):
    """Inputs for the staff-time savings estimate."""

    minutes_per_email: float = Field(default=5.0, ge=0)
    hourly_rate: float = Field(default=20.0, ge=0)  # EUR


class KpiValue(BaseModel):
    """Scalar KPI. ``variation`` is None when there is no prior period."""

    value: float = 0.0
    variation: Variation | None = None


class DashboardKpis(BaseModel):
    """Headline KPI cards."""

    total_emails: KpiValue = Field(default_factory=KpiValue)
    emails_manual: KpiValue = Field(default_factory=KpiValue)
    intervention_percentage: KpiValue = Field(default_factory=KpiValue)
    mttr: KpiValue = Field(default_factory=KpiValue)  # minutes
    avg_response_time: KpiValue = Field(default_factory=KpiValue)  # minutes
    sla_10min: KpiValue = Field(default_factory=KpiValue)  # percent
    upselling_revenue: KpiValue = Field(default_factory=KpiValue)  # EUR
    ahorro_euros: KpiValue = Field(default_factory=KpiValue)  # EUR, upstream figure
    personal_savings: KpiValue = Field(default_factory=KpiValue)  # EUR, derived


# =============================================================================
# SERIES
# =============================================================================


class VolumePoint(BaseModel):
    """Email volume for one bucket."""

    label: str
    total: float = 0.0
    automatic: float = 0.0
    unanswered: float = 0.0


class ValuePoint(BaseModel):
    """Single-valued series point (mttr, manual %, revenue)."""

    label: str
    value: float = 0.0


class UpsellingPoint(BaseModel):
    label: str
    offers_sent: float = 0.0
    conversion_rate: float = 0.0
    total_emails_interval: float = 0.0


class IncidentPoint(BaseModel):
    label: str
    total_incidents: float = 0.0
    avg_management_delay: float = 0.0
    avg_resolution_delay: float = 0.0


class CategorySlice(BaseModel):
    """Donut/bar entry for a categorical breakdown."""

    name: str
    value: float = 0.0
    color: str


class SlaSlice(BaseModel):
    """SLA response-time bucket. ``value`` is a percentage of the period."""

    name: str
    count: float = 0.0
    value: float = 0.0
    total_emails_period: float = 0.0
    color: str


class IncidentSummary(BaseModel):
    """Incident KPIs and breakdowns."""

    total: KpiValue = Field(default_factory=KpiValue)
    review_clicks: KpiValue = Field(default_factory=KpiValue)
    avg_management_delay: KpiValue = Field(default_factory=KpiValue)
    avg_resolution_delay: KpiValue = Field(default_factory=KpiValue)
    by_subcategory: list[CategorySlice] = Field(default_factory=list)
    by_interval: list[IncidentPoint] = Field(default_factory=list)


# =============================================================================
# FULL MODEL
# =============================================================================


class DashboardDataModel(BaseModel):
    """Presentation-ready dashboard for one refresh cycle."""

    model_config = ConfigDict(frozen=True)

    date_range: DateRange
    comparison_range: DateRange
    comparison_period_text: str
    period_label: str
    interval: IntervalPlan
    buckets: list[Bucket] = Field(default_factory=list)

    kpis: DashboardKpis = Field(default_factory=DashboardKpis)

    volume: list[VolumePoint] = Field(default_factory=list)
    mttr: list[ValuePoint] = Field(default_factory=list)
    manual: list[ValuePoint] = Field(default_factory=list)
    sla_tram: list[SlaSlice] = Field(default_factory=list)
    sentiment: list[CategorySlice] = Field(default_factory=list)
    language: list[CategorySlice] = Field(default_factory=list)
    category: list[CategorySlice] = Field(default_factory=list)
    upselling_revenue_by_month: list[ValuePoint] = Field(default_factory=list)
    upselling_by_month: list[UpsellingPoint] = Field(default_factory=list)
    incidents: IncidentSummary = Field(default_factory=IncidentSummary)


class DashboardSnapshot(BaseModel):
    """What the store currently displays."""

    model_config = ConfigDict(frozen=True)

    model: DashboardDataModel | None = None
    error: str | None = None
    generation: int = 0


class DashboardResponse(BaseModel):
    """GET /dashboard response."""

    data: DashboardDataModel
    error: str | None = None
    generation: int
    superseded: bool = False  # a newer request was issued while this one ran
