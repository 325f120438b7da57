"""
Dashboard Aggregator — One refresh cycle, raw payloads in, dashboard out.

Flow:
  1. Resolve the comparison period
  2. Fetch current + prior payloads in parallel (prior runs as a task,
     cancelled if the current fetch fails)
  3. Infer the interval once, build buckets
  4. Reconcile every time series onto the buckets
  5. Pair each KPI with its variation (only when prior data exists)
  6. Convert SLA counts to percentages, color categorical series

A failed current fetch keeps the displayed dashboard and reports an error.
A failed prior fetch only removes the variations. Missing fields default.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Mapping

from opsdash.models.dashboard import (
    DashboardDataModel,
    DashboardKpis,
    DashboardSnapshot,
    DateRange,
    IncidentPoint,
    IncidentSummary,
    KpiValue,
    SavingsAssumptions,
    UpsellingPoint,
    ValuePoint,
    VolumePoint,
)
from opsdash.services.dashboard.colors import ColorDomain
from opsdash.services.dashboard.comparison import resolve_comparison_period
from opsdash.services.dashboard.intervals import (
    DEFAULT_MAX_POINTS,
    advance,
    infer_interval,
)
from opsdash.services.dashboard.labels import build_buckets, format_date_range
from opsdash.services.dashboard.reconcile import (
    category_slices,
    reconcile_series,
    sla_percentages,
    to_number,
)
from opsdash.services.dashboard.store import DashboardStore
from opsdash.services.dashboard.variance import variation_or_none
from opsdash.services.metrics_api import MetricsTransportError, fetch_metrics

logger = logging.getLogger(__name__)

EMPTY_PERIOD_TEXT = "No data"

# Output field → upstream key
_VOLUME_FIELDS = {"total": "total", "automatic": "automatic", "unanswered": "unanswered"}
_VALUE_FIELDS = {"value": "value"}
_UPSELLING_FIELDS = {
    "offers_sent": "offersSent",
    "conversion_rate": "conversionRate",
    "total_emails_interval": "totalEmailsInterval",
}
_INCIDENT_FIELDS = {
    "total_incidents": "totalIncidents",
    "avg_management_delay": "avgManagementDelay",
    "avg_resolution_delay": "avgResolutionDelay",
}


# =============================================================================
# KPI HELPERS
# =============================================================================


def _scalar(payload: Mapping[str, Any] | None, key: str) -> float:
    if not payload:
        return 0.0
    return to_number(payload.get(key))


def _incidents(payload: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if not payload:
        return {}
    section = payload.get("incidencias")
    return section if isinstance(section, Mapping) else {}


def _intervention_percentage(payload: Mapping[str, Any] | None) -> float:
    total = _scalar(payload, "totalEmails")
    if total <= 0:
        return 0.0
    return _scalar(payload, "emailsManual") / total * 100


def _personal_savings(
    payload: Mapping[str, Any] | None,
    savings: SavingsAssumptions,
) -> float:
    hours = _scalar(payload, "totalEmails") * savings.minutes_per_email / 60
    return hours * savings.hourly_rate


def _kpi(current: float, previous: float | None) -> KpiValue:
    return KpiValue(value=current, variation=variation_or_none(current, previous))


def _scalar_kpi(
    current: Mapping[str, Any],
    prior: Mapping[str, Any] | None,
    key: str,
) -> KpiValue:
    previous = _scalar(prior, key) if prior is not None else None
    return _kpi(_scalar(current, key), previous)


def _incident_kpi(
    current: Mapping[str, Any],
    prior: Mapping[str, Any] | None,
    key: str,
) -> KpiValue:
    previous = to_number(_incidents(prior).get(key)) if prior is not None else None
    return _kpi(to_number(_incidents(current).get(key)), previous)


# =============================================================================
# ASSEMBLY
# =============================================================================


def build_dashboard(
    current: Mapping[str, Any] | None,
    prior: Mapping[str, Any] | None,
    date_range: DateRange,
    *,
    max_points: int = DEFAULT_MAX_POINTS,
    interval: str | None = None,
    savings: SavingsAssumptions | None = None,
) -> DashboardDataModel:
    """Assemble the dashboard from raw payloads.

    ``prior`` is None when the comparison fetch failed; every variation is
    then None rather than a misleading 0%. Deterministic for equal inputs.
    """
    current = current if isinstance(current, Mapping) else {}
    if prior is not None and not isinstance(prior, Mapping):
        prior = {}
    savings = savings or SavingsAssumptions()

    comparison = resolve_comparison_period(date_range)
    plan = infer_interval(date_range, max_points, interval)
    buckets = build_buckets(date_range, plan)
    last_end = advance(buckets[-1].start, plan.granularity, plan.step)

    def series(key: str, fields: Mapping[str, str], raw: Any = None) -> list[dict[str, Any]]:
        return reconcile_series(
            buckets,
            current.get(key) if raw is None else raw,
            fields,
            last_end=last_end,
        )

    prior_savings = _personal_savings(prior, savings) if prior is not None else None
    prior_intervention = (
        _intervention_percentage(prior) if prior is not None else None
    )

    kpis = DashboardKpis(
        total_emails=_scalar_kpi(current, prior, "totalEmails"),
        emails_manual=_scalar_kpi(current, prior, "emailsManual"),
        intervention_percentage=_kpi(
            _intervention_percentage(current), prior_intervention
        ),
        mttr=_scalar_kpi(current, prior, "mttrPromedio"),
        avg_response_time=_scalar_kpi(current, prior, "avgResponseTime"),
        sla_10min=_scalar_kpi(current, prior, "sla10min"),
        upselling_revenue=_scalar_kpi(current, prior, "upsellingRevenue"),
        ahorro_euros=_scalar_kpi(current, prior, "ahorroEuros"),
        personal_savings=_kpi(_personal_savings(current, savings), prior_savings),
    )

    incidents_raw = _incidents(current)
    incidents = IncidentSummary(
        total=_incident_kpi(current, prior, "total"),
        review_clicks=_incident_kpi(current, prior, "reviewClicks"),
        avg_management_delay=_incident_kpi(current, prior, "avgManagementDelay"),
        avg_resolution_delay=_incident_kpi(current, prior, "avgResolutionDelay"),
        by_subcategory=category_slices(
            incidents_raw.get("incidenciasPorSubcategoria"),
            ColorDomain.INCIDENT_SUBCATEGORY,
            fallback_name="Sin subcategoría",
        ),
        by_interval=[
            IncidentPoint(**point)
            for point in series("porMes", _INCIDENT_FIELDS, incidents_raw.get("porMes") or [])
        ],
    )

    return DashboardDataModel(
        date_range=date_range,
        comparison_range=comparison.date_range,
        comparison_period_text=comparison.text,
        period_label=format_date_range(date_range.date_from, date_range.date_to),
        interval=plan,
        buckets=buckets,
        kpis=kpis,
        volume=[VolumePoint(**p) for p in series("volume", _VOLUME_FIELDS)],
        mttr=[ValuePoint(**p) for p in series("mttr", _VALUE_FIELDS)],
        manual=[ValuePoint(**p) for p in series("manual", _VALUE_FIELDS)],
        sla_tram=sla_percentages(current.get("slaTram")),
        sentiment=category_slices(current.get("sentiment"), ColorDomain.SENTIMENT),
        language=category_slices(current.get("language"), ColorDomain.LANGUAGE),
        category=category_slices(
            current.get("category"), ColorDomain.CATEGORY, fallback_name="Sin categoría"
        ),
        upselling_revenue_by_month=[
            ValuePoint(**p) for p in series("upsellingRevenueByMonth", _VALUE_FIELDS)
        ],
        upselling_by_month=[
            UpsellingPoint(**p) for p in series("upsellingByMonth", _UPSELLING_FIELDS)
        ],
        incidents=incidents,
    )


def empty_dashboard(
    date_range: DateRange,
    *,
    max_points: int = DEFAULT_MAX_POINTS,
    interval: str | None = None,
) -> DashboardDataModel:
    """Canonical all-zero dashboard: every series present, zero-filled."""
    model = build_dashboard({}, None, date_range, max_points=max_points, interval=interval)
    return model.model_copy(update={"comparison_period_text": EMPTY_PERIOD_TEXT})


# =============================================================================
# REFRESH CYCLE
# =============================================================================


async def _fetch_prior(
    date_range: DateRange,
    hotel_ids: list[str],
    access_token: str,
    interval: str | None,
) -> dict[str, Any] | None:
    """Prior-period fetch. Fails open: no comparison instead of no dashboard."""
    try:
        return await fetch_metrics(date_range, hotel_ids, access_token, interval)
    except MetricsTransportError as e:
        logger.warning("Comparison fetch failed, variations omitted: %s", e)
        return None
    except Exception as e:
        logger.error("Comparison fetch raised unexpectedly: %s", e)
        return None


async def refresh_dashboard(
    store: DashboardStore,
    *,
    date_range: DateRange,
    hotel_ids: list[str],
    access_token: str,
    interval: str | None = None,
    max_points: int = DEFAULT_MAX_POINTS,
    savings: SavingsAssumptions | None = None,
) -> tuple[int, DashboardSnapshot]:
    """Run one refresh cycle against ``store``.

    Returns the cycle's generation token and the store's snapshot after the
    cycle. If a newer cycle started meanwhile, this cycle's result is dropped
    and the snapshot reflects whatever the newer cycle has committed.
    """
    token = store.begin()
    start = time.perf_counter()
    comparison = resolve_comparison_period(date_range)

    prior_task = asyncio.create_task(
        _fetch_prior(comparison.date_range, hotel_ids, access_token, interval)
    )
    try:
        try:
            current = await fetch_metrics(date_range, hotel_ids, access_token, interval)
        except BaseException:
            # No comparison request outlives a failed or cancelled cycle
            prior_task.cancel()
            raise
        prior = await prior_task
    except MetricsTransportError as e:
        logger.error("Dashboard refresh failed (token=%d): %s", token, e)
        # Keep what is displayed; only a first load falls back to the empty model
        replacement = (
            empty_dashboard(date_range, max_points=max_points, interval=interval)
            if store.snapshot.model is None
            else None
        )
        store.fail(token, "Failed to load metrics", replacement=replacement)
        return token, store.snapshot
    except Exception:
        logger.exception("Dashboard refresh crashed (token=%d)", token)
        store.fail(
            token,
            "Failed to load metrics",
            replacement=empty_dashboard(date_range, max_points=max_points, interval=interval),
        )
        return token, store.snapshot

    try:
        model = build_dashboard(
            current,
            prior,
            date_range,
            max_points=max_points,
            interval=interval,
            savings=savings,
        )
    except Exception:
        logger.exception("Dashboard assembly failed (token=%d)", token)
        store.fail(
            token,
            "Failed to process metrics",
            replacement=empty_dashboard(date_range, max_points=max_points, interval=interval),
        )
        return token, store.snapshot

    committed = store.commit(token, model)
    elapsed = (time.perf_counter() - start) * 1000
    logger.info(
        "Dashboard refresh %s (token=%d, %d hotels, %s → %s): %.0fms",
        "committed" if committed else "superseded",
        token,
        len(hotel_ids),
        date_range.date_from,
        date_range.date_to,
        elapsed,
    )
    return token, store.snapshot
