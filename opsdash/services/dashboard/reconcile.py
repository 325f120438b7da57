"""
Dashboard Reconcile — Align upstream series onto locally generated buckets.

Upstream series are lists of ``{"name": <label>, ...numbers}`` records in no
particular order. Each bucket takes the first record that matches it; a bucket
with no match gets a zero-valued point. Output length and order always equal
the bucket list, so charts never show gaps or misaligned x-axes.

Records that carry an ISO date (``date``, ``intervalStart``, ``startDate``) are
matched structurally by the bucket that contains the date. Otherwise the
record's ``name`` is compared with the bucket label. Records matching no
bucket are dropped.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from opsdash.models.dashboard import Bucket, CategorySlice, SlaSlice
from opsdash.services.dashboard.colors import ColorDomain, color_for

logger = logging.getLogger(__name__)

SLA_BUCKETS = ("<10min", "10min-1h", "1-4h", "4-24h", ">24h")

_DATE_KEYS = ("date", "intervalStart", "interval_start", "startDate")


def to_number(value: Any) -> float:
    """Coerce an upstream value to float. Anything unusable becomes 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def as_records(raw: Any) -> list[Mapping[str, Any]]:
    """Keep only the dict entries of a raw series."""
    if not isinstance(raw, list):
        return []
    return [record for record in raw if isinstance(record, Mapping)]


def _record_date(record: Mapping[str, Any]) -> date | None:
    for key in _DATE_KEYS:
        value = record.get(key)
        if not isinstance(value, str) or not value:
            continue
        try:
            return datetime.fromisoformat(value).date()
        except ValueError:
            try:
                return date.fromisoformat(value[:10])
            except ValueError:
                continue
    return None


def _bucket_for_date(
    day: date,
    buckets: Sequence[Bucket],
    last_end: date | None,
) -> int | None:
    if not buckets or day < buckets[0].start:
        return None
    for i, bucket in enumerate(buckets):
        end = buckets[i + 1].start if i + 1 < len(buckets) else last_end
        if day >= bucket.start and (end is None or day < end):
            return i
    return None


def reconcile_series(
    buckets: Sequence[Bucket],
    raw: Any,
    fields: Mapping[str, str],
    *,
    last_end: date | None = None,
) -> list[dict[str, Any]]:
    """Align ``raw`` onto ``buckets``.

    ``fields`` maps output field names to upstream keys, e.g.
    ``{"offers_sent": "offersSent"}``. ``last_end`` is the exclusive end of
    the final bucket for date-keyed records.
    """
    labels = {bucket.label for bucket in buckets}
    by_date: dict[int, Mapping[str, Any]] = {}
    by_name: dict[str, Mapping[str, Any]] = {}
    dropped = 0

    # First match wins, per bucket for dated records and per label otherwise
    for record in as_records(raw):
        record_day = _record_date(record)
        if record_day is not None:
            index = _bucket_for_date(record_day, buckets, last_end)
            if index is not None:
                by_date.setdefault(index, record)
                continue

        name = str(record.get("name"))
        if name not in labels:
            dropped += 1
            continue
        by_name.setdefault(name, record)

    if dropped:
        logger.debug("Reconcile dropped %d record(s) matching no bucket", dropped)

    points: list[dict[str, Any]] = []
    for bucket in buckets:
        # Repeated labels (e.g. Jan on both ends of a yearly range) share the record
        record = by_date.get(bucket.index) or by_name.get(bucket.label, {})
        point: dict[str, Any] = {"label": bucket.label}
        for field, raw_key in fields.items():
            point[field] = to_number(record.get(raw_key))
        points.append(point)
    return points


def _largest_remainder(counts: Sequence[float], total: float) -> list[float]:
    """Percentages with one decimal that sum to exactly 100.0."""
    exact = [count * 1000 / total for count in counts]
    units = [math.floor(value) for value in exact]
    leftover = 1000 - sum(units)
    order = sorted(range(len(exact)), key=lambda i: (-(exact[i] - units[i]), i))
    for i in order[:leftover]:
        units[i] += 1
    return [unit / 10 for unit in units]


def sla_percentages(raw: Any) -> list[SlaSlice]:
    """SLA buckets in canonical order, counts converted to % of the period."""
    counts_by_name: dict[str, float] = {}
    for record in as_records(raw):
        name = record.get("name")
        if name in SLA_BUCKETS and name not in counts_by_name:
            count = record.get("count", record.get("value", record.get("total")))
            counts_by_name[name] = max(0.0, to_number(count))

    counts = [counts_by_name.get(name, 0.0) for name in SLA_BUCKETS]
    total = sum(counts)
    percentages = (
        _largest_remainder(counts, total) if total > 0 else [0.0] * len(counts)
    )

    return [
        SlaSlice(
            name=name,
            count=count,
            value=percentage,
            total_emails_period=total,
            color=color_for(ColorDomain.SLA, name),
        )
        for name, count, percentage in zip(SLA_BUCKETS, counts, percentages)
    ]


def category_slices(
    raw: Any,
    domain: ColorDomain,
    fallback_name: str = "Unclassified",
) -> list[CategorySlice]:
    """Categorical breakdown in upstream order, each entry colored."""
    slices = []
    for record in as_records(raw):
        name = record.get("name")
        label = str(name) if name not in (None, "") else fallback_name
        slices.append(
            CategorySlice(
                name=label,
                value=to_number(record.get("value", record.get("total"))),
                color=color_for(domain, name),
            )
        )
    return slices
