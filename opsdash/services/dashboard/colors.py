"""
Dashboard Colors — Fixed display colors for categorical series.

Category names come straight from upstream data, so lookups are total: any
name that is not in a table (including None) gets ``DEFAULT_COLOR``.
Names are the values the metrics service emits.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

DEFAULT_COLOR = "#6C757D"


class ColorDomain(str, Enum):
    SENTIMENT = "sentiment"
    LANGUAGE = "language"
    CATEGORY = "category"
    SLA = "sla"
    INCIDENT = "incident"
    INCIDENT_SUBCATEGORY = "incident_subcategory"


_SENTIMENT = {
    "Muy Positivo": "#0F5132",
    "Positivo": "#198754",
    "Medio": "#FFC107",
    "Negativo": "#FD7E14",
    "Muy Negativo": "#DC3545",
}

_LANGUAGE = {
    "Español": "#3498DB",
    "Inglés": "#E74C3C",
    "Francés": "#9B59B6",
    "Alemán": "#F39C12",
    "Italiano": "#1ABC9C",
    "Portugués": "#E67E22",
    "Ruso": "#34495E",
    "Chino": "#E74C3C",
    "Japonés": "#95A5A6",
    "Otros": "#6C757D",
}

_CATEGORY = {
    "Estancia": "#007BFF",
    "Servicios": "#FD7E14",
    "Reclamaciones": "#DC3545",
    "Incidencia": "#E74C3C",
    "FAQ": "#6F42C1",
    "Eventos": "#20C997",
    "Operaciones": "#17A2B8",
    "Sin categoría": "#6C757D",
}

# Green → red by response time
_SLA = {
    "<10min": "#0F5132",
    "10min-1h": "#28A745",
    "1-4h": "#FFC107",
    "4-24h": "#FD7E14",
    ">24h": "#DC3545",
}

_INCIDENT = {
    "Problemas de habitación": "#E74C3C",
    "Objetos perdidos": "#F39C12",
    "Problemas de staff": "#C0392B",
    "Problemas técnicos": "#8E44AD",
    "Otros servicios": "#D35400",
    "Sin categoría": "#95A5A6",
}

_INCIDENT_SUBCATEGORY = {
    "Pérdida de objetos": "#F39C12",
    "Queja de instalaciones": "#E74C3C",
    "Queja de estancia": "#3498DB",
    "Queja del personal": "#9B59B6",
    "Queja de otros servicios del hotel": "#2ECC71",
    "Sin subcategoría": "#95A5A6",
}


def _freeze(table: dict[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(table))


def _fold(table: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType({name.casefold(): color for name, color in table.items()})


CHART_COLORS: Mapping[ColorDomain, Mapping[str, str]] = MappingProxyType(
    {
        ColorDomain.SENTIMENT: _freeze(_SENTIMENT),
        ColorDomain.LANGUAGE: _freeze(_LANGUAGE),
        ColorDomain.CATEGORY: _freeze(_CATEGORY),
        ColorDomain.SLA: _freeze(_SLA),
        ColorDomain.INCIDENT: _freeze(_INCIDENT),
        ColorDomain.INCIDENT_SUBCATEGORY: _freeze(_INCIDENT_SUBCATEGORY),
    }
)

_FOLDED: Mapping[ColorDomain, Mapping[str, str]] = MappingProxyType(
    {domain: _fold(table) for domain, table in CHART_COLORS.items()}
)


def color_for(domain: ColorDomain | str, name: Any) -> str:
    """Display color for ``name`` in ``domain``; exact match, then case-insensitive."""
    try:
        key = ColorDomain(domain)
    except ValueError:
        return DEFAULT_COLOR
    if not isinstance(name, str):
        return DEFAULT_COLOR

    color = CHART_COLORS[key].get(name)
    if color is not None:
        return color
    return _FOLDED[key].get(name.strip().casefold(), DEFAULT_COLOR)
