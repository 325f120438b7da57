"""
Dashboard Store — One-slot holder of the displayed dashboard.

Each refresh cycle takes a generation token from ``begin()``. Results are
applied only if their token is still the latest issued, so a slow response
for an old date range never overwrites a newer one (last-requested-wins).
The slot is replaced by assigning a new immutable snapshot.

Stores live in an in-process registry keyed by user. Resets on deploy/crash.
"""

from __future__ import annotations

import logging
from itertools import count

from opsdash.models.dashboard import DashboardDataModel, DashboardSnapshot

logger = logging.getLogger(__name__)


class DashboardStore:
    """Latest displayed dashboard for one user."""

    def __init__(self) -> None:
        self._tokens = count(1)
        self._latest_token = 0
        self._snapshot = DashboardSnapshot()

    @property
    def snapshot(self) -> DashboardSnapshot:
        return self._snapshot

    def begin(self) -> int:
        """Start a cycle and return its generation token."""
        self._latest_token = next(self._tokens)
        return self._latest_token

    def is_current(self, token: int) -> bool:
        return token == self._latest_token

    def commit(self, token: int, model: DashboardDataModel) -> bool:
        """Replace the displayed model. Returns False if ``token`` was superseded."""
        if not self.is_current(token):
            logger.debug("Discarding superseded dashboard (token=%d)", token)
            return False
        self._snapshot = DashboardSnapshot(model=model, error=None, generation=token)
        return True

    def fail(
        self,
        token: int,
        error: str,
        replacement: DashboardDataModel | None = None,
    ) -> bool:
        """Record a failed cycle.

        The displayed model is kept unless ``replacement`` is given. Returns
        False if ``token`` was superseded.
        """
        if not self.is_current(token):
            logger.debug("Discarding superseded failure (token=%d)", token)
            return False
        model = replacement if replacement is not None else self._snapshot.model
        self._snapshot = DashboardSnapshot(model=model, error=error, generation=token)
        return True


# Registry
_stores: dict[str, DashboardStore] = {}


def get_dashboard_store(key: str) -> DashboardStore:
    """Get or create the store for ``key`` (one per user)."""
    store = _stores.get(key)
    if store is None:
        store = _stores[key] = DashboardStore()
    return store


def reset_dashboard_stores() -> None:
    """Drop every store (for testing)."""
    _stores.clear()
