"""
Dashboard Rate Limiter — In-memory sliding window.

Keyed by scope and user. Each dashboard request triggers two upstream metrics
calls, so the limit protects the metrics API as much as this service.
Resets on deploy/crash.
"""

from __future__ import annotations

import logging
import time
from collections import defaultdict

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60.0


class RateLimiter:
    """Sliding window rate limiter."""

    def __init__(self) -> None:
        # key -> request timestamps inside the window
        self._windows: dict[str, list[float]] = defaultdict(list)

    def check(self, key: str, scope: str, rpm_limit: int) -> bool:
        """Record a request. Returns True if allowed, False if blocked."""
        window_key = f"{scope}:{key}"
        now = time.monotonic()
        window_start = now - _WINDOW_SECONDS

        recent = [t for t in self._windows[window_key] if t > window_start]
        self._windows[window_key] = recent

        if len(recent) >= rpm_limit:
            logger.warning("Rate limit hit: %s (%d RPM)", window_key, rpm_limit)
            return False

        recent.append(now)
        return True

    def reset(self) -> None:
        """Clear all windows (for testing)."""
        self._windows.clear()


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the singleton rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Reset the singleton (for testing)."""
    global _rate_limiter
    _rate_limiter = None
