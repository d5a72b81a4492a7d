"""
Refresh policy for the upstream catalog.
"""

from dataclasses import dataclass
from typing import Optional


DEFAULT_REFRESH_INTERVAL = 120.0


def should_fetch(now: float, last_fetch: Optional[float], interval: float) -> bool:
    """Return True when an upstream refresh is due.

    A missing ``last_fetch`` means no successful fetch was ever recorded, so a
    cold cache always warrants a fetch. The boundary is inclusive.
    """
    if last_fetch is None:
        return True
    return (now - last_fetch) >= interval


@dataclass(frozen=True)
class RefreshPolicy:
    """Binds the minimum interval (seconds) between upstream refreshes."""

    refresh_interval: float = DEFAULT_REFRESH_INTERVAL

    def should_fetch(self, now: float, last_fetch: Optional[float]) -> bool:
        return should_fetch(now, last_fetch, self.refresh_interval)
