"""
Sliding-window rate limiter for tool calls.

Backed by the ``limits`` moving-window strategy: each admitted call records a
timestamp, timestamps older than the window drop out, and a call is admitted
only while fewer than the ceiling remain. Denied calls record nothing.
"""

import logging
from typing import Optional, Union

from limits import RateLimitItem, RateLimitItemPerSecond, parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ID = "default"


class RateLimiter:
    """Per-client sliding window limiter owned by the dispatcher."""

    def __init__(self, limit: Union[str, RateLimitItem] = "50/minute"):
        """
        Args:
            limit: Either a ``limits`` string such as ``"50/minute"`` or a
                prebuilt ``RateLimitItem``.
        """
        self.limit = parse(limit) if isinstance(limit, str) else limit
        self._storage = MemoryStorage()
        self._strategy = MovingWindowRateLimiter(self._storage)

    @classmethod
    def from_window(cls, max_requests: int = 50, window_seconds: int = 60) -> "RateLimiter":
        """Build a limiter admitting ``max_requests`` per ``window_seconds``."""
        return cls(RateLimitItemPerSecond(max_requests, window_seconds))

    @property
    def max_requests(self) -> int:
        return self.limit.amount

    @property
    def window_seconds(self) -> int:
        return self.limit.get_expiry()

    def allow(self, client_id: str = DEFAULT_CLIENT_ID) -> bool:
        """Record a request for ``client_id`` if the window has room."""
        allowed = self._strategy.hit(self.limit, client_id)
        if not allowed:
            logger.warning(
                "Rate limit of %s exceeded for client '%s'", self.limit, client_id
            )
        return allowed

    def remaining(self, client_id: str = DEFAULT_CLIENT_ID) -> int:
        """Number of requests still available in the current window."""
        return self._strategy.get_window_stats(self.limit, client_id).remaining

    def reset(self, client_id: Optional[str] = None) -> None:
        """Forget recorded requests for one client, or for everyone."""
        if client_id is None:
            self._storage.reset()
        else:
            self._strategy.clear(self.limit, client_id)
