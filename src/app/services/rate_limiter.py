"""
Rate Limiter

In-memory fixed-window limiter keyed by ``purpose:identifier``.
State is per process; several workers each keep their own counters.
"""

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from pydantic import BaseModel

from src.app.services.security_config import RateLimitPolicy

logger = logging.getLogger(__name__)


@dataclass
class RateLimitEntry:
    count: int
    window_reset_at: float
    blocked_until: Optional[float] = None


class RateLimitDecision(BaseModel):
    allowed: bool
    remaining: int
    reset_at: float
    block_until: Optional[float] = None
    retry_after: int = 0


class RateLimiter:
    """
    Fixed-window rate limiter.

    Business Rules:
    - First request for a key opens a window with count=1
    - Within the window every call increments; count > max_attempts denies,
      and blocks for block_seconds when the policy has a block duration
    - While blocked, calls are denied without incrementing
    - Once the window has elapsed (and no block is active) the key starts
      over at count=1
    """

    def __init__(
        self,
        policies: Dict[str, RateLimitPolicy],
        clock: Callable[[], float] = time.time,
    ):
        self.policies = dict(policies)
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def _policy(self, purpose: str) -> RateLimitPolicy:
        try:
            return self.policies[purpose]
        except KeyError:
            raise ValueError(f"No rate limit policy configured for '{purpose}'") from None

    def check(self, purpose: str, identifier: str) -> RateLimitDecision:
        """Count one attempt for the key and decide whether it may proceed"""
        policy = self._policy(purpose)
        key = f"{purpose}:{identifier}"

        with self._lock:
            now = self._clock()
            entry = self._entries.get(key)

            if entry is not None and entry.blocked_until is not None and now < entry.blocked_until:
                return RateLimitDecision(
                    allowed=False,
                    remaining=0,
                    reset_at=entry.window_reset_at,
                    block_until=entry.blocked_until,
                    retry_after=math.ceil(entry.blocked_until - now),
                )

            if entry is None or now > entry.window_reset_at:
                entry = RateLimitEntry(count=1, window_reset_at=now + policy.window_seconds)
                self._entries[key] = entry
                return RateLimitDecision(
                    allowed=True,
                    remaining=policy.max_attempts - 1,
                    reset_at=entry.window_reset_at,
                )

            entry.count += 1

            if entry.count > policy.max_attempts:
                if policy.block_seconds > 0:
                    entry.blocked_until = now + policy.block_seconds
                    logger.warning(f"Rate limit block for {purpose} until {entry.blocked_until:.0f}")
                    return RateLimitDecision(
                        allowed=False,
                        remaining=0,
                        reset_at=entry.window_reset_at,
                        block_until=entry.blocked_until,
                        retry_after=math.ceil(policy.block_seconds),
                    )
                return RateLimitDecision(
                    allowed=False,
                    remaining=0,
                    reset_at=entry.window_reset_at,
                    retry_after=max(1, math.ceil(entry.window_reset_at - now)),
                )

            return RateLimitDecision(
                allowed=True,
                remaining=policy.max_attempts - entry.count,
                reset_at=entry.window_reset_at,
            )

    def reset(self, purpose: str, identifier: str) -> None:
        with self._lock:
            self._entries.pop(f"{purpose}:{identifier}", None)

    def sweep(self) -> int:
        """Drop entries whose window and block have both elapsed. Returns count removed."""
        with self._lock:
            now = self._clock()
            expired = [
                key
                for key, entry in self._entries.items()
                if now > entry.window_reset_at
                and (entry.blocked_until is None or now >= entry.blocked_until)
            ]

        # Re-check under the lock per key: a request may have reopened it meanwhile
        removed = 0
        for key in expired:
            with self._lock:
                entry = self._entries.get(key)
                now = self._clock()
                if entry is not None and now > entry.window_reset_at and (
                    entry.blocked_until is None or now >= entry.blocked_until
                ):
                    del self._entries[key]
                    removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
