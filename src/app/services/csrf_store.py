"""
CSRF Token Store

One token per session, held in process memory.
"""

import hmac
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass
class CSRFToken:
    token: str
    expires_at: float


class CSRFTokenStore:
    """
    Issues and validates per-session CSRF tokens.

    Business Rules:
    - Token is 32 random bytes, hex encoded
    - Issuing again for a session replaces the previous token
    - A token never outlives its session (expiry capped at not_after)
    - Comparison is constant-time over bytes
    """

    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._tokens: Dict[str, CSRFToken] = {}
        self._lock = threading.Lock()

    def issue(self, session_id: str, not_after: Optional[float] = None) -> str:
        token = secrets.token_hex(32)
        with self._lock:
            expires_at = self._clock() + self.ttl_seconds
            if not_after is not None:
                expires_at = min(expires_at, not_after)
            self._tokens[session_id] = CSRFToken(token=token, expires_at=expires_at)
        return token

    def get(self, session_id: str) -> Optional[str]:
        """Current unexpired token for a session, if any"""
        with self._lock:
            entry = self._tokens.get(session_id)
            if entry is None or self._clock() >= entry.expires_at:
                return None
            return entry.token

    def validate(self, session_id: str, token: Optional[str]) -> bool:
        with self._lock:
            entry = self._tokens.get(session_id)
            if entry is not None and self._clock() >= entry.expires_at:
                del self._tokens[session_id]
                entry = None

        expected = entry.token if entry is not None else ""
        supplied = token or ""
        # compare_digest runs the full comparison even when lengths differ
        matches = hmac.compare_digest(expected.encode(), supplied.encode())
        return entry is not None and bool(token) and matches

    def revoke(self, session_id: str) -> None:
        with self._lock:
            self._tokens.pop(session_id, None)

    def sweep(self) -> int:
        """Drop expired tokens. Returns count removed."""
        with self._lock:
            now = self._clock()
            expired = [sid for sid, entry in self._tokens.items() if now >= entry.expires_at]

        removed = 0
        for session_id in expired:
            with self._lock:
                entry = self._tokens.get(session_id)
                if entry is not None and self._clock() >= entry.expires_at:
                    del self._tokens[session_id]
                    removed += 1
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
