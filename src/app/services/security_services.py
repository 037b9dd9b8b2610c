"""
Security services container

Process-wide, explicitly constructed security components. One instance is
built per application and shared by reference; nothing here is module
global, so tests get isolated instances.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from src.app.services.csrf_store import CSRFTokenStore
from src.app.services.password_hasher import PasswordHasher
from src.app.services.password_policy import PasswordPolicyValidator
from src.app.services.password_reset_notifier import PasswordResetNotifier
from src.app.services.rate_limiter import RateLimiter
from src.app.services.security_config import SecurityConfig
from src.app.services.token_manager import TokenManager

logger = logging.getLogger(__name__)

# Deletes expired session rows, returns how many
SessionPurger = Callable[[], Awaitable[int]]


class PeriodicSweeper:
    """
    Background task that sweeps the in-memory stores, and purges expired
    sessions when a purger is attached, on a fixed interval.

    Usage:
        sweeper = PeriodicSweeper(rate_limiter, csrf_store, interval_seconds=300)
        await sweeper.start()
        # ... later
        await sweeper.stop()
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        csrf_store: CSRFTokenStore,
        interval_seconds: float,
        session_purger: Optional[SessionPurger] = None,
    ):
        self.rate_limiter = rate_limiter
        self.csrf_store = csrf_store
        self.interval_seconds = interval_seconds
        self.session_purger = session_purger
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> int:
        removed = self.rate_limiter.sweep() + self.csrf_store.sweep()
        if removed:
            logger.debug(f"Swept {removed} expired rate-limit/CSRF entries")
        if self.session_purger is not None:
            removed += await self.session_purger()
        return removed

    async def start(self):
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.debug("Security sweeper started")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.debug("Security sweeper stopped")

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await self.sweep_once()
            except Exception:
                # Keep the loop alive; the next tick retries
                logger.exception("Security sweep failed")


class SecurityServices:
    """Holds the shared security components built from one SecurityConfig"""

    def __init__(
        self,
        config: SecurityConfig,
        reset_notifier: PasswordResetNotifier,
        rate_limiter: Optional[RateLimiter] = None,
        csrf_store: Optional[CSRFTokenStore] = None,
        session_purger: Optional[SessionPurger] = None,
    ):
        self.config = config
        self.token_manager = TokenManager(
            secret=config.jwt_secret,
            issuer=config.jwt_issuer,
            audience=config.jwt_audience,
            access_ttl_minutes=config.access_token_ttl_minutes,
            refresh_ttl_days=config.refresh_token_ttl_days,
        )
        self.password_validator = PasswordPolicyValidator(config.password_policy)
        self.password_hasher = PasswordHasher(config.bcrypt_rounds)
        self.rate_limiter = rate_limiter or RateLimiter(config.rate_limits)
        self.csrf_store = csrf_store or CSRFTokenStore(ttl_seconds=config.csrf_token_ttl_minutes * 60)
        self.reset_notifier = reset_notifier
        self.sweeper = PeriodicSweeper(
            self.rate_limiter,
            self.csrf_store,
            config.cleanup_interval_seconds,
            session_purger,
        )

    async def start(self):
        await self.sweeper.start()

    async def stop(self):
        await self.sweeper.stop()
