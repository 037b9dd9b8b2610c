"""
Session Manager

Creates, validates, rotates and invalidates server-side sessions.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.repositories.errors import PersistenceError
from src.app.services.request_context import RequestContext
from src.app.services.security_config import SecurityConfig
from src.app.services.token_manager import AccessTokenClaims, TokenManager
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import hash_token, utcnow
from src.domain.entities import (
    AccountStatus,
    AuthErrorCode,
    LoginMethod,
    Session,
    User,
)

logger = logging.getLogger(__name__)


@dataclass
class SessionBundle:
    """A freshly created session and the raw tokens handed to the client"""

    session: Session
    user: User
    session_token: str
    access_token: str
    refresh_token: str
    expires_in: int
    replaced_session_id: Optional[UUID] = None


@dataclass
class SessionData:
    session: Session
    user: User


class SessionManager:
    """
    Session lifecycle on top of the session repository.

    Business Rules:
    - Raw tokens are returned once; only SHA-256 digests are stored
    - expires_at is fixed at creation
    - Refresh rotates: a new session is created, then the old one is
      deactivated with a conditional update; losing that race fails
    - find_active resolves any of the three tokens to a still-active row;
      invalidate is idempotent
    """

    def __init__(
        self,
        uow: UnitOfWork,
        token_manager: TokenManager,
        config: SecurityConfig,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.uow = uow
        self.token_manager = token_manager
        self.config = config
        self._clock = clock

    async def create(
        self,
        user: User,
        ctx: Optional[RequestContext] = None,
        login_method: LoginMethod = LoginMethod.password,
        replacing: Optional[UUID] = None,
        lifetime: Optional[timedelta] = None,
    ) -> SessionBundle:
        """lifetime overrides session_ttl_hours (remember-me sessions)"""
        ctx = ctx or RequestContext()
        lifetime = lifetime or timedelta(hours=self.config.session_ttl_hours)
        await self._enforce_session_cap(user.id, replacing)

        tokens = self.token_manager.issue(
            AccessTokenClaims(user_id=str(user.id), role=user.role.value, email=user.email),
            refresh_ttl=max(lifetime, self.token_manager.refresh_ttl),
        )
        session_token = secrets.token_urlsafe(32)
        now = self._clock()

        session = Session(
            user_id=user.id,
            session_token_hash=hash_token(session_token),
            access_token_hash=hash_token(tokens.access_token),
            refresh_token_hash=hash_token(tokens.refresh_token),
            ip_address=ctx.ip_address,
            user_agent=ctx.user_agent,
            login_method=login_method,
            created_at=now,
            last_accessed=now,
            expires_at=now + lifetime,
        )
        session = await self.uow.sessions.create(session)

        return SessionBundle(
            session=session,
            user=user,
            session_token=session_token,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_in=tokens.expires_in,
        )

    async def _enforce_session_cap(self, user_id: UUID, replacing: Optional[UUID]) -> None:
        cap = self.config.max_concurrent_sessions
        if not cap:
            return

        active = [
            s for s in await self.uow.sessions.get_active_by_user_id(user_id) if s.id != replacing
        ]
        # Room for the session about to be created
        overflow = len(active) - (cap - 1)
        for stale in active[: max(0, overflow)]:
            await self.uow.sessions.invalidate_by_id(stale.id)
            logger.info(f"Evicted session {stale.id} for user {user_id}: concurrent session cap {cap}")

    async def validate(self, token: str) -> Optional[SessionData]:
        """Resolve a session token or access token. Fails closed with None."""
        if not token:
            return None

        token_hash = hash_token(token)
        session = await self.uow.sessions.get_by_token(token_hash)
        if session is None or not session.is_active:
            return None

        # An access token must still be a valid, unexpired JWT
        if session.access_token_hash == token_hash:
            if self.token_manager.verify_access(token).is_err():
                return None

        now = self._clock()
        if session.expires_at <= now:
            await self.uow.sessions.invalidate_by_id(session.id)
            return None

        user = await self.uow.users.get_by_id(session.user_id)
        if user is None or user.account_status != AccountStatus.active:
            return None

        try:
            await self.uow.sessions.touch(session.id, now)
        except PersistenceError:
            logger.warning(f"Could not update last_accessed for session {session.id}", exc_info=True)

        return SessionData(session=session, user=user)

    async def refresh(
        self, refresh_token: str, ctx: Optional[RequestContext] = None
    ) -> Result[SessionBundle]:
        verified = self.token_manager.verify_refresh(refresh_token)
        if verified.is_err():
            if verified.error.code == AuthErrorCode.TOKEN_EXPIRED:
                return Return.err(Error(AuthErrorCode.SESSION_EXPIRED, "Session has expired"))
            return Return.err(verified.error)
        claims = verified.value

        session = await self.uow.sessions.get_by_refresh_token(hash_token(refresh_token))
        if session is None or str(session.user_id) != claims.user_id:
            return Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid refresh token"))

        if not session.is_active:
            logger.warning(f"Reuse of rotated or revoked refresh token for session {session.id}")
            return Return.err(
                Error(AuthErrorCode.INVALID_TOKEN, "Refresh token has already been used or revoked")
            )

        if session.expires_at <= self._clock():
            await self.uow.sessions.invalidate_by_id(session.id)
            return Return.err(Error(AuthErrorCode.SESSION_EXPIRED, "Session has expired"))

        user = await self.uow.users.get_by_id(session.user_id)
        if user is None:
            return Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid refresh token"))
        if user.account_status != AccountStatus.active:
            return Return.err(
                Error(AuthErrorCode.ACCOUNT_INACTIVE, f"Account is {user.account_status.value}")
            )

        # Rotation keeps the lifetime the session was created with
        bundle = await self.create(
            user,
            ctx,
            LoginMethod.refresh,
            replacing=session.id,
            lifetime=session.expires_at - session.created_at,
        )

        # Only one concurrent refresh can flip is_active on the old row
        if not await self.uow.sessions.invalidate_by_id(session.id):
            return Return.err(
                Error(AuthErrorCode.INVALID_TOKEN, "Refresh token has already been used or revoked")
            )

        bundle.replaced_session_id = session.id
        return Return.ok(bundle)

    async def find_active(self, token: str) -> Optional[Session]:
        """Active session for a session, access or refresh token, without expiry checks"""
        if not token:
            return None

        token_hash = hash_token(token)
        session = await self.uow.sessions.get_by_token(token_hash)
        if session is None:
            session = await self.uow.sessions.get_by_refresh_token(token_hash)
        if session is None or not session.is_active:
            return None
        return session

    async def invalidate(self, token: str) -> Optional[Session]:
        """Deactivate the session behind a token. None when it was already inactive."""
        session = await self.find_active(token)
        if session is None:
            return None
        if not await self.uow.sessions.invalidate_by_id(session.id):
            return None
        return session
