"""
Token Manager

Issues and verifies HS256 access/refresh JWTs with python-jose.
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JWTClaimsError
from pydantic import BaseModel

from libs.result import Error, Result, Return
from src.domain.entities import AuthErrorCode

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int  # access token lifetime in seconds


class AccessTokenClaims(BaseModel):
    user_id: str
    role: str
    email: str
    type: str = "access"


class RefreshTokenClaims(BaseModel):
    user_id: str
    type: str = "refresh"


class TokenManager:
    """
    Stateless JWT issuer/verifier.

    Business Rules:
    - Access tokens carry {user_id, role, email, type=access}
    - Refresh tokens carry {user_id, type=refresh} only
    - Every token gets a random jti so two tokens minted in the same
      second for the same user still differ
    - Verification checks issuer/audience first, then retries without
      them for tokens minted before those claims were added
    """

    def __init__(
        self,
        secret: str,
        issuer: str,
        audience: str,
        access_ttl_minutes: int = 15,
        refresh_ttl_days: int = 7,
    ):
        self.secret = secret
        self.issuer = issuer
        self.audience = audience
        self.access_ttl = timedelta(minutes=access_ttl_minutes)
        self.refresh_ttl = timedelta(days=refresh_ttl_days)

    def _encode(self, claims: Dict[str, Any], lifetime: timedelta) -> str:
        now = datetime.now(UTC)
        payload = {
            **claims,
            "jti": secrets.token_hex(16),
            "iat": now,
            "exp": now + lifetime,
            "iss": self.issuer,
            "aud": self.audience,
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def issue(
        self, claims: AccessTokenClaims, refresh_ttl: Optional[timedelta] = None
    ) -> TokenPair:
        """Mint an access/refresh pair. refresh_ttl overrides the default refresh lifetime."""
        access_token = self._encode(
            {
                "user_id": claims.user_id,
                "role": claims.role,
                "email": claims.email,
                "type": "access",
            },
            self.access_ttl,
        )
        refresh_token = self._encode(
            {"user_id": claims.user_id, "type": "refresh"}, refresh_ttl or self.refresh_ttl
        )
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.access_ttl.total_seconds()),
        )

    def _decode(self, token: str) -> Result[Dict[str, Any]]:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                audience=self.audience,
            )
            return Return.ok(payload)
        except ExpiredSignatureError:
            return Return.err(Error(AuthErrorCode.TOKEN_EXPIRED, "Token has expired"))
        except JWTClaimsError:
            # Fall through to the legacy decode below
            pass
        except JWTError:
            return Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid token"))

        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                options={"verify_aud": False, "verify_iss": False},
            )
        except ExpiredSignatureError:
            return Return.err(Error(AuthErrorCode.TOKEN_EXPIRED, "Token has expired"))
        except JWTError:
            return Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid token"))

        # Legacy tokens have no iss/aud; a foreign one is still rejected
        if payload.get("iss", self.issuer) != self.issuer or payload.get(
            "aud", self.audience
        ) != self.audience:
            return Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid token"))

        logger.debug("Accepted token without issuer/audience claims")
        return Return.ok(payload)

    def verify_access(self, token: str) -> Result[AccessTokenClaims]:
        result = self._decode(token)
        if result.is_err():
            return result

        payload = result.value
        if payload.get("type") != "access":
            return Return.err(
                Error(AuthErrorCode.WRONG_TOKEN_TYPE, "Expected an access token")
            )
        if not payload.get("user_id"):
            return Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid token"))

        return Return.ok(
            AccessTokenClaims(
                user_id=payload["user_id"],
                role=payload.get("role", ""),
                email=payload.get("email", ""),
            )
        )

    def verify_refresh(self, token: str) -> Result[RefreshTokenClaims]:
        result = self._decode(token)
        if result.is_err():
            return result

        payload = result.value
        if payload.get("type") != "refresh":
            return Return.err(
                Error(AuthErrorCode.WRONG_TOKEN_TYPE, "Expected a refresh token")
            )
        if not payload.get("user_id"):
            return Return.err(Error(AuthErrorCode.INVALID_TOKEN, "Invalid token"))

        return Return.ok(RefreshTokenClaims(user_id=payload["user_id"]))
