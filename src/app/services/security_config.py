"""
Security configuration

Every threshold used by the auth core, derived once from ApplicationConfig
and handed to the services at construction.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RateLimitPolicy(BaseModel):
    """Fixed-window limit for one purpose. block_seconds=0 means deny until the window resets."""

    max_attempts: int = Field(..., ge=1)
    window_seconds: int = Field(..., ge=1)
    block_seconds: int = Field(default=0, ge=0)


class PasswordPolicyConfig(BaseModel):
    min_length: int = 8
    max_length: int = 128
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_numbers: bool = True
    require_special_chars: bool = True
    prevent_common_passwords: bool = True
    prevent_user_info: bool = True


class SecurityConfig(BaseModel):
    jwt_secret: str
    jwt_issuer: str = "tutor-auth"
    jwt_audience: str = "tutor-app"
    access_token_ttl_minutes: int = 15
    refresh_token_ttl_days: int = 7

    session_ttl_hours: int = 24 * 7
    remember_me_session_ttl_days: int = 30
    max_concurrent_sessions: Optional[int] = None
    cookie_secure: bool = True
    trusted_proxies: List[str] = Field(default_factory=list)

    max_login_attempts: int = 5
    lockout_duration_minutes: int = 30

    rate_limits: Dict[str, RateLimitPolicy] = Field(default_factory=dict)
    password_policy: PasswordPolicyConfig = Field(default_factory=PasswordPolicyConfig)

    csrf_token_ttl_minutes: int = 60
    password_reset_ttl_minutes: int = 60
    cleanup_interval_seconds: int = 300
    bcrypt_rounds: int = 12

    @classmethod
    def from_application_config(cls, config) -> "SecurityConfig":
        return cls(
            jwt_secret=config.JWT_SECRET,
            jwt_issuer=config.JWT_ISSUER,
            jwt_audience=config.JWT_AUDIENCE,
            access_token_ttl_minutes=config.ACCESS_TOKEN_TTL_MINUTES,
            refresh_token_ttl_days=config.REFRESH_TOKEN_TTL_DAYS,
            session_ttl_hours=config.SESSION_TTL_HOURS,
            remember_me_session_ttl_days=config.REMEMBER_ME_SESSION_TTL_DAYS,
            max_concurrent_sessions=config.MAX_CONCURRENT_SESSIONS,
            cookie_secure=config.COOKIE_SECURE,
            trusted_proxies=list(config.TRUSTED_PROXIES),
            max_login_attempts=config.MAX_LOGIN_ATTEMPTS,
            lockout_duration_minutes=config.LOCKOUT_DURATION_MINUTES,
            rate_limits={
                "login": RateLimitPolicy(
                    max_attempts=config.LOGIN_RATE_LIMIT_MAX_ATTEMPTS,
                    window_seconds=config.LOGIN_RATE_LIMIT_WINDOW_SECONDS,
                    block_seconds=config.LOGIN_RATE_LIMIT_BLOCK_SECONDS,
                ),
                "password_reset": RateLimitPolicy(
                    max_attempts=config.PASSWORD_RESET_RATE_LIMIT_MAX_ATTEMPTS,
                    window_seconds=config.PASSWORD_RESET_RATE_LIMIT_WINDOW_SECONDS,
                ),
                "api": RateLimitPolicy(
                    max_attempts=config.API_RATE_LIMIT_MAX_REQUESTS,
                    window_seconds=config.API_RATE_LIMIT_WINDOW_SECONDS,
                ),
            },
            csrf_token_ttl_minutes=config.CSRF_TOKEN_TTL_MINUTES,
            password_reset_ttl_minutes=config.PASSWORD_RESET_TTL_MINUTES,
            cleanup_interval_seconds=config.CLEANUP_INTERVAL_SECONDS,
            bcrypt_rounds=config.BCRYPT_ROUNDS,
        )
