import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./tutor_auth.db")
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    # Peers allowed to set X-Forwarded-For / X-Real-IP (addresses or CIDR ranges)
    TRUSTED_PROXIES = data.get("TRUSTED_PROXIES", [])
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    REQUEST_TIMEOUT_SECONDS = float(data.get("REQUEST_TIMEOUT_SECONDS", 10))

    # Token signing
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ISSUER = data.get("JWT_ISSUER", "tutor-auth")
    JWT_AUDIENCE = data.get("JWT_AUDIENCE", "tutor-app")
    ACCESS_TOKEN_TTL_MINUTES = int(data.get("ACCESS_TOKEN_TTL_MINUTES", 15))
    REFRESH_TOKEN_TTL_DAYS = int(data.get("REFRESH_TOKEN_TTL_DAYS", 7))

    # Sessions
    SESSION_TTL_HOURS = int(data.get("SESSION_TTL_HOURS", 24 * 7))
    REMEMBER_ME_SESSION_TTL_DAYS = int(data.get("REMEMBER_ME_SESSION_TTL_DAYS", 30))
    MAX_CONCURRENT_SESSIONS = data.get("MAX_CONCURRENT_SESSIONS", None)
    COOKIE_SECURE = bool(data.get("COOKIE_SECURE", True))

    # Account lockout
    MAX_LOGIN_ATTEMPTS = int(data.get("MAX_LOGIN_ATTEMPTS", 5))
    LOCKOUT_DURATION_MINUTES = int(data.get("LOCKOUT_DURATION_MINUTES", 30))

    # Rate limiting (in-memory, per process)
    LOGIN_RATE_LIMIT_MAX_ATTEMPTS = int(data.get("LOGIN_RATE_LIMIT_MAX_ATTEMPTS", 5))
    LOGIN_RATE_LIMIT_WINDOW_SECONDS = int(data.get("LOGIN_RATE_LIMIT_WINDOW_SECONDS", 15 * 60))
    LOGIN_RATE_LIMIT_BLOCK_SECONDS = int(data.get("LOGIN_RATE_LIMIT_BLOCK_SECONDS", 30 * 60))
    PASSWORD_RESET_RATE_LIMIT_MAX_ATTEMPTS = int(data.get("PASSWORD_RESET_RATE_LIMIT_MAX_ATTEMPTS", 3))
    PASSWORD_RESET_RATE_LIMIT_WINDOW_SECONDS = int(data.get("PASSWORD_RESET_RATE_LIMIT_WINDOW_SECONDS", 60 * 60))
    API_RATE_LIMIT_MAX_REQUESTS = int(data.get("API_RATE_LIMIT_MAX_REQUESTS", 100))
    API_RATE_LIMIT_WINDOW_SECONDS = int(data.get("API_RATE_LIMIT_WINDOW_SECONDS", 15 * 60))

    # CSRF / password reset / housekeeping
    CSRF_TOKEN_TTL_MINUTES = int(data.get("CSRF_TOKEN_TTL_MINUTES", 60))
    PASSWORD_RESET_TTL_MINUTES = int(data.get("PASSWORD_RESET_TTL_MINUTES", 60))
    CLEANUP_INTERVAL_SECONDS = int(data.get("CLEANUP_INTERVAL_SECONDS", 5 * 60))
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")
