import hashlib
from datetime import UTC, datetime


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite DateTime columns drop tzinfo"""
    return datetime.now(UTC).replace(tzinfo=None)


def hash_token(token: str) -> str:
    """SHA-256 hex digest used to store and look up opaque tokens"""
    return hashlib.sha256(token.encode()).hexdigest()


def to_epoch(value: datetime) -> float:
    """Epoch seconds for a naive UTC timestamp"""
    return value.replace(tzinfo=UTC).timestamp()
