"""
Password hashing with bcrypt.

bcrypt only reads the first 72 bytes of its input, so passwords are first
reduced to a base64 SHA-256 digest (44 bytes) and every character counts.
"""

import base64
import hashlib

import bcrypt


def _encode(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode()).digest())


class PasswordHasher:
    """bcrypt wrapper shared by the user repository and the auth use cases"""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        # Compared against when the identifier is unknown so both paths pay for one bcrypt check
        self._dummy_hash = bcrypt.hashpw(_encode("dummy_password"), bcrypt.gensalt(rounds))

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(_encode(password), bcrypt.gensalt(self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_encode(password), password_hash.encode())
        except ValueError:
            # Malformed stored hash
            return False

    def verify_dummy(self, password: str) -> None:
        bcrypt.checkpw(_encode(password), self._dummy_hash)
