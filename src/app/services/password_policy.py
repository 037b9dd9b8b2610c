"""
Password Policy Validator

Hard gates decide validity; the score is advisory strength only.
"""

import re
from typing import List, Optional

from pydantic import BaseModel, Field

from src.app.services.security_config import PasswordPolicyConfig

SPECIAL_CHARS = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?~`]")
REPEATED_RUN = re.compile(r"(.)\1{2,}")
KEYBOARD_PATTERNS = ("qwerty", "asdf", "zxcv", "1234", "abcd")

COMMON_PASSWORDS = frozenset(
    [
        "password", "123456", "123456789", "qwerty", "abc123",
        "password1", "12345678", "111111", "1234567", "sunshine",
        "qwerty123", "iloveyou", "princess", "admin", "welcome",
        "666666", "football", "123123", "monkey", "654321",
        "!@#$%^&*", "charlie", "aa123456", "donald", "password123",
        "qwerty1", "dragon", "123qwe", "solo", "passw0rd",
        "starwars", "hello", "freedom", "whatever", "qazwsx",
        "trustno1", "jordan23", "harley", "robert", "matthew",
        "jordan", "daniel", "letmein", "welcome1", "admin123",
    ]
)


class UserInfo(BaseModel):
    """Personal details a password must not contain"""

    username: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class PasswordValidationResult(BaseModel):
    is_valid: bool
    score: int
    feedback: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


def _has_sequential_run(password: str) -> bool:
    """True for any 3-char ascending or descending letter/digit run (abc, 321)"""
    lowered = password.lower()
    for i in range(len(lowered) - 2):
        run = lowered[i : i + 3]
        if not (run.isdigit() or run.isalpha()):
            continue
        a, b, c = run
        step = ord(b) - ord(a)
        if step in (1, -1) and ord(c) - ord(b) == step:
            return True
    return False


def strength_label(score: int) -> str:
    if score < 40:
        return "Password is very weak"
    if score < 60:
        return "Password is weak"
    if score < 80:
        return "Password is moderate"
    return "Password is strong"


class PasswordPolicyValidator:
    """
    Validates candidate passwords.

    Business Rules:
    - Each missing character class both gates validity and withholds 15 points
    - Common passwords are rejected by case-insensitive exact match
    - Username, email local part, first and last name may not appear in
      the password (case-insensitive substring)
    - is_valid is true iff there is no feedback, regardless of score
    """

    def __init__(self, config: Optional[PasswordPolicyConfig] = None):
        self.config = config or PasswordPolicyConfig()

    def validate(
        self, password: str, user_info: Optional[UserInfo] = None
    ) -> PasswordValidationResult:
        config = self.config
        feedback: List[str] = []
        warnings: List[str] = []
        score = 0

        if len(password) < config.min_length:
            feedback.append(f"Password must be at least {config.min_length} characters long")
        else:
            score += 20

        if len(password) > config.max_length:
            feedback.append(f"Password must not exceed {config.max_length} characters")

        classes = [
            (config.require_uppercase, bool(re.search(r"[A-Z]", password)), "uppercase letter"),
            (config.require_lowercase, bool(re.search(r"[a-z]", password)), "lowercase letter"),
            (config.require_numbers, bool(re.search(r"\d", password)), "number"),
            (config.require_special_chars, bool(SPECIAL_CHARS.search(password)), "special character"),
        ]
        for required, present, label in classes:
            if present:
                score += 15
            elif required:
                feedback.append(f"Password must contain at least one {label}")

        if config.prevent_common_passwords and password.lower() in COMMON_PASSWORDS:
            feedback.append("This password is too common. Please choose a more unique password")
        else:
            score += 10

        if config.prevent_user_info and user_info is not None:
            violations = self._user_info_violations(password, user_info)
            if violations:
                feedback.append("Password should not contain personal information")
                warnings.extend(violations)
            else:
                score += 10

        variety = sum(1 for _, present, _ in classes if present)
        score += self._complexity_score(password, variety)
        score = max(0, min(100, score))

        warnings.append(strength_label(score))

        return PasswordValidationResult(
            is_valid=not feedback, score=score, feedback=feedback, warnings=warnings
        )

    def _user_info_violations(self, password: str, user_info: UserInfo) -> List[str]:
        lowered = password.lower()
        violations = []

        if user_info.username and user_info.username.lower() in lowered:
            violations.append("Contains username")

        if user_info.email:
            local_part = user_info.email.lower().split("@")[0]
            if local_part and local_part in lowered:
                violations.append("Contains email address")

        if user_info.first_name and user_info.first_name.lower() in lowered:
            violations.append("Contains first name")

        if user_info.last_name and user_info.last_name.lower() in lowered:
            violations.append("Contains last name")

        return violations

    def _complexity_score(self, password: str, variety: int) -> int:
        score = 0

        if len(password) >= 12:
            score += 5
        if len(password) >= 16:
            score += 5

        score += variety * 2

        lowered = password.lower()
        if REPEATED_RUN.search(password):
            score -= 5
        if _has_sequential_run(password):
            score -= 5
        if any(pattern in lowered for pattern in KEYBOARD_PATTERNS):
            score -= 5

        return score
