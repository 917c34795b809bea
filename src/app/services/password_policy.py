"""
Password Policy Engine

Strength rules and password-history enforcement.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from config import ApplicationConfig
from src.app.services.credentials import verify_password
from src.domain.entities import User

MIN_LENGTH = 8
MAX_LENGTH = 128

COMMON_PASSWORDS = frozenset(
    [
        "password",
        "123456",
        "123456789",
        "qwerty",
        "abc123",
        "password123",
        "admin",
        "letmein",
        "welcome",
        "monkey",
        "1234567890",
        "password1",
        "qwerty123",
        "welcome123",
    ]
)

SYMBOL_PATTERN = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")
REPEATED_PATTERN = re.compile(r"(.)\1{3,}")


@dataclass
class PasswordValidation:
    valid: bool
    violations: List[str] = field(default_factory=list)
    strength: int = 0
    label: str = "Very Weak"


def _has_ascending_run(password: str, run: int = 3) -> bool:
    lowered = password.lower()
    for i in range(len(lowered) - run + 1):
        window = lowered[i : i + run]
        if not (window.isdigit() or (window.isalpha() and window.isascii())):
            continue
        if all(ord(window[j + 1]) - ord(window[j]) == 1 for j in range(run - 1)):
            return True
    return False


def strength_score(password: str) -> int:
    """0-100 score from length and character variety."""
    score = 0
    if len(password) >= 8:
        score += 25
    if len(password) >= 12:
        score += 15
    if len(password) >= 16:
        score += 10

    has_lower = bool(re.search(r"[a-z]", password))
    has_upper = bool(re.search(r"[A-Z]", password))
    has_digit = bool(re.search(r"\d", password))
    has_symbol = bool(SYMBOL_PATTERN.search(password))
    score += 10 * sum([has_lower, has_upper, has_digit, has_symbol])

    if len(password) >= 12 and (has_lower or has_upper) and has_digit and has_symbol:
        score += 20
    return min(100, score)


def strength_label(score: int) -> str:
    if score < 30:
        return "Very Weak"
    if score < 50:
        return "Weak"
    if score < 70:
        return "Fair"
    if score < 90:
        return "Good"
    return "Strong"


class PasswordPolicy:
    """
    Business Rules:
    - Length 8-128
    - At least one uppercase, lowercase, digit and symbol
    - Not in the common-password denylist (case-insensitive)
    - No run of 4+ identical consecutive characters
    - No ascending run of 3+ letters or digits ("abc", "123")
    - Not one of the last 5 stored password hashes
    """

    def __init__(self, history_size: int = None):
        self.history_size = history_size or ApplicationConfig.PASSWORD_HISTORY_SIZE

    def validate(self, password: str) -> PasswordValidation:
        violations = []

        if len(password) < MIN_LENGTH:
            violations.append(f"Password must be at least {MIN_LENGTH} characters long")
        if len(password) > MAX_LENGTH:
            violations.append(f"Password must be no more than {MAX_LENGTH} characters long")
        if not re.search(r"[A-Z]", password):
            violations.append("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", password):
            violations.append("Password must contain at least one lowercase letter")
        if not re.search(r"\d", password):
            violations.append("Password must contain at least one number")
        if not SYMBOL_PATTERN.search(password):
            violations.append("Password must contain at least one special character")
        if password.lower() in COMMON_PASSWORDS:
            violations.append("Password is too common. Please choose a more unique password")
        if REPEATED_PATTERN.search(password):
            violations.append(
                "Password cannot contain more than 3 consecutive identical characters"
            )
        if _has_ascending_run(password):
            violations.append("Password cannot contain sequential characters")

        score = strength_score(password)
        return PasswordValidation(
            valid=not violations,
            violations=violations,
            strength=score,
            label=strength_label(score),
        )

    def check_history(self, user: User, new_password: str) -> bool:
        """True if new_password is acceptable (not among recent hashes)."""
        for entry in (user.password_history or [])[-self.history_size :]:
            if verify_password(new_password, entry.get("hash", "")):
                return False
        return True

    def push_history(self, user: User, password_hash: str, changed_at: datetime) -> None:
        """Append a hash, evicting the oldest beyond history_size."""
        history = list(user.password_history or [])
        history.append({"hash": password_hash, "changed_at": changed_at.isoformat()})
        # Reassign so the JSON column is flagged dirty
        user.password_history = history[-self.history_size :]
