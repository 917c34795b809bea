"""
MFA Challenge Engine

Two verification strategies selected by mfa_type (TOTP, emailed code)
plus one-time backup codes.
"""

import hashlib
import hmac
import secrets
import string
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import bcrypt
import pyotp

from config import ApplicationConfig
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User

BACKUP_CODE_ALPHABET = string.ascii_uppercase + string.digits
BACKUP_CODE_LENGTH = 8


def hash_code(code: str) -> str:
    """SHA-256 of a short-lived code, for storage and comparison."""
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


class MfaService:
    """
    Business Rules:
    - TOTP codes are valid for the current step +/- valid_window steps (30s each)
    - Email codes are 6 random digits, stored hashed, expire after 10 minutes
    - Email codes are single-use: any verification attempt clears the code
    - Issuing a new email code replaces any unconsumed one
    - Backup codes are stored as bcrypt hashes and removed when used
    - A backup code is accepted only if the stored list was not changed meanwhile
    """

    def __init__(
        self,
        valid_window: int = None,
        email_code_ttl: Optional[timedelta] = None,
        issuer: str = None,
        backup_code_count: int = None,
        backup_code_rounds: int = None,
    ):
        self.valid_window = (
            ApplicationConfig.TOTP_VALID_WINDOW if valid_window is None else valid_window
        )
        self.email_code_ttl = email_code_ttl or timedelta(
            minutes=ApplicationConfig.EMAIL_MFA_CODE_TTL_MINUTES
        )
        self.issuer = issuer or ApplicationConfig.MFA_ISSUER
        self.backup_code_count = backup_code_count or ApplicationConfig.MFA_BACKUP_CODE_COUNT
        self.backup_code_rounds = (
            backup_code_rounds or ApplicationConfig.BACKUP_CODE_BCRYPT_ROUNDS
        )

    # TOTP

    @staticmethod
    def generate_totp_secret() -> str:
        return pyotp.random_base32()

    def provisioning_uri(self, secret: str, email: str) -> str:
        return pyotp.TOTP(secret).provisioning_uri(name=email, issuer_name=self.issuer)

    def verify_totp(self, secret: Optional[str], code: str, for_time: Optional[int] = None) -> bool:
        """
        Args:
            secret: base32 TOTP secret
            code: submitted 6-digit code
            for_time: unix timestamp to verify against (defaults to now)
        """
        if not secret or not code:
            return False
        totp = pyotp.TOTP(secret)
        if for_time is None:
            return totp.verify(code, valid_window=self.valid_window)
        return totp.verify(code, for_time=for_time, valid_window=self.valid_window)

    # Email codes

    @staticmethod
    def generate_email_code() -> str:
        return f"{secrets.randbelow(10**6):06d}"

    def issue_email_code(self, user: User, now: datetime) -> str:
        """Set a fresh code on the user (replacing any previous one) and return it."""
        code = self.generate_email_code()
        user.email_mfa_code_hash = hash_code(code)
        user.email_mfa_code_expires = now + self.email_code_ttl
        return code

    async def verify_email_code(
        self, uow: UnitOfWork, user: User, code: str, now: datetime
    ) -> bool:
        stored_hash = user.email_mfa_code_hash
        expires = user.email_mfa_code_expires
        if not stored_hash:
            return False

        # Read-then-clear: only the caller whose conditional clear succeeds may pass
        consumed = await uow.users.consume_email_mfa_code(user.id, stored_hash)
        if not consumed:
            return False
        if expires is None or expires <= now:
            return False
        return hmac.compare_digest(stored_hash, hash_code(code or ""))

    # Backup codes

    def generate_backup_codes(self) -> Tuple[List[str], List[str]]:
        """Returns (plain codes for the user, hashes for storage)."""
        codes = [
            "".join(secrets.choice(BACKUP_CODE_ALPHABET) for _ in range(BACKUP_CODE_LENGTH))
            for _ in range(self.backup_code_count)
        ]
        hashes = [
            bcrypt.hashpw(code.encode("utf-8"), bcrypt.gensalt(self.backup_code_rounds)).decode(
                "utf-8"
            )
            for code in codes
        ]
        return codes, hashes

    async def consume_backup_code(self, uow, user: User, code: str) -> bool:
        """Remove the matching backup code from the user. True if one matched."""
        candidate = (code or "").strip().upper().encode("utf-8")
        if not candidate:
            return False
        stored_codes = list(user.mfa_backup_codes or [])
        for index, stored in enumerate(stored_codes):
            try:
                matched = bcrypt.checkpw(candidate, stored.encode("utf-8"))
            except ValueError:
                continue
            if matched:
                remaining = stored_codes[:index] + stored_codes[index + 1 :]
                # Lost if another request already changed the stored list
                if not await uow.users.consume_backup_code(user.id, stored_codes, remaining):
                    return False
                user.mfa_backup_codes = remaining
                return True
        return False
