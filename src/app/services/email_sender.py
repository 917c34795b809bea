"""
Email capability used by the core.

Delivery is an injected collaborator; callers only see an EmailResult
and never roll back state when delivery fails.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class EmailResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


class IEmailSender(ABC):
    """Email sender interface - application layer"""

    @abstractmethod
    async def send_mfa_code(self, email: str, code: str) -> EmailResult:
        """Send a 6-digit verification code"""
        pass

    @abstractmethod
    async def send_account_lockout_notification(
        self, email: str, unlock_time: datetime
    ) -> EmailResult:
        """Tell the owner their account is locked until unlock_time"""
        pass

    @abstractmethod
    async def send_password_change_notification(
        self, email: str, changed_at: datetime
    ) -> EmailResult:
        """Tell the owner their password changed"""
        pass
