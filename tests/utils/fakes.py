from datetime import datetime
from typing import List, Tuple

import bcrypt

from src.app.services.audit_trail import IGeoLocator
from src.app.services.credentials import hash_password
from src.app.services.email_sender import EmailResult, IEmailSender


class FakeEmailSender(IEmailSender):
    """Records every message instead of delivering it"""

    def __init__(self, success: bool = True):
        self.success = success
        self.sent: List[Tuple[str, str, object]] = []

    def _result(self) -> EmailResult:
        if self.success:
            return EmailResult(success=True, message_id=f"fake-{len(self.sent)}")
        return EmailResult(success=False, error="SMTP unavailable")

    async def send_mfa_code(self, email: str, code: str) -> EmailResult:
        self.sent.append(("mfa_code", email, code))
        return self._result()

    async def send_account_lockout_notification(
        self, email: str, unlock_time: datetime
    ) -> EmailResult:
        self.sent.append(("lockout", email, unlock_time))
        return self._result()

    async def send_password_change_notification(
        self, email: str, changed_at: datetime
    ) -> EmailResult:
        self.sent.append(("password_changed", email, changed_at))
        return self._result()

    def last_code(self) -> str:
        codes = [payload for kind, _, payload in self.sent if kind == "mfa_code"]
        return codes[-1]


class StaticGeoLocator(IGeoLocator):
    def __init__(self, location):
        self.location = location

    async def locate(self, ip_address):
        return self.location


def fast_hash(raw: str) -> str:
    """Low-cost password hash so fixtures stay quick"""
    return hash_password(raw, rounds=4)


def fast_code_hash(raw: str) -> str:
    """Low-cost backup code hash, stored the way MfaService stores them"""
    return bcrypt.hashpw(raw.encode("utf-8"), bcrypt.gensalt(4)).decode("utf-8")


def recorded_actions(uow) -> List[str]:
    """Actions passed to audit_logs.create, in order"""
    return [call.args[0].action for call in uow.audit_logs.create.call_args_list]


def recorded_entries(uow, action: str):
    return [
        call.args[0]
        for call in uow.audit_logs.create.call_args_list
        if call.args[0].action == action
    ]
