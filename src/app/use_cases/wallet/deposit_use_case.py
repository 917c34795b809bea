"""
Deposit Use Case

Adds funds to the caller's wallet with an atomic increment.
"""

import math
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.audit_trail import AuditTrail, RequestContext
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AuditAction
from .dtos import DepositResponse


class DepositUseCase:
    def __init__(self, uow: UnitOfWork, context: Optional[RequestContext] = None):
        self.uow = uow
        self.context = context

    async def execute(self, user_id: UUID, amount: float) -> Result[DepositResponse]:
        if amount is None or not math.isfinite(amount) or amount <= 0:
            return Return.err(Error("INVALID_AMOUNT", "Valid deposit amount required"))
        amount = round(amount, 2)

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            balance = await self.uow.users.adjust_wallet(user_id, amount)
            if balance is None:
                return Return.err(Error("INTERNAL_ERROR", "Deposit could not be applied"))

            await AuditTrail(self.uow, self.context).record(
                AuditAction.wallet_deposit,
                user_id=user_id,
                details={"amount": amount, "new_balance": round(balance, 2)},
            )
            await self.uow.commit()
            return Return.ok(DepositResponse(new_balance=round(balance, 2)))
