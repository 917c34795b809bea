"""
Get Profile Use Case

Loads the current user from the JWT subject.
"""

from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from .dtos import ProfileResponse


class GetProfileUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[ProfileResponse]:
        """
        Args:
            user_id: User UUID from JWT

        Returns:
            Result with ProfileResponse, or USER_NOT_FOUND
        """
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))
            return Return.ok(ProfileResponse.from_entity(user))
