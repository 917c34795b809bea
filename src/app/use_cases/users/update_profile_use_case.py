from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from .dtos import ProfileResponse, UpdateProfileResponse


class UpdateProfileUseCase:
    """Only the display name is editable; email and security fields are not."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self, user_id: UUID, name: Optional[str] = None
    ) -> Result[UpdateProfileResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if name is not None:
                name = name.strip()
                if not name or len(name) > 50:
                    return Return.err(
                        Error("VALIDATION_ERROR", "Name must be between 1 and 50 characters")
                    )
                user.name = name
                user = await self.uow.users.update(user)
                await self.uow.commit()

            return Return.ok(UpdateProfileResponse(user=ProfileResponse.from_entity(user)))
