"""
User Management Use Cases

Profile read and update for the authenticated user.
"""

from .get_profile_use_case import GetProfileUseCase
from .update_profile_use_case import UpdateProfileUseCase
from .dtos import ProfileResponse, UpdateProfileResponse

__all__ = [
    "GetProfileUseCase",
    "UpdateProfileUseCase",
    "ProfileResponse",
    "UpdateProfileResponse",
]
