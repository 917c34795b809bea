"""
MFA Use Cases

Enrollment, confirmation and removal of a second factor.
"""

from .enable_mfa_use_case import EnableMfaUseCase
from .confirm_mfa_use_case import ConfirmMfaUseCase
from .disable_mfa_use_case import DisableMfaUseCase
from .dtos import ConfirmMfaResponse, EnableMfaResponse

__all__ = [
    "EnableMfaUseCase",
    "ConfirmMfaUseCase",
    "DisableMfaUseCase",
    "EnableMfaResponse",
    "ConfirmMfaResponse",
]
