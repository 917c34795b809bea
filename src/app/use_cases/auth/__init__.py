"""
Authentication Use Cases

All authentication-related business logic.
"""

from .signup_use_case import SignupUseCase
from .login_use_case import LoginUseCase
from .verify_mfa_use_case import VerifyMfaUseCase
from .send_login_mfa_code_use_case import SendLoginMfaCodeUseCase
from .change_password_use_case import ChangePasswordUseCase
from .logout_use_case import LogoutUseCase
from .dtos import (
    LoginResponse,
    MessageResponse,
    SignupCommand,
    SignupResponse,
    UserInfo,
)

__all__ = [
    # Use Cases
    "SignupUseCase",
    "LoginUseCase",
    "VerifyMfaUseCase",
    "SendLoginMfaCodeUseCase",
    "ChangePasswordUseCase",
    "LogoutUseCase",
    # DTOs - Commands
    "SignupCommand",
    # DTOs - Responses
    "SignupResponse",
    "LoginResponse",
    "MessageResponse",
    # DTOs - Nested Models
    "UserInfo",
]
