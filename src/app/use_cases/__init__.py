"""
Use Cases

All use cases are organized into domain folders:
- auth/: Signup, login, MFA verification, password change, logout
- mfa/: MFA enrollment and removal
- items/: Auction listing, bidding and closing
- wallet/: Balance and deposits
- users/: Profile
- audit/: Audit trail

Import from subdirectories for better organization.
"""

from .auth import (
    SignupUseCase,
    SignupCommand,
    SignupResponse,
    LoginUseCase,
    VerifyMfaUseCase,
    SendLoginMfaCodeUseCase,
    ChangePasswordUseCase,
    LogoutUseCase,
)
from .mfa import (
    EnableMfaUseCase,
    ConfirmMfaUseCase,
    DisableMfaUseCase,
)
from .items import (
    CreateItemUseCase,
    ListItemsUseCase,
    GetItemUseCase,
    PlaceBidUseCase,
    CloseExpiredAuctionsUseCase,
)
from .wallet import (
    GetWalletUseCase,
    DepositUseCase,
)
from .users import (
    GetProfileUseCase,
    UpdateProfileUseCase,
)
from .audit import (
    GetAuditEventsUseCase,
)

__all__ = [
    # Auth
    "SignupUseCase",
    "SignupCommand",
    "SignupResponse",
    "LoginUseCase",
    "VerifyMfaUseCase",
    "SendLoginMfaCodeUseCase",
    "ChangePasswordUseCase",
    "LogoutUseCase",
    # MFA
    "EnableMfaUseCase",
    "ConfirmMfaUseCase",
    "DisableMfaUseCase",
    # Items
    "CreateItemUseCase",
    "ListItemsUseCase",
    "GetItemUseCase",
    "PlaceBidUseCase",
    "CloseExpiredAuctionsUseCase",
    # Wallet
    "GetWalletUseCase",
    "DepositUseCase",
    # Users
    "GetProfileUseCase",
    "UpdateProfileUseCase",
    # Audit
    "GetAuditEventsUseCase",
]
