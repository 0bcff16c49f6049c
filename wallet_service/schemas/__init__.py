"""
Pydantic schemas package.
"""

from wallet_service.schemas.account import (
    BalanceResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    RegisterRequest,
    TokenResponse,
)
from wallet_service.schemas.transaction import (
    DepositRequest,
    OperationResponse,
    TopUpRequest,
    TransactionResponse,
    TransferRequest,
    TransferResponse,
    WalletLoadRequest,
    WithdrawRequest,
)

__all__ = [
    "BalanceResponse",
    "ChangePasswordRequest",
    "LoginRequest",
    "MessageResponse",
    "ProfileResponse",
    "RegisterRequest",
    "TokenResponse",
    "DepositRequest",
    "OperationResponse",
    "TopUpRequest",
    "TransactionResponse",
    "TransferRequest",
    "TransferResponse",
    "WalletLoadRequest",
    "WithdrawRequest",
]
