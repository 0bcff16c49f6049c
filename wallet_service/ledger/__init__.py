"""
Ledger engine package.
"""

from wallet_service.ledger.domain import (
    Account,
    Transaction,
    TransactionType,
    TransferResult,
    replay_balance,
    verify_account,
)
from wallet_service.ledger.engine import LedgerEngine, normalize_amount
from wallet_service.ledger.policy import LedgerPolicy, OperationLimits, is_strong_password

__all__ = [
    "Account",
    "Transaction",
    "TransactionType",
    "TransferResult",
    "replay_balance",
    "verify_account",
    "LedgerEngine",
    "normalize_amount",
    "LedgerPolicy",
    "OperationLimits",
    "is_strong_password",
]
