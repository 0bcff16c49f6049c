"""
Application services package.
"""

from wallet_service.services.ledger_service import LedgerService, calculate_age
from wallet_service.services.locks import AccountLockManager, account_locks

__all__ = ["LedgerService", "calculate_age", "AccountLockManager", "account_locks"]
