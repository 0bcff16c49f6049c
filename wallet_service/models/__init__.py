"""
Database models package.
"""

from wallet_service.models.account import Account
from wallet_service.models.transaction import Transaction

__all__ = ["Account", "Transaction"]
