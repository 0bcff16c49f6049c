"""
Account repositories package.
"""

from wallet_service.repositories.account_repository import AccountRepository
from wallet_service.repositories.in_memory_account_repository import InMemoryAccountRepository
from wallet_service.repositories.sql_account_repository import SqlAccountRepository

__all__ = ["AccountRepository", "InMemoryAccountRepository", "SqlAccountRepository"]
