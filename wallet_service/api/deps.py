"""
FastAPI dependencies wiring the ledger service to a request session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from wallet_service.core.config import settings
from wallet_service.database import get_db
from wallet_service.ledger.engine import LedgerEngine
from wallet_service.ledger.hashing import BcryptSecretVerifier
from wallet_service.ledger.policy import LedgerPolicy
from wallet_service.repositories.sql_account_repository import SqlAccountRepository
from wallet_service.services.ledger_service import LedgerService
from wallet_service.services.locks import account_locks

account_locks.timeout = settings.LOCK_TIMEOUT_SECONDS

ledger_engine = LedgerEngine(
    verifier=BcryptSecretVerifier(rounds=settings.BCRYPT_ROUNDS),
    policy=LedgerPolicy.from_settings(settings),
)


def get_engine() -> LedgerEngine:
    return ledger_engine


def get_ledger_service(
    db: Session = Depends(get_db),
    engine: LedgerEngine = Depends(get_engine),
) -> LedgerService:
    return LedgerService(
        SqlAccountRepository(db),
        engine,
        locks=account_locks,
        max_retries=settings.MAX_CONFLICT_RETRIES,
    )
