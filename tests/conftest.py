"""
Shared test configuration.
Environment is set before any wallet_service module reads settings.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import date, datetime, timedelta, timezone

import pytest

from wallet_service.ledger.clock import MonotonicClock
from wallet_service.ledger.domain import Account
from wallet_service.ledger.engine import LedgerEngine
from wallet_service.ledger.hashing import BcryptSecretVerifier

PIN = "1234"
PASSWORD = "Secret#123"

_verifier = BcryptSecretVerifier(rounds=4)
PIN_HASH = _verifier.hash(PIN)
PASSWORD_HASH = _verifier.hash(PASSWORD)


class SteppingClock(MonotonicClock):
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start=None):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

        def tick():
            value = self.current
            self.current = value + timedelta(seconds=1)
            return value

        super().__init__(source=tick)


@pytest.fixture
def verifier():
    return _verifier


@pytest.fixture
def ledger(verifier):
    return LedgerEngine(verifier=verifier, clock=SteppingClock())


@pytest.fixture
def make_account():
    def factory(balance=1000, account_id=1, phone=None, **overrides):
        values = dict(
            id=account_id,
            phone=phone or f"98000000{account_id:02d}",
            name=f"User {account_id}",
            balance=balance,
            opening_balance=balance,
            password_hash=PASSWORD_HASH,
            pin_hash=PIN_HASH,
            dob=date(1990, 1, 1),
            age=30,
        )
        values.update(overrides)
        return Account(**values)

    return factory
