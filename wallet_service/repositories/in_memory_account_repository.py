"""
In-memory account repository.
Same version semantics as the SQL repository; handy for tests and tooling.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Dict

from wallet_service.ledger.domain import Account
from wallet_service.ledger.errors import AccountNotFound, ConflictError, RegistrationError


class InMemoryAccountRepository:
    def __init__(self):
        self._accounts: Dict[int, Account] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def get_by_id(self, account_id: int) -> Account:
        with self._lock:
            account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFound(f"Account {account_id} not found")
        return account

    def get_by_public_identity(self, phone: str) -> Account:
        with self._lock:
            for account in self._accounts.values():
                if account.phone == phone:
                    return account
        raise AccountNotFound(f"Account {phone} not found")

    def _check(self, account: Account) -> Account:
        current = self._accounts.get(account.id)
        if current is None:
            raise AccountNotFound(f"Account {account.id} not found")
        if current.version != account.version:
            raise ConflictError(f"Account {account.id} was modified concurrently")
        if account.transactions[: len(current.transactions)] != current.transactions:
            raise ConflictError(f"Account {account.id} history diverged")
        return replace(account, version=current.version + 1)

    def save(self, account: Account) -> Account:
        with self._lock:
            stored = self._check(account)
            self._accounts[stored.id] = stored
        return stored

    def save_transfer(self, sender: Account, receiver: Account) -> tuple:
        with self._lock:
            new_sender = self._check(sender)
            new_receiver = self._check(receiver)
            self._accounts[new_sender.id] = new_sender
            self._accounts[new_receiver.id] = new_receiver
        return new_sender, new_receiver

    def create(
        self,
        *,
        name: str,
        phone: str,
        dob: date,
        age: int,
        password_hash: str,
        pin_hash: str,
        opening_balance: int,
    ) -> Account:
        with self._lock:
            if any(a.phone == phone for a in self._accounts.values()):
                raise RegistrationError("Phone already registered")
            account = Account(
                id=next(self._ids),
                phone=phone,
                name=name,
                balance=opening_balance,
                opening_balance=opening_balance,
                password_hash=password_hash,
                pin_hash=pin_hash,
                dob=dob,
                age=age,
                created_at=datetime.now(timezone.utc),
            )
            self._accounts[account.id] = account
        return account
