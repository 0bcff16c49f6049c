"""Repository protocol for wallet accounts."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from wallet_service.ledger.domain import Account


class AccountRepository(Protocol):
    """
    Loads and stores Account snapshots.

    `save` and `save_transfer` raise ConflictError when a snapshot's version
    is no longer current. `save_transfer` raises PartialTransferFailure when
    the outcome of the two-account commit is unknown.
    """

    def get_by_id(self, account_id: int) -> Account: ...

    def get_by_public_identity(self, phone: str) -> Account: ...

    def save(self, account: Account) -> Account: ...

    def save_transfer(self, sender: Account, receiver: Account) -> tuple: ...

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
    ) -> Account: ...
