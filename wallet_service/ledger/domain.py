"""
Ledger domain types.
Accounts and transactions are immutable values; the engine returns new ones.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Iterable, Optional, Tuple

from wallet_service.ledger.errors import LedgerIntegrityError


class TransactionType(enum.Enum):
    """Kinds of balance-changing events."""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER_OUT = "transfer-out"
    TRANSFER_IN = "transfer-in"
    TOPUP = "topup"
    ESEWA = "esewa"


CREDIT_TYPES = frozenset({TransactionType.DEPOSIT, TransactionType.TRANSFER_IN})


@dataclass(frozen=True)
class Transaction:
    """
    One ledger entry. `amount` is the moved value; `fee` is the extra debit
    charged to the sender of a cross-institution transfer and is zero on
    every other record.
    """
    type: TransactionType
    amount: int
    timestamp: datetime
    details: str
    balance_after: int
    fee: int = 0

    @property
    def signed_amount(self) -> int:
        if self.type in CREDIT_TYPES:
            return self.amount
        return -(self.amount + self.fee)


@dataclass(frozen=True)
class Account:
    """
    Snapshot of one wallet account.

    `version` is the persisted version the snapshot was read at; repositories
    use it to detect concurrent writers.
    """
    id: int
    phone: str
    name: str
    balance: int
    opening_balance: int
    password_hash: str = field(repr=False)
    pin_hash: str = field(repr=False)
    dob: Optional[date] = None
    age: Optional[int] = None
    created_at: Optional[datetime] = None
    version: int = 1
    transactions: Tuple[Transaction, ...] = ()

    @property
    def last_timestamp(self) -> Optional[datetime]:
        if not self.transactions:
            return None
        return self.transactions[-1].timestamp

    def append(self, transaction: Transaction) -> "Account":
        """Return a copy with `transaction` applied and recorded."""
        return replace(
            self,
            balance=transaction.balance_after,
            transactions=self.transactions + (transaction,),
        )


@dataclass(frozen=True)
class TransferResult:
    sender: Account
    receiver: Account
    outgoing: Transaction
    incoming: Transaction

    @property
    def fee(self) -> int:
        return self.outgoing.fee


def replay_balance(opening_balance: int, transactions: Iterable[Transaction]) -> int:
    """
    Recompute the running balance from `opening_balance`.

    Raises LedgerIntegrityError at the first record whose `balance_after`
    differs from the running total or would be negative.
    """
    balance = opening_balance
    for index, transaction in enumerate(transactions):
        if transaction.amount <= 0 or transaction.fee < 0:
            raise LedgerIntegrityError(f"record {index}: invalid amount or fee")
        balance += transaction.signed_amount
        if balance < 0:
            raise LedgerIntegrityError(f"record {index}: negative running balance {balance}")
        if transaction.balance_after != balance:
            raise LedgerIntegrityError(
                f"record {index}: balance_after {transaction.balance_after} != {balance}"
            )
    return balance


def verify_account(account: Account) -> None:
    """Raise LedgerIntegrityError if history does not reproduce the balance."""
    final = replay_balance(account.opening_balance, account.transactions)
    if final != account.balance:
        raise LedgerIntegrityError(
            f"account {account.id}: replayed balance {final} != stored {account.balance}"
        )
