"""
Ledger engine.

Validates and applies balance-changing operations to Account snapshots and
produces the matching ledger entries. Performs no I/O: callers load accounts,
serialize access per account and persist what the engine returns.
"""

from __future__ import annotations

import re
from dataclasses import replace
from decimal import Decimal
from typing import Any, List, Optional

from wallet_service.ledger.clock import MonotonicClock
from wallet_service.ledger.domain import Account, Transaction, TransactionType, TransferResult
from wallet_service.ledger.errors import (
    AmountOutOfRange,
    AuthenticationFailed,
    InsufficientFunds,
    InvalidAmount,
    SameAccountTransfer,
    WeakSecret,
)
from wallet_service.ledger.hashing import SecretVerifier
from wallet_service.ledger.policy import LedgerPolicy, OperationLimits, is_strong_password

_DIGITS = re.compile(r"^\s*\d+\s*$")


def normalize_amount(value: Any) -> int:
    """
    Coerce a request amount to a strictly positive int.

    Accepts ints, integral floats and Decimals, and digit strings.
    Everything else (bools, fractions, blanks, None) is InvalidAmount.
    """
    if isinstance(value, bool):
        raise InvalidAmount("Amount must be a whole number")
    if isinstance(value, int):
        amount = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvalidAmount("Amount must be a whole number")
        amount = int(value)
    elif isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise InvalidAmount("Amount must be a whole number")
        amount = int(value)
    elif isinstance(value, str) and _DIGITS.match(value):
        try:
            amount = int(value.strip())
        except ValueError:
            # past the interpreter's int string-conversion digit limit
            raise InvalidAmount("Amount is too large") from None
    else:
        raise InvalidAmount("Amount must be a whole number")

    if amount <= 0:
        raise InvalidAmount("Amount must be positive")
    return amount


class LedgerEngine:
    """Pure ledger rules for one or two accounts at a time."""

    def __init__(
        self,
        verifier: SecretVerifier,
        policy: Optional[LedgerPolicy] = None,
        clock: Optional[MonotonicClock] = None,
    ):
        self.verifier = verifier
        self.policy = policy or LedgerPolicy()
        self.clock = clock or MonotonicClock()

    # ---- checks ----

    def _checked_amount(self, raw: Any, limits: OperationLimits, label: str) -> int:
        amount = normalize_amount(raw)
        if not limits.contains(amount):
            raise AmountOutOfRange(f"{label} amount must be {limits.describe()}")
        return amount

    def _verify_pin(self, account: Account, pin: Any) -> None:
        if not isinstance(pin, str) or not self.verifier.verify(pin, account.pin_hash):
            raise AuthenticationFailed("Invalid PIN")

    @staticmethod
    def _ensure_funds(account: Account, total: int) -> None:
        if account.balance < total:
            raise InsufficientFunds("Insufficient balance")

    def _timestamp(self, *accounts: Account):
        now = self.clock.now()
        for account in accounts:
            last = account.last_timestamp
            if last is not None and last > now:
                now = last
        return now

    def _debit(
        self,
        account: Account,
        raw_amount: Any,
        pin: Any,
        limits: OperationLimits,
        label: str,
        kind: TransactionType,
        describe,
    ) -> tuple:
        amount = self._checked_amount(raw_amount, limits, label)
        if limits.requires_pin:
            self._verify_pin(account, pin)
        self._ensure_funds(account, amount)

        entry = Transaction(
            type=kind,
            amount=amount,
            timestamp=self._timestamp(account),
            details=describe(amount),
            balance_after=account.balance - amount,
        )
        return account.append(entry), entry

    # ---- mutating operations ----

    def deposit(self, account: Account, amount: Any) -> tuple:
        limits = self.policy.deposit
        value = self._checked_amount(amount, limits, "Deposit")
        entry = Transaction(
            type=TransactionType.DEPOSIT,
            amount=value,
            timestamp=self._timestamp(account),
            details=f"Deposited {value}",
            balance_after=account.balance + value,
        )
        return account.append(entry), entry

    def withdraw(self, account: Account, amount: Any, pin: Any) -> tuple:
        return self._debit(
            account, amount, pin, self.policy.withdraw, "Withdraw",
            TransactionType.WITHDRAW, lambda value: f"Withdrawn {value}",
        )

    def top_up(self, account: Account, amount: Any, pin: Any, phone: str) -> tuple:
        """Mobile top-up; the money leaves the ledger to `phone`."""
        return self._debit(
            account, amount, pin, self.policy.top_up, "Top-up",
            TransactionType.TOPUP, lambda value: f"Mobile top-up to {phone}",
        )

    def load_wallet(self, account: Account, amount: Any, pin: Any, wallet_id: str) -> tuple:
        """eSewa wallet load; the money leaves the ledger to `wallet_id`."""
        return self._debit(
            account, amount, pin, self.policy.wallet_load, "Wallet load",
            TransactionType.ESEWA, lambda value: f"Loaded to eSewa ID {wallet_id}",
        )

    def transfer(
        self,
        sender: Account,
        receiver: Account,
        amount: Any,
        pin: Any,
        cross_institution: bool = False,
    ) -> TransferResult:
        """
        Move `amount` from sender to receiver.

        The sender pays `amount` plus the cross-institution fee; the receiver
        is credited `amount` only and its record never mentions the fee.
        """
        if sender.id == receiver.id:
            raise SameAccountTransfer("Cannot transfer to the same account")

        value = self._checked_amount(amount, self.policy.transfer, "Transfer")
        self._verify_pin(sender, pin)
        fee = self.policy.cross_institution_fee if cross_institution else 0
        self._ensure_funds(sender, value + fee)

        when = self._timestamp(sender, receiver)
        details = f"To {receiver.phone}"
        if fee:
            details += f" (fee {fee})"
        outgoing = Transaction(
            type=TransactionType.TRANSFER_OUT,
            amount=value,
            timestamp=when,
            details=details,
            balance_after=sender.balance - value - fee,
            fee=fee,
        )
        incoming = Transaction(
            type=TransactionType.TRANSFER_IN,
            amount=value,
            timestamp=when,
            details=f"From {sender.phone}",
            balance_after=receiver.balance + value,
        )
        return TransferResult(
            sender=sender.append(outgoing),
            receiver=receiver.append(incoming),
            outgoing=outgoing,
            incoming=incoming,
        )

    def change_password(self, account: Account, old_password: Any, new_password: Any) -> Account:
        if not isinstance(old_password, str) or not self.verifier.verify(
            old_password, account.password_hash
        ):
            raise AuthenticationFailed("Incorrect current password")
        if not is_strong_password(new_password):
            raise WeakSecret(
                "Password must be 8-72 characters, include uppercase, number, and symbol"
            )
        return replace(account, password_hash=self.verifier.hash(new_password))

    # ---- read-only ----

    @staticmethod
    def balance(account: Account) -> int:
        return account.balance

    @staticmethod
    def history(account: Account) -> List[Transaction]:
        """Ledger entries, newest first."""
        return list(reversed(account.transactions))
