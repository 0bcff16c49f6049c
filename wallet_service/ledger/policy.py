"""
Ledger limits and fees.
The bounds table lives here as data so it can be varied without touching
the engine.
"""

import re
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class OperationLimits:
    min_amount: int
    max_amount: Optional[int] = None
    requires_pin: bool = True

    def contains(self, amount: int) -> bool:
        if amount < self.min_amount:
            return False
        return self.max_amount is None or amount <= self.max_amount

    def describe(self) -> str:
        if self.max_amount is None:
            return f"at least {self.min_amount}"
        return f"between {self.min_amount} and {self.max_amount}"


@dataclass(frozen=True)
class LedgerPolicy:
    """Process-wide bounds, fees and the registration grant."""
    deposit: OperationLimits = field(
        default_factory=lambda: OperationLimits(10, 50_000, requires_pin=False)
    )
    withdraw: OperationLimits = field(default_factory=lambda: OperationLimits(10, 25_000))
    transfer: OperationLimits = field(default_factory=lambda: OperationLimits(10, 25_000))
    top_up: OperationLimits = field(default_factory=lambda: OperationLimits(10))
    wallet_load: OperationLimits = field(default_factory=lambda: OperationLimits(10))
    cross_institution_fee: int = 11
    starting_balance: int = 100

    @classmethod
    def from_settings(cls, settings) -> "LedgerPolicy":
        return cls(
            deposit=OperationLimits(
                settings.DEPOSIT_MIN_AMOUNT, settings.DEPOSIT_MAX_AMOUNT, requires_pin=False
            ),
            withdraw=OperationLimits(settings.WITHDRAW_MIN_AMOUNT, settings.WITHDRAW_MAX_AMOUNT),
            transfer=OperationLimits(settings.TRANSFER_MIN_AMOUNT, settings.TRANSFER_MAX_AMOUNT),
            top_up=OperationLimits(settings.TOPUP_MIN_AMOUNT),
            wallet_load=OperationLimits(settings.WALLET_LOAD_MIN_AMOUNT),
            cross_institution_fee=settings.CROSS_INSTITUTION_FEE,
            starting_balance=settings.STARTING_BALANCE,
        )


PASSWORD_SYMBOLS = "!@#$%^&*"
# bcrypt only reads the first 72 bytes of a secret
PASSWORD_MAX_BYTES = 72
_PASSWORD_PATTERN = re.compile(
    r"^(?=.*[A-Z])(?=.*\d)(?=.*[!@#$%^&*])[A-Za-z\d!@#$%^&*]{8,}$"
)


def is_strong_password(password) -> bool:
    """
    8+ chars of letters, digits and PASSWORD_SYMBOLS; one upper, one digit,
    one symbol, and no more than PASSWORD_MAX_BYTES once UTF-8 encoded.
    """
    if not isinstance(password, str):
        return False
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        return False
    return _PASSWORD_PATTERN.match(password) is not None
