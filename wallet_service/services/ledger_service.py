"""
Ledger service.

Runs each engine operation as a read-validate-mutate-append-save unit of work
under the account lock, retrying from a fresh read when the repository
reports a concurrent write.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable, List, Optional

from wallet_service.ledger.domain import Account, Transaction, TransferResult
from wallet_service.ledger.engine import LedgerEngine
from wallet_service.ledger.errors import (
    AccountNotFound,
    AuthenticationFailed,
    ConflictError,
    LedgerError,
    PartialTransferFailure,
    RecipientNotFound,
    RegistrationError,
    WeakSecret,
)
from wallet_service.ledger.policy import is_strong_password
from wallet_service.repositories.account_repository import AccountRepository
from wallet_service.services.locks import AccountLockManager, account_locks

logger = logging.getLogger(__name__)


def calculate_age(dob: date, today: Optional[date] = None) -> int:
    today = today or date.today()
    before_birthday = (today.month, today.day) < (dob.month, dob.day)
    return today.year - dob.year - int(before_birthday)


class LedgerService:
    """Coordinates the repository, the engine and the per-account locks."""

    def __init__(
        self,
        repository: AccountRepository,
        engine: LedgerEngine,
        locks: Optional[AccountLockManager] = None,
        max_retries: int = 3,
    ):
        self.repository = repository
        self.engine = engine
        self.locks = locks or account_locks
        self.max_retries = max_retries

    def _run(self, operation: str, keys: tuple, attempt: Callable[[], Any], **context):
        """Run `attempt` under the locks for `keys`, retrying on conflicts."""
        extra = {"operation": operation, **context}
        for tries in range(1, self.max_retries + 2):
            try:
                with self.locks.hold(*keys):
                    result = attempt()
            except ConflictError:
                if tries > self.max_retries:
                    logger.warning("%s gave up after %d conflicts", operation, tries, extra=extra)
                    raise
                logger.warning("%s conflicted, retrying (%d)", operation, tries, extra=extra)
                continue
            except PartialTransferFailure:
                logger.error("%s left accounts inconsistent", operation, extra=extra)
                raise
            except LedgerError as exc:
                logger.info("%s rejected: %s", operation, exc.code, extra=extra)
                raise
            logger.info("%s committed", operation, extra=extra)
            return result

    # ---- single-account debits and credits ----

    def deposit(self, account_id: int, amount: Any) -> tuple:
        def attempt():
            account, entry = self.engine.deposit(self.repository.get_by_id(account_id), amount)
            return self.repository.save(account), entry

        return self._run("deposit", (account_id,), attempt, account_id=account_id)

    def withdraw(self, account_id: int, amount: Any, pin: Any) -> tuple:
        def attempt():
            account, entry = self.engine.withdraw(
                self.repository.get_by_id(account_id), amount, pin
            )
            return self.repository.save(account), entry

        return self._run("withdraw", (account_id,), attempt, account_id=account_id)

    def top_up(self, account_id: int, amount: Any, pin: Any, phone: str) -> tuple:
        def attempt():
            account, entry = self.engine.top_up(
                self.repository.get_by_id(account_id), amount, pin, phone
            )
            return self.repository.save(account), entry

        return self._run("topup", (account_id,), attempt, account_id=account_id)

    def load_wallet(self, account_id: int, amount: Any, pin: Any, wallet_id: str) -> tuple:
        def attempt():
            account, entry = self.engine.load_wallet(
                self.repository.get_by_id(account_id), amount, pin, wallet_id
            )
            return self.repository.save(account), entry

        return self._run("esewa", (account_id,), attempt, account_id=account_id)

    # ---- transfer ----

    def transfer(
        self,
        sender_id: int,
        recipient_phone: str,
        amount: Any,
        pin: Any,
        cross_institution: bool = False,
    ) -> TransferResult:
        try:
            receiver_id = self.repository.get_by_public_identity(recipient_phone).id
        except AccountNotFound:
            logger.info(
                "transfer rejected: recipient_not_found",
                extra={"operation": "transfer", "account_id": sender_id},
            )
            raise RecipientNotFound("Recipient not found") from None

        def attempt():
            sender = self.repository.get_by_id(sender_id)
            receiver = self.repository.get_by_id(receiver_id)
            result = self.engine.transfer(sender, receiver, amount, pin, cross_institution)
            saved_sender, saved_receiver = self.repository.save_transfer(
                result.sender, result.receiver
            )
            return TransferResult(
                sender=saved_sender,
                receiver=saved_receiver,
                outgoing=result.outgoing,
                incoming=result.incoming,
            )

        return self._run(
            "transfer", (sender_id, receiver_id), attempt,
            account_id=sender_id, counterparty_id=receiver_id,
        )

    # ---- secrets ----

    def change_password(self, account_id: int, old_password: Any, new_password: Any) -> Account:
        def attempt():
            account = self.engine.change_password(
                self.repository.get_by_id(account_id), old_password, new_password
            )
            return self.repository.save(account)

        return self._run("change_password", (account_id,), attempt, account_id=account_id)

    def authenticate(self, phone: str, password: Any) -> Account:
        """Same failure for unknown phone and wrong password."""
        try:
            account = self.repository.get_by_public_identity(phone)
        except AccountNotFound:
            raise AuthenticationFailed("Invalid credentials") from None
        if not isinstance(password, str) or not self.engine.verifier.verify(
            password, account.password_hash
        ):
            raise AuthenticationFailed("Invalid credentials")
        return account

    def register(
        self,
        *,
        name: str,
        phone: str,
        password: str,
        pin: str,
        dob: date,
        minimum_age: int = 18,
    ) -> Account:
        age = calculate_age(dob)
        if age < minimum_age:
            raise RegistrationError(f"Must be {minimum_age} years or older")
        if not is_strong_password(password):
            raise WeakSecret("Password must be 8-72 characters, include uppercase, number, and symbol")

        verifier = self.engine.verifier
        account = self.repository.create(
            name=name,
            phone=phone,
            dob=dob,
            age=age,
            password_hash=verifier.hash(password),
            pin_hash=verifier.hash(pin),
            opening_balance=self.engine.policy.starting_balance,
        )
        logger.info("account registered", extra={"operation": "register", "account_id": account.id})
        return account

    # ---- reads ----

    def get_account(self, account_id: int) -> Account:
        return self.repository.get_by_id(account_id)

    def get_balance(self, account_id: int) -> int:
        return self.engine.balance(self.repository.get_by_id(account_id))

    def get_history(self, account_id: int) -> List[Transaction]:
        return self.engine.history(self.repository.get_by_id(account_id))
