"""
SQLAlchemy-backed account repository.
Balance, version and appended ledger rows are written in one DB transaction.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from wallet_service.ledger.domain import Account, Transaction
from wallet_service.ledger.errors import (
    AccountNotFound,
    ConflictError,
    PartialTransferFailure,
    RegistrationError,
)
from wallet_service.models.account import Account as AccountRow
from wallet_service.models.transaction import Transaction as TransactionRow

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlAccountRepository:
    def __init__(self, db: Session):
        self.db = db

    # ---- reads ----

    def get_by_id(self, account_id: int) -> Account:
        stmt = select(AccountRow).where(AccountRow.id == account_id)
        return self._load(stmt, f"Account {account_id} not found")

    def get_by_public_identity(self, phone: str) -> Account:
        stmt = select(AccountRow).where(AccountRow.phone == phone)
        return self._load(stmt, f"Account {phone} not found")

    def _load(self, stmt, missing: str) -> Account:
        row = self.db.execute(
            stmt.execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if row is None:
            raise AccountNotFound(missing)
        return self._to_domain(row)

    def _to_domain(self, row: AccountRow) -> Account:
        entries = self.db.execute(
            select(TransactionRow)
            .where(TransactionRow.account_id == row.id)
            .order_by(TransactionRow.sequence)
        ).scalars().all()
        return Account(
            id=row.id,
            phone=row.phone,
            name=row.name,
            balance=row.balance,
            opening_balance=row.opening_balance,
            password_hash=row.password_hash,
            pin_hash=row.pin_hash,
            dob=row.dob,
            age=row.age,
            created_at=_aware(row.created_at),
            version=row.version,
            transactions=tuple(
                Transaction(
                    type=entry.type,
                    amount=entry.amount,
                    timestamp=_aware(entry.created_at),
                    details=entry.details,
                    balance_after=entry.balance_after,
                    fee=entry.fee,
                )
                for entry in entries
            ),
        )

    # ---- writes ----

    def _stage(self, account: Account) -> AccountRow:
        """Apply `account` to its row and flush, checking the version."""
        row = self.db.get(AccountRow, account.id)
        if row is None:
            raise AccountNotFound(f"Account {account.id} not found")
        if row.version != account.version:
            raise ConflictError(f"Account {account.id} was modified concurrently")

        row.balance = account.balance
        row.password_hash = account.password_hash
        row.pin_hash = account.pin_hash
        self.db.flush()

        stored = self.db.scalar(
            select(func.count())
            .select_from(TransactionRow)
            .where(TransactionRow.account_id == account.id)
        )
        if stored > len(account.transactions):
            raise ConflictError(f"Account {account.id} history is ahead of the snapshot")

        new_rows: List[TransactionRow] = [
            TransactionRow(
                account_id=account.id,
                sequence=stored + offset,
                type=entry.type,
                amount=entry.amount,
                fee=entry.fee,
                details=entry.details,
                balance_after=entry.balance_after,
                created_at=entry.timestamp,
            )
            for offset, entry in enumerate(account.transactions[stored:])
        ]
        self.db.add_all(new_rows)
        self.db.flush()
        return row

    def _stage_all(self, *accounts: Account) -> List[AccountRow]:
        try:
            return [self._stage(account) for account in accounts]
        except (StaleDataError, IntegrityError) as exc:
            self.db.rollback()
            raise ConflictError("Account was modified concurrently") from exc
        except ConflictError:
            self.db.rollback()
            raise

    def save(self, account: Account) -> Account:
        (row,) = self._stage_all(account)
        self.db.commit()
        return self._to_domain(row)

    def save_transfer(self, sender: Account, receiver: Account) -> tuple:
        """Persist both sides of a transfer as one database transaction."""
        sender_row, receiver_row = self._stage_all(sender, receiver)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            logger.error(
                "transfer commit failed between accounts %s and %s",
                sender.id, receiver.id, exc_info=True,
            )
            self.db.rollback()
            raise PartialTransferFailure(
                "Transfer commit did not complete; accounts need reconciliation",
                sender_id=sender.id,
                receiver_id=receiver.id,
            ) from exc
        return self._to_domain(sender_row), self._to_domain(receiver_row)

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
        existing = self.db.execute(
            select(AccountRow.id).where(AccountRow.phone == phone)
        ).first()
        if existing:
            raise RegistrationError("Phone already registered")

        row = AccountRow(
            name=name,
            phone=phone,
            dob=dob,
            age=age,
            password_hash=password_hash,
            pin_hash=pin_hash,
            balance=opening_balance,
            opening_balance=opening_balance,
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise RegistrationError("Phone already registered") from exc
        self.db.refresh(row)
        return self._to_domain(row)
