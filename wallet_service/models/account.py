"""
Account database model.
Represents wallet accounts in the system.
"""

from sqlalchemy import Column, String, DateTime, Date, Integer, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from wallet_service.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Account(Base):
    """
    Account table - stores wallet owners, their secrets and cached balance.

    `version` is bumped on every update; a stale writer gets StaleDataError.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_non_negative_balance"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    phone = Column(String(20), unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    dob = Column(Date, nullable=False)
    age = Column(Integer, nullable=False)
    password_hash = Column(String(128), nullable=False)
    pin_hash = Column(String(128), nullable=False)
    balance = Column(Integer, nullable=False, default=0)
    opening_balance = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    
    transactions = relationship(
        "Transaction",
        back_populates="account",
        order_by="Transaction.sequence",
        cascade="all, delete-orphan",
    )
    
    __mapper_args__ = {"version_id_col": version}
    
    def __repr__(self):
        return f"<Account(id={self.id}, phone={self.phone}, balance={self.balance})>"
