"""
Transaction database model.
Append-only ledger entries, one row per balance change.
"""

from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship
from wallet_service.database import Base
from wallet_service.ledger.domain import TransactionType


class Transaction(Base):
    """
    Transaction table - stores ledger entries per account.
    `sequence` is the 0-based position in the account's history.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        UniqueConstraint("account_id", "sequence", name="uq_transactions_account_sequence"),
    )
    
    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    type = Column(SQLEnum(TransactionType), nullable=False)
    amount = Column(Integer, nullable=False)
    fee = Column(Integer, nullable=False, default=0)
    details = Column(String(255), nullable=False, default="")
    balance_after = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    
    account = relationship("Account", back_populates="transactions")
    
    def __repr__(self):
        return f"<Transaction(account={self.account_id}, seq={self.sequence}, type={self.type.value}, amount={self.amount})>"
