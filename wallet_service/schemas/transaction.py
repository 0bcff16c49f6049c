"""
Pydantic schemas for ledger operation requests and responses.

Amounts are accepted as raw JSON values; the ledger engine normalizes them.
"""

from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Any, Literal, Optional
from wallet_service.ledger.domain import TransactionType


class DepositRequest(BaseModel):
    amount: Any = Field(None, description="Whole amount in minor units")


class WithdrawRequest(BaseModel):
    amount: Any = Field(None, description="Whole amount in minor units")
    pin: Optional[str] = Field(None, max_length=64)


class TransferRequest(BaseModel):
    """Schema for a peer transfer."""
    phone: str = Field(..., min_length=1, max_length=20, description="Recipient phone")
    amount: Any = Field(None, description="Whole amount in minor units")
    pin: Optional[str] = Field(None, max_length=64)
    bank_type: Literal["same", "different"] = Field("same", description="'different' adds the cross-institution fee")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "phone": "9800000001",
                "amount": 500,
                "pin": "1234",
                "bank_type": "different"
            }
        }
    )


class TopUpRequest(BaseModel):
    phone: str = Field(..., min_length=1, max_length=20, description="Phone to top up")
    amount: Any = Field(None, description="Whole amount in minor units")
    pin: Optional[str] = Field(None, max_length=64)


class WalletLoadRequest(BaseModel):
    id: str = Field(..., min_length=1, max_length=50, description="eSewa wallet id")
    amount: Any = Field(None, description="Whole amount in minor units")
    pin: Optional[str] = Field(None, max_length=64)


class TransactionResponse(BaseModel):
    """Schema for a ledger entry."""
    type: TransactionType
    amount: int
    fee: int
    timestamp: datetime
    details: str
    balance_after: int
    
    model_config = ConfigDict(from_attributes=True)


class OperationResponse(BaseModel):
    msg: str
    balance: int
    transaction: TransactionResponse


class TransferResponse(OperationResponse):
    fee: int
