"""
Money movement API endpoints.
Handles deposits, withdrawals, peer transfers, mobile top-ups and eSewa loads.
"""

from fastapi import APIRouter, Depends

from wallet_service.api.deps import get_ledger_service
from wallet_service.core.security import get_current_account_id
from wallet_service.schemas.transaction import (
    DepositRequest,
    OperationResponse,
    TopUpRequest,
    TransferRequest,
    TransactionResponse,
    TransferResponse,
    WalletLoadRequest,
    WithdrawRequest,
)
from wallet_service.services.ledger_service import LedgerService

router = APIRouter(prefix="/user", tags=["Transactions"])


@router.post("/deposit", response_model=OperationResponse)
def deposit(
    payload: DepositRequest,
    account_id: int = Depends(get_current_account_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Deposit into the caller's wallet. No PIN needed.
    """
    account, entry = service.deposit(account_id, payload.amount)
    return OperationResponse(
        msg=f"Deposited {entry.amount}",
        balance=account.balance,
        transaction=TransactionResponse.model_validate(entry)
    )


@router.post("/withdraw", response_model=OperationResponse)
def withdraw(
    payload: WithdrawRequest,
    account_id: int = Depends(get_current_account_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Withdraw from the caller's wallet. Requires PIN.
    """
    account, entry = service.withdraw(account_id, payload.amount, payload.pin)
    return OperationResponse(
        msg=f"Withdrawn {entry.amount}",
        balance=account.balance,
        transaction=TransactionResponse.model_validate(entry)
    )


@router.post("/transfer", response_model=TransferResponse)
def transfer(
    payload: TransferRequest,
    account_id: int = Depends(get_current_account_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Transfer to another wallet identified by phone.
    
    Implements:
    - Atomicity: both balances and both ledger entries commit together
    - Concurrency: account locks taken in identity order to prevent deadlocks
    - Fee: **bank_type** "different" charges the sender the cross-institution fee
    """
    result = service.transfer(
        account_id,
        payload.phone,
        payload.amount,
        payload.pin,
        cross_institution=payload.bank_type == "different"
    )
    msg = f"Transferred {result.outgoing.amount} to {payload.phone}"
    if result.fee:
        msg += f" ({result.fee} charge)"
    return TransferResponse(
        msg=msg,
        balance=result.sender.balance,
        fee=result.fee,
        transaction=TransactionResponse.model_validate(result.outgoing)
    )


@router.post("/topup", response_model=OperationResponse)
def top_up(
    payload: TopUpRequest,
    account_id: int = Depends(get_current_account_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Mobile top-up paid from the caller's wallet. Requires PIN.
    """
    account, entry = service.top_up(account_id, payload.amount, payload.pin, payload.phone)
    return OperationResponse(
        msg=f"Topped up {entry.amount} to {payload.phone}",
        balance=account.balance,
        transaction=TransactionResponse.model_validate(entry)
    )


@router.post("/esewa", response_model=OperationResponse)
def load_esewa(
    payload: WalletLoadRequest,
    account_id: int = Depends(get_current_account_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Load an eSewa wallet from the caller's wallet. Requires PIN.
    """
    account, entry = service.load_wallet(account_id, payload.amount, payload.pin, payload.id)
    return OperationResponse(
        msg=f"Loaded {entry.amount} to eSewa ID {payload.id}",
        balance=account.balance,
        transaction=TransactionResponse.model_validate(entry)
    )
