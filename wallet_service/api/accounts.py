"""
Account API endpoints.
Handles registration, login, profile, balance and history queries.
"""

from fastapi import APIRouter, Depends, status
from typing import List

from wallet_service.api.deps import get_ledger_service
from wallet_service.core.config import settings
from wallet_service.core.security import create_access_token, get_current_account_id
from wallet_service.schemas.account import (
    BalanceResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    RegisterRequest,
    TokenResponse,
)
from wallet_service.schemas.transaction import TransactionResponse
from wallet_service.services.ledger_service import LedgerService

router = APIRouter(prefix="/user", tags=["Accounts"])


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Register a new wallet account.
    
    - **name**, **phone**, **password**, **dob**, **pin** are all required
    - holders must be at least 18 years old
    - the account starts with the configured starting balance
    """
    service.register(
        name=payload.name,
        phone=payload.phone,
        password=payload.password,
        pin=payload.pin,
        dob=payload.dob,
        minimum_age=settings.MINIMUM_AGE,
    )
    return MessageResponse(msg="Registration successful")


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Exchange phone and password for a bearer token.
    """
    account = service.authenticate(payload.phone, payload.password)
    return TokenResponse(
        token=create_access_token(account.id),
        name=account.name,
        phone=account.phone
    )


@router.get("/profile", response_model=ProfileResponse)
def get_profile(
    account_id: int = Depends(get_current_account_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Get the caller's public profile.
    """
    return service.get_account(account_id)


@router.get("/balance", response_model=BalanceResponse)
def get_balance(
    account_id: int = Depends(get_current_account_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Get account balance.
    """
    return BalanceResponse(balance=service.get_balance(account_id))


@router.get("/transactions", response_model=List[TransactionResponse])
def get_transactions(
    skip: int = 0,
    limit: int = 100,
    account_id: int = Depends(get_current_account_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Get the caller's ledger entries, newest first.
    
    - **skip**: Number of records to skip (default: 0)
    - **limit**: Maximum number of records to return (default: 100)
    """
    history = service.get_history(account_id)
    return history[max(skip, 0):max(skip, 0) + max(limit, 0)]


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    account_id: int = Depends(get_current_account_id),
    service: LedgerService = Depends(get_ledger_service)
):
    """
    Replace the login password after checking the current one.
    """
    service.change_password(account_id, payload.old_password, payload.new_password)
    return MessageResponse(msg="Password changed successfully")
