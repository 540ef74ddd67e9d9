"""
Account management endpoints
"""

from fastapi import APIRouter, Depends, status

from .system import LedgerSystem, get_ledger_system
from .schemas import (
    CreateAccountRequest, AccountResponse, TransactionListResponse, TransactionResponse,
    ERROR_RESPONSES
)


router = APIRouter(responses=ERROR_RESPONSES)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AccountResponse)
def create_account(
    request: CreateAccountRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Create a new account with an initial balance"""
    account = system.account_manager.create_account(
        account_id=request.account_id,
        initial_balance=request.initial_balance
    )
    return AccountResponse.from_account(account)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Get account balance"""
    account = system.account_manager.get_account(account_id)
    return AccountResponse.from_account(account)


@router.get("/{account_id}/transactions", response_model=TransactionListResponse)
def get_account_transactions(
    account_id: int,
    limit: int = 50,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Get transaction history for account"""
    # 404 for an unknown account rather than an empty list
    system.account_manager.get_account(account_id)
    transactions = system.transfer_engine.get_account_transactions(account_id, limit=limit)
    return TransactionListResponse(
        transactions=[TransactionResponse.from_transaction(t) for t in transactions]
    )
