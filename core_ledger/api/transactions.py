"""
Transaction endpoints
"""

from fastapi import APIRouter, Depends, status

from .system import LedgerSystem, get_ledger_system
from .schemas import CreateTransactionRequest, TransactionResponse, ERROR_RESPONSES


router = APIRouter(responses=ERROR_RESPONSES)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=TransactionResponse)
def create_transaction(
    request: CreateTransactionRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Transfer funds between two accounts"""
    transaction = system.transfer_engine.execute(
        source_account_id=request.source_account_id,
        destination_account_id=request.destination_account_id,
        amount=request.amount
    )
    return TransactionResponse.from_transaction(transaction)


@router.get("/{transaction_id}", response_model=TransactionResponse)
def get_transaction(
    transaction_id: int,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Get transaction details"""
    transaction = system.transfer_engine.get_transaction(transaction_id)
    return TransactionResponse.from_transaction(transaction)
