"""
Pydantic schemas for API requests and responses

Decimal fields are strings on the wire. Their decimal validity is checked by
the ledger itself so that every entry point applies the same rules.
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from ..accounts import Account
from ..transactions import Transaction


# Account schemas
class CreateAccountRequest(BaseModel):
    account_id: int = Field(..., description="Positive integer account id")
    initial_balance: str = Field(..., description="Non-negative decimal amount as string")


class AccountResponse(BaseModel):
    account_id: int
    balance: str = Field(..., description="Decimal balance as string")

    @classmethod
    def from_account(cls, account: Account) -> 'AccountResponse':
        return cls(**account.to_public_dict())


# Transaction schemas
class CreateTransactionRequest(BaseModel):
    source_account_id: int
    destination_account_id: int
    amount: str = Field(..., description="Positive decimal amount as string")


class TransactionResponse(BaseModel):
    transaction_id: int
    source_account_id: int
    destination_account_id: int
    amount: str
    status: str
    created_at: str
    updated_at: str

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> 'TransactionResponse':
        data = transaction.to_dict()
        data["transaction_id"] = data.pop("id")
        return cls(**data)


class TransactionListResponse(BaseModel):
    transactions: List[TransactionResponse]


class ErrorResponse(BaseModel):
    error: str
    message: str
    retryable: bool = False
    details: Optional[dict] = None


# Error bodies documented on every ledger route
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid argument, duplicate account or insufficient funds"},
    404: {"model": ErrorResponse, "description": "Account or transaction not found"},
    409: {"model": ErrorResponse, "description": "Store conflict; safe to retry"},
}
