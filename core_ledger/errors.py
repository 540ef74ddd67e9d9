"""
Ledger Error Taxonomy

Every failure the ledger reports carries an explicit ErrorKind. Callers
classify errors by kind (and by the retryable flag), never by message text.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Kinds of ledger errors"""
    INVALID_ARGUMENT = "invalid_argument"      # Rejected before touching the store
    ACCOUNT_NOT_FOUND = "account_not_found"    # Account row absent
    INSUFFICIENT_FUNDS = "insufficient_funds"  # Source balance below amount
    ALREADY_EXISTS = "already_exists"          # Account id already taken
    NOT_FOUND = "not_found"                    # Transaction row absent
    CONFLICT = "conflict"                      # Store-level failure, safe to retry


class LedgerError(Exception):
    """Base class for all ledger errors"""

    kind: ErrorKind = ErrorKind.CONFLICT
    retryable: bool = False

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "error": self.kind.value,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            result["details"] = self.details
        return result


class InvalidArgument(LedgerError, ValueError):
    """Malformed or out-of-range input"""
    kind = ErrorKind.INVALID_ARGUMENT


class AccountNotFound(LedgerError):
    kind = ErrorKind.ACCOUNT_NOT_FOUND

    def __init__(self, account_id: int, message: Optional[str] = None):
        super().__init__(message or f"account {account_id} not found", account_id=account_id)
        self.account_id = account_id


class AccountAlreadyExists(LedgerError):
    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, account_id: int):
        super().__init__(f"account with id {account_id} already exists", account_id=account_id)
        self.account_id = account_id


class InsufficientFunds(LedgerError):
    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, account_id: int, balance: str, requested: str):
        super().__init__(
            f"insufficient balance in source account {account_id}",
            account_id=account_id, balance=balance, requested=requested
        )
        self.account_id = account_id


class TransactionNotFound(LedgerError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, transaction_id: int):
        super().__init__(f"transaction {transaction_id} not found", transaction_id=transaction_id)
        self.transaction_id = transaction_id


class ConflictError(LedgerError):
    """
    Store-level failure inside a unit of work: lock timeout, lost
    connection, serialization failure or commit failure. The unit of work
    has already been rolled back, so the whole operation may be retried.
    """
    kind = ErrorKind.CONFLICT
    retryable = True
