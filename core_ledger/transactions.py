"""
Transfer Processing Module

Moves funds between two accounts as a single all-or-nothing unit of work.
Both account rows are locked in ascending id order before any balance is
read, so concurrent transfers never deadlock and every transfer sharing an
account is serialized. All arithmetic is exact Decimal.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from enum import Enum

from .amount import Amount, AmountInput
from .storage import LedgerStore, StorageRecord
from .accounts import require_account_id
from .errors import (
    AccountNotFound, ConflictError, InsufficientFunds, InvalidArgument,
    LedgerError, TransactionNotFound
)
from .logging_config import get_logger, log_action


class TransactionStatus(Enum):
    """States of a transaction"""
    PENDING = "pending"      # Inserted, funds not yet moved
    COMPLETED = "completed"  # Funds moved and committed
    FAILED = "failed"        # Reserved; an aborted transfer leaves no row at all


@dataclass
class Transaction(StorageRecord):
    """Record of one fund transfer; immutable except status and updated_at"""
    source_account_id: int
    destination_account_id: int
    amount: Amount
    status: TransactionStatus

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Transaction':
        return cls(
            id=int(data["id"]),
            source_account_id=int(data["source_account_id"]),
            destination_account_id=int(data["destination_account_id"]),
            amount=Amount.parse(data["amount"]),
            status=TransactionStatus(data["status"]),
            created_at=cls.parse_timestamp(data["created_at"]),
            updated_at=cls.parse_timestamp(data["updated_at"]),
        )

    @property
    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED


@dataclass(frozen=True)
class TransferResult:
    """Caller-facing outcome of a successful transfer"""
    transaction_id: int
    status: TransactionStatus

    def to_dict(self) -> Dict[str, Any]:
        return {"transaction_id": self.transaction_id, "status": self.status.value}


class TransferEngine:
    """
    Executes fund transfers against a ledger store.

    The engine performs no retries. A ConflictError means the unit of work
    was rolled back and the caller may run the whole transfer again.
    """

    def __init__(self, store: LedgerStore):
        self.store = store
        self.logger = get_logger("core_ledger.transfers")

    def transfer(self, source_account_id: int, destination_account_id: int,
                 amount: AmountInput) -> TransferResult:
        """Move funds and report the new transaction's id and status"""
        transaction = self.execute(source_account_id, destination_account_id, amount)
        return TransferResult(transaction_id=transaction.id, status=transaction.status)

    def execute(self, source_account_id: int, destination_account_id: int,
                amount: AmountInput) -> Transaction:
        """
        Execute one transfer as a single unit of work

        Args:
            source_account_id: Account to debit
            destination_account_id: Account to credit
            amount: Positive decimal string

        Returns:
            The completed Transaction

        Raises:
            InvalidArgument: Bad ids or amount; raised before any store access
            AccountNotFound: Either account is absent
            InsufficientFunds: Source balance is below the amount
            ConflictError: Store-level failure; nothing was persisted
        """
        amount = self._validate_request(source_account_id, destination_account_id, amount)
        resource = f"transfer:{source_account_id}->{destination_account_id}"

        try:
            with self.store.atomic() as uow:
                balances = self._lock_accounts(uow, source_account_id, destination_account_id)
                source_balance = balances[source_account_id]
                destination_balance = balances[destination_account_id]

                if source_balance < amount:
                    raise InsufficientFunds(
                        source_account_id, source_balance.to_string(), amount.to_string()
                    )

                record = uow.insert_transaction(
                    source_account_id, destination_account_id,
                    amount.to_string(), TransactionStatus.PENDING.value
                )

                new_source_balance = source_balance - amount
                new_destination_balance = destination_balance + amount
                if not new_destination_balance.fits_ledger():
                    raise InvalidArgument(
                        f"balance of account {destination_account_id} would exceed the ledger maximum",
                        field="amount"
                    )

                # Locks from _lock_accounts are still held: no re-read, no lost update
                if not uow.set_account_balance(source_account_id, new_source_balance.to_string()):
                    raise AccountNotFound(source_account_id)
                if not uow.set_account_balance(destination_account_id, new_destination_balance.to_string()):
                    raise AccountNotFound(destination_account_id)

                record = uow.update_transaction_status(record["id"], TransactionStatus.COMPLETED.value)
                if record is None:
                    raise ConflictError("pending transaction row vanished before completion")

        except ConflictError as e:
            log_action(
                self.logger, "error", f"Transfer aborted: {e.message}",
                action="transfer", resource=resource,
                extra={"amount": amount.to_string(), "kind": e.kind.value, "retryable": True}
            )
            raise
        except LedgerError as e:
            log_action(
                self.logger, "warning", f"Transfer rejected: {e.message}",
                action="transfer", resource=resource,
                extra={"amount": amount.to_string(), "kind": e.kind.value}
            )
            raise

        transaction = Transaction.from_dict(record)
        log_action(
            self.logger, "info", "Transfer completed",
            action="transfer", resource=f"transaction:{transaction.id}",
            extra={
                "transaction_id": transaction.id,
                "source_account_id": source_account_id,
                "destination_account_id": destination_account_id,
                "amount": amount.to_string(),
                "source_balance": new_source_balance.to_string(),
                "destination_balance": new_destination_balance.to_string(),
            }
        )
        return transaction

    def get_transaction(self, transaction_id: int) -> Transaction:
        """Get transaction by ID; raises TransactionNotFound if absent"""
        require_account_id(transaction_id, "transaction_id")
        row = self.store.get_transaction(transaction_id)
        if row is None:
            raise TransactionNotFound(transaction_id)
        return Transaction.from_dict(row)

    def get_account_transactions(self, account_id: int,
                                 limit: Optional[int] = 50) -> List[Transaction]:
        """Committed transactions touching an account, newest first"""
        require_account_id(account_id)
        if limit is not None and limit <= 0:
            raise InvalidArgument("limit must be a positive integer", field="limit")
        rows = self.store.list_transactions(account_id=account_id, limit=limit)
        return [Transaction.from_dict(row) for row in rows]

    def _validate_request(self, source_account_id: Any, destination_account_id: Any,
                          amount: AmountInput) -> Amount:
        require_account_id(source_account_id, "source_account_id")
        require_account_id(destination_account_id, "destination_account_id")
        if source_account_id == destination_account_id:
            raise InvalidArgument(
                "source_account_id and destination_account_id cannot be the same",
                field="destination_account_id"
            )
        parsed = Amount.parse(amount, "amount")
        if not parsed.is_positive():
            raise InvalidArgument("amount must be greater than zero", field="amount")
        return parsed

    def _lock_accounts(self, uow, source_account_id: int,
                       destination_account_id: int) -> Dict[int, Amount]:
        """Lock both rows in ascending id order and return their balances"""
        balances: Dict[int, Amount] = {}
        for account_id in sorted((source_account_id, destination_account_id)):
            row = uow.lock_and_get_account(account_id)
            if row is None:
                raise AccountNotFound(account_id)
            balances[account_id] = Amount.parse(row["balance"], "balance")
        return balances
