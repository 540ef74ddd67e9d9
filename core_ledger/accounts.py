"""
Account Management Module

Creates and reads ledger accounts. Balances are only ever changed by the
transfer engine; this module never writes a balance after creation.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .amount import Amount, AmountInput
from .storage import LedgerStore, StorageRecord
from .errors import AccountAlreadyExists, AccountNotFound, InvalidArgument
from .logging_config import get_logger, log_action


@dataclass
class Account(StorageRecord):
    """Ledger account: a positive integer id holding a non-negative balance"""
    balance: Amount

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Account':
        return cls(
            id=int(data["id"]),
            balance=Amount.parse(data["balance"], "balance"),
            created_at=cls.parse_timestamp(data["created_at"]),
            updated_at=cls.parse_timestamp(data["updated_at"]),
        )

    def to_public_dict(self) -> Dict[str, Any]:
        return {"account_id": self.id, "balance": self.balance.to_string()}


def require_account_id(value: Any, field: str = "account_id") -> int:
    """Validate a positive integer account id"""
    # bool is an int subclass; True is not an account id
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{field} must be a positive integer", field=field)
    if value <= 0:
        raise InvalidArgument(f"{field} must be a positive integer", field=field)
    return value


class AccountManager:
    """
    Account administration: create once, read any number of times.

    Neither operation composes multiple mutations, so neither needs a unit
    of work or row locks.
    """

    def __init__(self, store: LedgerStore):
        self.store = store
        self.logger = get_logger("core_ledger.accounts")

    def create_account(self, account_id: int, initial_balance: AmountInput) -> Account:
        """
        Create a new account

        Args:
            account_id: Caller-chosen positive integer id
            initial_balance: Non-negative decimal string

        Returns:
            Created Account

        Raises:
            InvalidArgument: Bad id or balance
            AccountAlreadyExists: The id is taken
        """
        require_account_id(account_id)
        balance = Amount.parse(initial_balance, "initial_balance")
        if balance.is_negative():
            raise InvalidArgument("initial_balance cannot be negative", field="initial_balance")

        # The insert itself is the existence check, so two racing creates cannot both win
        row = self.store.insert_account(account_id, balance.to_string())
        if row is None:
            log_action(
                self.logger, "warning", "Account creation rejected: id taken",
                action="create_account", resource=f"account:{account_id}"
            )
            raise AccountAlreadyExists(account_id)

        account = Account.from_dict(row)
        log_action(
            self.logger, "info", "Account created",
            action="create_account", resource=f"account:{account.id}",
            extra={"account_id": account.id, "initial_balance": account.balance.to_string()}
        )
        return account

    def get_account(self, account_id: int) -> Account:
        """Get account by ID; raises AccountNotFound if absent"""
        require_account_id(account_id)
        row = self.store.get_account(account_id)
        if row is None:
            raise AccountNotFound(account_id)
        return Account.from_dict(row)

    def get_balance(self, account_id: int) -> Amount:
        return self.get_account(account_id).balance
