"""
Ledger system wiring and request dependencies
"""

from typing import Optional

from fastapi import Request

from ..storage import LedgerStore, create_store
from ..accounts import AccountManager
from ..transactions import TransferEngine
from ..config import LedgerConfig, get_config


class LedgerSystem:
    """Ledger components sharing one store"""

    def __init__(self, store: LedgerStore):
        self.store = store
        self.account_manager = AccountManager(store)
        self.transfer_engine = TransferEngine(store)

    @classmethod
    def from_config(cls, config: Optional[LedgerConfig] = None) -> 'LedgerSystem':
        return cls(create_store(config or get_config()))

    def close(self) -> None:
        self.store.close()


def get_ledger_system(request: Request) -> LedgerSystem:
    """Dependency returning the system attached to the running app"""
    return request.app.state.ledger
