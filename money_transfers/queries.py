"""
Read-only lookups of accounts and transfers
"""

from typing import List, Optional

from .accounts import Account
from .transfers import Transfer
from .storage import StorageGateway


class QueryService:
    """Pass-through reads over the storage gateway"""

    def __init__(self, storage: StorageGateway):
        self.storage = storage

    def list_accounts(self) -> List[Account]:
        return [Account.from_row(row) for row in self.storage.load_accounts()]

    def get_account(self, account_id: int) -> Optional[Account]:
        row = self.storage.load_account(account_id)
        return Account.from_row(row) if row else None

    def list_transfers_for_account(self, account_id: int) -> List[Transfer]:
        """Transfers where the account is the source or the destination"""
        return [Transfer.from_row(row) for row in self.storage.load_account_transfers(account_id)]

    def get_transfer(self, transfer_id: int, account_id: int) -> Optional[Transfer]:
        """A transfer, visible only through an account that participated in it"""
        row = self.storage.load_account_transfer(account_id, transfer_id)
        return Transfer.from_row(row) if row else None
