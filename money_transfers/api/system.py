"""
Service wiring and the FastAPI dependency that provides it
"""

from typing import Optional

from ..storage import StorageGateway, create_storage
from ..accounts import AccountManager
from ..transfers import TransferEngine
from ..queries import QueryService
from ..config import get_config


class TransferSystem:
    """Account, transfer and query services sharing one storage backend"""

    def __init__(self, storage: Optional[StorageGateway] = None):
        if storage is None:
            config = get_config()
            storage = create_storage(config.database_url, config.database_pool_size)

        self.storage = storage
        self.account_manager = AccountManager(self.storage)
        self.transfer_engine = TransferEngine(self.storage)
        self.query_service = QueryService(self.storage)

    def close(self) -> None:
        self.storage.close()


# Global transfer system instance, created on first use
transfer_system: Optional[TransferSystem] = None


# Dependency to get transfer system
def get_transfer_system() -> TransferSystem:
    global transfer_system
    if transfer_system is None:
        transfer_system = TransferSystem()
    return transfer_system
