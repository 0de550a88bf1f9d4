"""
Transfer Results and Error Types

Transfer outcomes are returned by value as one of a closed set of variants:
a TransferSuccess carrying the persisted transfer, or a TransferFailure
carrying a classifiable kind and a human-readable message. Storage backends
signal infrastructure problems with the StorageError hierarchy, which the
transfer engine folds into failure variants.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .transfers import Transfer


class TransferErrorKind(Enum):
    """Kinds of transfer failure"""
    # Validation errors, detected before any storage access
    INVALID_AMOUNT = "invalid_amount"
    SAME_ACCOUNT = "same_account"

    # Business-rule errors, reflecting account state at transaction time
    ACCOUNT_NOT_FOUND = "account_not_found"
    CURRENCY_MISMATCH = "currency_mismatch"
    INSUFFICIENT_FUNDS = "insufficient_funds"

    # Infrastructure errors
    CONCURRENT_CONFLICT = "concurrent_conflict"
    STORAGE_FAILURE = "storage_failure"

    @property
    def is_validation_error(self) -> bool:
        return self in (TransferErrorKind.INVALID_AMOUNT, TransferErrorKind.SAME_ACCOUNT)

    @property
    def is_business_error(self) -> bool:
        return self in (
            TransferErrorKind.ACCOUNT_NOT_FOUND,
            TransferErrorKind.CURRENCY_MISMATCH,
            TransferErrorKind.INSUFFICIENT_FUNDS,
        )

    @property
    def is_infrastructure_error(self) -> bool:
        return self in (TransferErrorKind.CONCURRENT_CONFLICT, TransferErrorKind.STORAGE_FAILURE)


@dataclass(frozen=True)
class TransferSuccess:
    """A committed transfer with its storage id and execution timestamp"""
    transfer: 'Transfer'

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class TransferFailure:
    """A rejected transfer; nothing it touched was made durable"""
    kind: TransferErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


TransferResult = Union[TransferSuccess, TransferFailure]


class StorageError(Exception):
    """Unexpected failure reported by a storage backend"""


class ConcurrentConflictError(StorageError):
    """Serialization failure, deadlock or lock timeout in the storage layer"""
