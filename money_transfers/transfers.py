"""
Transfer Processing Module

Moves a fixed-point amount from one account to another inside a single
storage unit of work. Both balance updates are issued in ascending account
id order, whatever the transfer direction, so that concurrent transfers
between the same pair of accounts always lock their rows in the same order.

Outcomes are returned as TransferSuccess / TransferFailure values; a failure
always means the whole unit of work was rolled back.
"""

from datetime import datetime, timezone
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from .currency import Money
from .errors import (
    TransferErrorKind, TransferFailure, TransferResult, TransferSuccess,
    StorageError, ConcurrentConflictError
)
from .storage import StorageGateway, StorageTransaction, IsolationLevel
from .logging_config import get_logger, log_action


Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Transfer:
    """
    Movement of value between two accounts

    A candidate transfer has no id and no timestamp; both are assigned when
    the transfer is committed. Persisted transfers are never modified.
    """
    from_account_id: int
    to_account_id: int
    amount: Money
    id: Optional[int] = None
    timestamp: Optional[datetime] = None

    @property
    def currency(self) -> str:
        return self.amount.currency_code

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def with_id_and_timestamp(self, transfer_id: int, timestamp: datetime) -> 'Transfer':
        return replace(self, id=transfer_id, timestamp=timestamp)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Transfer':
        """Create instance from a storage row"""
        return cls(
            id=row["id"],
            from_account_id=row["from_account"],
            to_account_id=row["to_account"],
            amount=Money.of(row["currency"], row["amount"]),
            timestamp=row["timestamp"]
        )


class _TransferAborted(Exception):
    """Unwinds the unit of work so that storage rolls it back"""

    def __init__(self, failure: TransferFailure):
        super().__init__(failure.message)
        self.failure = failure


class TransferEngine:
    """
    Executes transfers under the consistency rules:

    - amount must be positive and the two accounts must differ
    - both accounts must exist and hold the transfer currency
    - the source balance never drops below zero
    - debit, credit and the transfer row commit together or not at all
    """

    ISOLATION = IsolationLevel.READ_COMMITTED

    def __init__(self, storage: StorageGateway, clock: Optional[Clock] = None):
        self.storage = storage
        self.clock = clock or utc_now
        self.logger = get_logger("money_transfers.transfers")

    def execute(self, candidate: Transfer) -> TransferResult:
        """
        Execute a candidate transfer

        Args:
            candidate: Transfer with from/to account ids and amount

        Returns:
            TransferSuccess with the persisted transfer (id and timestamp set),
            or TransferFailure with the kind and message of the rejection
        """
        failure = self._validate(candidate)
        if failure:
            return self._rejected(candidate, failure)

        try:
            with self.storage.atomic(self.ISOLATION) as tx:
                self._require_accounts(tx, candidate)
                self._apply_balance_changes(tx, candidate)
                timestamp = self.clock()
                transfer_id = self.storage.insert_transfer(
                    tx,
                    candidate.from_account_id,
                    candidate.to_account_id,
                    candidate.amount.amount,
                    candidate.currency,
                    timestamp
                )
        except _TransferAborted as e:
            return self._rejected(candidate, e.failure)
        except ConcurrentConflictError as e:
            return self._storage_failed(
                candidate, TransferFailure(TransferErrorKind.CONCURRENT_CONFLICT, str(e))
            )
        except StorageError as e:
            return self._storage_failed(
                candidate, TransferFailure(TransferErrorKind.STORAGE_FAILURE, str(e))
            )

        transfer = candidate.with_id_and_timestamp(transfer_id, timestamp)

        log_action(
            self.logger, "info", "Transfer completed",
            action="execute_transfer", resource=f"transfer:{transfer.id}",
            extra={
                "transfer_id": transfer.id,
                "from_account": transfer.from_account_id,
                "to_account": transfer.to_account_id,
                "amount": transfer.amount.to_plain_string(),
                "currency": transfer.currency,
                "timestamp": transfer.timestamp.isoformat()
            }
        )

        return TransferSuccess(transfer)

    def _validate(self, candidate: Transfer) -> Optional[TransferFailure]:
        """Checks that need no storage access"""
        if not candidate.amount.is_positive():
            return TransferFailure(
                TransferErrorKind.INVALID_AMOUNT,
                "Transfer amount must be greater than 0"
            )

        if candidate.from_account_id == candidate.to_account_id:
            return TransferFailure(
                TransferErrorKind.SAME_ACCOUNT,
                "Cannot transfer to the same account"
            )

        return None

    def _require_accounts(self, tx: StorageTransaction, candidate: Transfer) -> None:
        """Both accounts exist and are held in the transfer currency"""
        for account_id in (candidate.from_account_id, candidate.to_account_id):
            currency = self.storage.get_account_currency(tx, account_id)
            if currency is None:
                raise _TransferAborted(TransferFailure(
                    TransferErrorKind.ACCOUNT_NOT_FOUND,
                    f"Account with id {account_id} not found"
                ))
            if currency != candidate.currency:
                raise _TransferAborted(TransferFailure(
                    TransferErrorKind.CURRENCY_MISMATCH,
                    f"Transfer currency {candidate.currency} does not match "
                    f"account {account_id} currency {currency}"
                ))

    def _apply_balance_changes(self, tx: StorageTransaction, candidate: Transfer) -> None:
        """Debit the source and credit the destination, lower account id first"""
        for account_id, apply in self.ordered_updates(candidate):
            apply(tx, account_id, candidate)

    def ordered_updates(self, candidate: Transfer) -> List[Tuple[int, Callable]]:
        """Balance updates sorted by account id"""
        updates = [
            (candidate.from_account_id, self._debit),
            (candidate.to_account_id, self._credit),
        ]
        return sorted(updates, key=lambda update: update[0])

    def _debit(self, tx: StorageTransaction, account_id: int, candidate: Transfer) -> None:
        rows = self.storage.debit_account(
            tx, account_id, candidate.amount.amount, candidate.currency
        )
        # Existence and currency were confirmed earlier in this unit of work
        if rows != 1:
            raise _TransferAborted(TransferFailure(
                TransferErrorKind.INSUFFICIENT_FUNDS,
                f"Insufficient funds in account {account_id} "
                f"to transfer {candidate.amount.to_string()}"
            ))

    def _credit(self, tx: StorageTransaction, account_id: int, candidate: Transfer) -> None:
        rows = self.storage.credit_account(
            tx, account_id, candidate.amount.amount, candidate.currency
        )
        if rows != 1:
            raise _TransferAborted(TransferFailure(
                TransferErrorKind.ACCOUNT_NOT_FOUND,
                f"Account with id {account_id} not found"
            ))

    def _rejected(self, candidate: Transfer, failure: TransferFailure) -> TransferFailure:
        log_action(
            self.logger, "warning", f"Transfer rejected: {failure.message}",
            action="execute_transfer",
            extra=self._describe(candidate, failure)
        )
        return failure

    def _storage_failed(self, candidate: Transfer, failure: TransferFailure) -> TransferFailure:
        log_action(
            self.logger, "error", f"Transfer failed in storage: {failure.message}",
            action="execute_transfer",
            extra=self._describe(candidate, failure)
        )
        return failure

    @staticmethod
    def _describe(candidate: Transfer, failure: TransferFailure) -> Dict[str, Any]:
        return {
            "error": failure.kind.value,
            "from_account": candidate.from_account_id,
            "to_account": candidate.to_account_id,
            "amount": candidate.amount.to_plain_string(),
            "currency": candidate.currency
        }
