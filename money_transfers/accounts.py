"""
Account Management Module

Accounts hold an owner name and a balance in a single currency fixed at
creation. Balances are never negative and are changed only by the transfer
engine; accounts are never deleted.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from .currency import Money
from .storage import StorageGateway
from .logging_config import get_logger, log_action


MAX_OWNER_LENGTH = 50


class AccountValidationError(ValueError):
    """Raised when account data violates an account invariant"""


@dataclass(frozen=True)
class Account:
    """
    Bank account with an owner and a non-negative balance

    id is assigned by storage and is None before the account is persisted.
    """
    owner: str
    balance: Money
    id: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.owner, str) or not self.owner.strip():
            raise AccountValidationError("Owner name is required")

        if len(self.owner) > MAX_OWNER_LENGTH:
            raise AccountValidationError("Owner name characters limit exceeded")

        if not isinstance(self.balance, Money):
            raise AccountValidationError("Balance must be a Money value")

        if self.balance.is_negative():
            raise AccountValidationError("Account balance cannot be negative")

    @property
    def currency(self) -> str:
        return self.balance.currency_code

    def with_id(self, account_id: int) -> 'Account':
        return replace(self, id=account_id)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Account':
        """Create instance from a storage row"""
        return cls(
            id=row["id"],
            owner=row["owner"],
            balance=Money.of(row["currency"], row["balance"])
        )


class AccountManager:
    """Creates accounts through the storage gateway"""

    def __init__(self, storage: StorageGateway):
        self.storage = storage
        self.logger = get_logger("money_transfers.accounts")

    def create_account(self, owner: str, balance: Money) -> Account:
        """
        Create a new account

        Args:
            owner: Name of the account owner (at most 50 characters)
            balance: Initial, non-negative balance; fixes the account currency

        Returns:
            Created Account with its storage-assigned id

        Raises:
            AccountValidationError: If owner or balance are invalid
            StorageError: If the account could not be persisted
        """
        account = Account(owner=owner, balance=balance)

        with self.storage.atomic() as tx:
            account_id = self.storage.insert_account(
                tx, account.owner, account.currency, account.balance.amount
            )

        created = account.with_id(account_id)

        log_action(
            self.logger, "info", "Account created",
            action="create_account", resource=f"account:{created.id}",
            extra={
                "account_id": created.id,
                "currency": created.currency,
                "balance": created.balance.to_plain_string()
            }
        )

        return created
