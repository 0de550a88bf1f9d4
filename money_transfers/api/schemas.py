"""
Pydantic schemas for API requests and responses
"""

from typing import Union
from pydantic import BaseModel, Field

from ..accounts import Account
from ..currency import Money
from ..transfers import Transfer


AmountField = Union[str, int, float]


class CreateAccountRequest(BaseModel):
    owner: str
    balance: AmountField = Field(..., description="Decimal amount, preferably as string")
    currency: str = Field(..., description="Currency code (USD, EUR, etc.)")

    def to_balance(self) -> Money:
        return Money.of(self.currency, self.balance)


class AccountResponse(BaseModel):
    id: int
    owner: str
    balance: str
    currency: str

    @classmethod
    def from_account(cls, account: Account) -> 'AccountResponse':
        return cls(
            id=account.id,
            owner=account.owner,
            balance=account.balance.to_plain_string(),
            currency=account.currency
        )


class TransferRequest(BaseModel):
    from_account: int
    to_account: int
    amount: AmountField = Field(..., description="Decimal amount, preferably as string")
    currency: str = Field(..., description="Currency code (USD, EUR, etc.)")

    def to_transfer(self) -> Transfer:
        return Transfer(
            from_account_id=self.from_account,
            to_account_id=self.to_account,
            amount=Money.of(self.currency, self.amount)
        )


class TransferResponse(BaseModel):
    id: int
    from_account: int
    to_account: int
    amount: str
    currency: str
    timestamp: str

    @classmethod
    def from_transfer(cls, transfer: Transfer) -> 'TransferResponse':
        return cls(
            id=transfer.id,
            from_account=transfer.from_account_id,
            to_account=transfer.to_account_id,
            amount=transfer.amount.to_plain_string(),
            currency=transfer.currency,
            timestamp=transfer.timestamp.isoformat()
        )
