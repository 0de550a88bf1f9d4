"""
Test suite for transfers module

Runs the same transfer scenarios against every local storage backend and
checks that a failed transfer never leaves a partial mutation behind.
"""

import pytest
from decimal import Decimal
from datetime import datetime, timezone

from money_transfers.currency import Money
from money_transfers.storage import InMemoryStorage, SQLiteStorage
from money_transfers.accounts import AccountManager
from money_transfers.errors import (
    TransferErrorKind, TransferFailure, TransferSuccess,
    StorageError, ConcurrentConflictError
)
from money_transfers.transfers import Transfer, TransferEngine


TIMESTAMP = datetime(1970, 1, 2, 10, 12, 3, 123000, tzinfo=timezone.utc)


def fixed_clock():
    return TIMESTAMP


class TransferEngineContract:
    """Scenarios every storage backend must satisfy"""

    def make_storage(self):
        raise NotImplementedError

    def setup_method(self):
        """Set up test fixtures"""
        self.storage = self.make_storage()
        self.account_manager = AccountManager(self.storage)
        self.engine = TransferEngine(self.storage, clock=fixed_clock)

    def teardown_method(self):
        self.storage.close()

    def create_account(self, owner, currency, balance):
        return self.account_manager.create_account(owner, Money.of(currency, balance))

    def balance_of(self, account):
        return self.storage.load_account(account.id)["balance"]

    def transfer(self, from_account, to_account, currency, amount):
        return self.engine.execute(Transfer(
            from_account_id=from_account.id,
            to_account_id=to_account.id,
            amount=Money.of(currency, amount)
        ))

    def test_successful_transfer(self):
        """Test 10.12 USD moving from 100.21 to 35.17"""
        source = self.create_account("Joe", "USD", "100.21")
        target = self.create_account("Steve", "USD", "35.17")

        result = self.transfer(source, target, "USD", "10.12")

        assert isinstance(result, TransferSuccess)
        assert result.ok
        assert self.balance_of(source) == Decimal('90.09')
        assert self.balance_of(target) == Decimal('45.29')

        transfer = result.transfer
        assert transfer.id is not None
        assert transfer.is_persisted
        assert transfer.timestamp == TIMESTAMP
        assert transfer.from_account_id == source.id
        assert transfer.to_account_id == target.id
        assert transfer.amount == Money.of("USD", "10.12")

        rows = self.storage.load_account_transfers(source.id)
        assert len(rows) == 1
        assert rows[0]["id"] == transfer.id
        assert rows[0]["amount"] == Decimal('10.12')
        assert rows[0]["timestamp"] == TIMESTAMP

    def test_transfer_of_whole_balance(self):
        """Test that a balance may be drained to exactly zero"""
        source = self.create_account("Joe", "USD", "10.12")
        target = self.create_account("Steve", "USD", "0")

        result = self.transfer(source, target, "USD", "10.12")

        assert result.ok
        assert self.balance_of(source) == Decimal('0.00')
        assert self.balance_of(target) == Decimal('10.12')

    def test_insufficient_funds(self):
        """Test that an overdraft fails and changes nothing"""
        source = self.create_account("Joe", "USD", "1.21")
        target = self.create_account("Steve", "USD", "0")

        result = self.transfer(source, target, "USD", "10.12")

        assert isinstance(result, TransferFailure)
        assert result.kind == TransferErrorKind.INSUFFICIENT_FUNDS
        assert self.balance_of(source) == Decimal('1.21')
        assert self.balance_of(target) == Decimal('0.00')
        assert self.storage.load_account_transfers(source.id) == []

    def test_insufficient_funds_when_debiting_higher_id(self):
        """Test rollback of the credit already applied to the lower account id"""
        target = self.create_account("Steve", "USD", "5.00")
        source = self.create_account("Joe", "USD", "1.21")

        result = self.transfer(source, target, "USD", "10.12")

        assert result.kind == TransferErrorKind.INSUFFICIENT_FUNDS
        assert self.balance_of(target) == Decimal('5.00')
        assert self.balance_of(source) == Decimal('1.21')
        assert self.storage.load_account_transfers(target.id) == []

    def test_currency_mismatch(self):
        """Test that a USD transfer into an EUR account fails"""
        source = self.create_account("Joe", "USD", "100.00")
        target = self.create_account("Steve", "EUR", "100.00")

        result = self.transfer(source, target, "USD", "10.00")

        assert result.kind == TransferErrorKind.CURRENCY_MISMATCH
        assert self.balance_of(source) == Decimal('100.00')
        assert self.balance_of(target) == Decimal('100.00')
        assert self.storage.load_account_transfers(source.id) == []

    def test_transfer_currency_differs_from_both_accounts(self):
        """Test a EUR transfer between two USD accounts"""
        source = self.create_account("Joe", "USD", "100.00")
        target = self.create_account("Steve", "USD", "0")

        result = self.transfer(source, target, "EUR", "10.00")

        assert result.kind == TransferErrorKind.CURRENCY_MISMATCH
        assert self.balance_of(source) == Decimal('100.00')

    def test_account_not_found(self):
        """Test transfers that name a missing account"""
        account = self.create_account("Joe", "USD", "100.00")

        result = self.engine.execute(Transfer(account.id, 999, Money.of("USD", "1.00")))
        assert result.kind == TransferErrorKind.ACCOUNT_NOT_FOUND
        assert "999" in result.message

        result = self.engine.execute(Transfer(999, account.id, Money.of("USD", "1.00")))
        assert result.kind == TransferErrorKind.ACCOUNT_NOT_FOUND

        assert self.balance_of(account) == Decimal('100.00')

    def test_invalid_amount(self):
        """Test that zero, negative and truncated-to-zero amounts fail"""
        source = self.create_account("Joe", "USD", "100.00")
        target = self.create_account("Steve", "USD", "0")

        for amount in ["0", "-5.00", "0.001"]:
            result = self.transfer(source, target, "USD", amount)
            assert result.kind == TransferErrorKind.INVALID_AMOUNT
            assert result.kind.is_validation_error

        assert self.balance_of(source) == Decimal('100.00')

    def test_same_account(self):
        """Test that a transfer to the same account fails"""
        account = self.create_account("Joe", "USD", "100.00")

        result = self.transfer(account, account, "USD", "1.00")

        assert result.kind == TransferErrorKind.SAME_ACCOUNT
        assert self.balance_of(account) == Decimal('100.00')

    def test_transfers_in_both_directions(self):
        """Test consecutive transfers and transfer id assignment"""
        first = self.create_account("Joe", "USD", "50.00")
        second = self.create_account("Steve", "USD", "50.00")

        forward = self.transfer(first, second, "USD", "20.00")
        backward = self.transfer(second, first, "USD", "5.50")

        assert forward.ok and backward.ok
        assert backward.transfer.id > forward.transfer.id
        assert self.balance_of(first) == Decimal('35.50')
        assert self.balance_of(second) == Decimal('64.50')
        assert len(self.storage.load_account_transfers(first.id)) == 2

    def test_amount_beyond_any_balance(self):
        """Test that an amount no balance can cover is insufficient funds"""
        source = self.create_account("Joe", "USD", "1.00")
        target = self.create_account("Steve", "USD", "0")

        result = self.transfer(source, target, "USD", "100000000000000000")

        assert isinstance(result, TransferFailure)
        assert result.kind == TransferErrorKind.INSUFFICIENT_FUNDS
        assert self.balance_of(source) == Decimal('1.00')
        assert self.balance_of(target) == Decimal('0.00')

    def test_zero_decimal_currency(self):
        """Test transfers in a currency without minor units"""
        source = self.create_account("Joe", "JPY", "1500")
        target = self.create_account("Steve", "JPY", "0")

        result = self.transfer(source, target, "JPY", "499.9")

        assert result.ok
        assert result.transfer.amount.amount == Decimal('499')
        assert self.balance_of(source) == Decimal('1001')
        assert self.balance_of(target) == Decimal('499')


class TestTransferEngineInMemory(TransferEngineContract):

    def make_storage(self):
        return InMemoryStorage()


class TestTransferEngineSQLite(TransferEngineContract):

    def make_storage(self):
        return SQLiteStorage()

    def test_credit_beyond_storable_balance(self):
        """Test that a credit past the INTEGER range fails and rolls back"""
        source = self.create_account("Joe", "USD", "1.00")
        target = self.create_account("Steve", "USD", "92233720368547758.07")

        result = self.transfer(source, target, "USD", "0.01")

        assert result.kind == TransferErrorKind.STORAGE_FAILURE
        assert self.balance_of(source) == Decimal('1.00')
        assert self.balance_of(target) == Decimal('92233720368547758.07')
        assert self.storage.load_account_transfers(source.id) == []


class FailingBeginStorage(InMemoryStorage):
    """Storage that must not be touched"""

    def begin_transaction(self, isolation=None):
        raise AssertionError("storage accessed")


class RecordingStorage(InMemoryStorage):
    """Records the order of balance updates"""

    def __init__(self):
        super().__init__()
        self.updates = []

    def debit_account(self, tx, account_id, amount, currency):
        self.updates.append(("debit", account_id))
        return super().debit_account(tx, account_id, amount, currency)

    def credit_account(self, tx, account_id, amount, currency):
        self.updates.append(("credit", account_id))
        return super().credit_account(tx, account_id, amount, currency)


class LostCreditStorage(InMemoryStorage):
    """Credit that affects no rows, as if the account vanished"""

    def credit_account(self, tx, account_id, amount, currency):
        return 0


class FailingInsertStorage(InMemoryStorage):
    """Raises the configured error when the transfer row is appended"""

    def __init__(self, error):
        super().__init__()
        self.error = error

    def insert_transfer(self, tx, *args):
        raise self.error


class TestTransferEngineBehaviour:
    """Engine behaviour independent of the backend"""

    def seed(self, storage, *balances):
        manager = AccountManager(storage)
        return [manager.create_account(f"Owner {i}", Money.of("USD", balance))
                for i, balance in enumerate(balances)]

    def test_validation_happens_before_storage_access(self):
        """Test that same-account and invalid-amount checks need no storage"""
        engine = TransferEngine(FailingBeginStorage())

        result = engine.execute(Transfer(1, 1, Money.of("USD", "10.00")))
        assert result.kind == TransferErrorKind.SAME_ACCOUNT

        result = engine.execute(Transfer(1, 2, Money.zero("USD")))
        assert result.kind == TransferErrorKind.INVALID_AMOUNT

    def test_updates_applied_in_ascending_account_order(self):
        """Test that the lower account id is always updated first"""
        storage = RecordingStorage()
        first, second = self.seed(storage, "100.00", "100.00")
        engine = TransferEngine(storage, clock=fixed_clock)

        assert engine.execute(Transfer(second.id, first.id, Money.of("USD", "1.00"))).ok
        assert storage.updates == [("credit", first.id), ("debit", second.id)]

        storage.updates.clear()
        assert engine.execute(Transfer(first.id, second.id, Money.of("USD", "1.00"))).ok
        assert storage.updates == [("debit", first.id), ("credit", second.id)]

    def test_lost_credit_rolls_back_debit(self):
        """Test that a credit touching no rows undoes the debit"""
        storage = LostCreditStorage()
        first, second = self.seed(storage, "100.00", "0")
        engine = TransferEngine(storage, clock=fixed_clock)

        result = engine.execute(Transfer(first.id, second.id, Money.of("USD", "10.00")))

        assert result.kind == TransferErrorKind.ACCOUNT_NOT_FOUND
        assert storage.load_account(first.id)["balance"] == Decimal('100.00')
        assert storage.load_account_transfers(first.id) == []

    def test_concurrent_conflict_is_reported(self):
        """Test that a storage conflict maps to CONCURRENT_CONFLICT"""
        storage = FailingInsertStorage(ConcurrentConflictError("deadlock detected"))
        first, second = self.seed(storage, "100.00", "0")
        engine = TransferEngine(storage, clock=fixed_clock)

        result = engine.execute(Transfer(first.id, second.id, Money.of("USD", "10.00")))

        assert result.kind == TransferErrorKind.CONCURRENT_CONFLICT
        assert result.kind.is_infrastructure_error
        assert "deadlock detected" in result.message
        assert storage.load_account(first.id)["balance"] == Decimal('100.00')
        assert storage.load_account(second.id)["balance"] == Decimal('0.00')

    def test_storage_failure_is_reported(self):
        """Test that other storage errors map to STORAGE_FAILURE"""
        storage = FailingInsertStorage(StorageError("disk full"))
        first, second = self.seed(storage, "100.00", "0")
        engine = TransferEngine(storage, clock=fixed_clock)

        result = engine.execute(Transfer(first.id, second.id, Money.of("USD", "10.00")))

        assert result.kind == TransferErrorKind.STORAGE_FAILURE
        assert str(result) == "storage_failure: disk full"
        assert storage.load_account(first.id)["balance"] == Decimal('100.00')

    def test_unexpected_errors_propagate(self):
        """Test that programming errors are not folded into failures"""
        storage = FailingInsertStorage(RuntimeError("bug"))
        first, second = self.seed(storage, "100.00", "0")
        engine = TransferEngine(storage, clock=fixed_clock)

        with pytest.raises(RuntimeError):
            engine.execute(Transfer(first.id, second.id, Money.of("USD", "10.00")))

        assert storage.load_account(first.id)["balance"] == Decimal('100.00')

    def test_clock_sampled_once_per_commit(self):
        """Test that the clock is read only for committed transfers"""
        calls = []

        def counting_clock():
            calls.append(1)
            return TIMESTAMP

        storage = InMemoryStorage()
        first, second = self.seed(storage, "5.00", "0")
        engine = TransferEngine(storage, clock=counting_clock)

        engine.execute(Transfer(first.id, second.id, Money.of("USD", "10.00")))
        assert calls == []

        engine.execute(Transfer(first.id, second.id, Money.of("USD", "1.00")))
        assert calls == [1]

    def test_default_clock_is_utc(self):
        """Test that transfers are stamped with an aware UTC time"""
        storage = InMemoryStorage()
        first, second = self.seed(storage, "5.00", "0")

        result = TransferEngine(storage).execute(
            Transfer(first.id, second.id, Money.of("USD", "1.00"))
        )

        assert result.transfer.timestamp.tzinfo == timezone.utc
