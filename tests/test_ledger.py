import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from config import LedgerConfig, WithdrawalBoundary
from ledger import Ledger
from models import RejectionReason, Transaction, TransactionType


def deposit(client_id, transaction_id, amount):
    return Transaction(TransactionType.DEPOSIT, client_id, transaction_id, Decimal(amount))


def withdrawal(client_id, transaction_id, amount):
    return Transaction(TransactionType.WITHDRAWAL, client_id, transaction_id, Decimal(amount))


def dispute(client_id, transaction_id):
    return Transaction(TransactionType.DISPUTE, client_id, transaction_id)


def resolve(client_id, transaction_id):
    return Transaction(TransactionType.RESOLVE, client_id, transaction_id)


def chargeback(client_id, transaction_id):
    return Transaction(TransactionType.CHARGEBACK, client_id, transaction_id)


class TestLedger:
    def setup_method(self):
        self.ledger = Ledger()

    def test_deposit(self):
        result = self.ledger.apply(deposit(1, 1, "100"))

        assert result.is_applied
        account = self.ledger.get_account(1)
        assert account.available == Decimal("100")
        assert account.total == Decimal("100")

    def test_account_created_on_first_reference(self):
        assert self.ledger.get_account(5) is None

        result = self.ledger.apply(dispute(5, 42))

        assert result.reason == RejectionReason.UNKNOWN_TRANSACTION
        account = self.ledger.get_account(5)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.locked is False

    def test_deposit_missing_amount(self):
        result = self.ledger.apply(Transaction(TransactionType.DEPOSIT, 1, 1))
        assert result.reason == RejectionReason.MISSING_AMOUNT
        assert self.ledger.get_account(1).total == Decimal("0")

    def test_withdrawal_success(self):
        self.ledger.apply(deposit(1, 1, "100"))

        result = self.ledger.apply(withdrawal(1, 2, "60"))

        assert result.is_applied
        assert self.ledger.get_account(1).available == Decimal("40")

    def test_withdrawal_insufficient_funds(self):
        self.ledger.apply(deposit(1, 1, "50"))

        result = self.ledger.apply(withdrawal(1, 2, "100"))

        assert result.reason == RejectionReason.INSUFFICIENT_FUNDS
        assert result.reason.is_expected
        assert self.ledger.get_account(1).available == Decimal("50")

    def test_withdrawal_to_exactly_zero_rejected_by_default(self):
        self.ledger.apply(deposit(1, 1, "50"))

        result = self.ledger.apply(withdrawal(1, 2, "50"))

        assert result.reason == RejectionReason.INSUFFICIENT_FUNDS
        assert self.ledger.get_account(1).available == Decimal("50")

    def test_withdrawal_leaving_positive_balance(self):
        self.ledger.apply(deposit(1, 1, "50"))

        result = self.ledger.apply(withdrawal(1, 2, "49.9999"))

        assert result.is_applied
        assert self.ledger.get_account(1).available == Decimal("0.0001")

    def test_rejected_withdrawal_not_recorded(self):
        self.ledger.apply(deposit(1, 1, "10"))
        self.ledger.apply(withdrawal(1, 2, "20"))

        result = self.ledger.apply(dispute(1, 2))

        assert result.reason == RejectionReason.UNKNOWN_TRANSACTION

    def test_duplicate_transaction_id(self):
        self.ledger.apply(deposit(1, 1, "100"))

        result = self.ledger.apply(deposit(1, 1, "100"))

        assert result.reason == RejectionReason.DUPLICATE_TRANSACTION
        assert self.ledger.get_account(1).available == Decimal("100")

    def test_dispute(self):
        self.ledger.apply(deposit(1, 1, "100"))

        result = self.ledger.apply(dispute(1, 1))

        assert result.is_applied
        account = self.ledger.get_account(1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("100")
        assert account.total == Decimal("100")

    def test_dispute_tx_not_found(self):
        result = self.ledger.apply(dispute(1, 99))
        assert result.reason == RejectionReason.UNKNOWN_TRANSACTION
        assert not result.reason.is_expected

    def test_dispute_wrong_client(self):
        self.ledger.apply(deposit(1, 1, "100"))

        result = self.ledger.apply(dispute(2, 1))

        assert result.reason == RejectionReason.CLIENT_MISMATCH
        assert self.ledger.get_account(1).held == Decimal("0")
        assert self.ledger.get_account(2).held == Decimal("0")

    def test_dispute_twice(self):
        self.ledger.apply(deposit(1, 1, "100"))
        self.ledger.apply(dispute(1, 1))

        result = self.ledger.apply(dispute(1, 1))

        assert result.reason == RejectionReason.ALREADY_DISPUTED
        assert self.ledger.get_account(1).held == Decimal("100")

    def test_dispute_withdrawal_allowed_by_default(self):
        self.ledger.apply(deposit(1, 1, "100"))
        self.ledger.apply(withdrawal(1, 2, "30"))

        result = self.ledger.apply(dispute(1, 2))

        assert result.is_applied
        account = self.ledger.get_account(1)
        assert account.available == Decimal("40")
        assert account.held == Decimal("30")
        assert account.total == Decimal("70")

    def test_resolve(self):
        self.ledger.apply(deposit(1, 1, "100"))
        self.ledger.apply(dispute(1, 1))

        result = self.ledger.apply(resolve(1, 1))

        assert result.is_applied
        account = self.ledger.get_account(1)
        assert account.available == Decimal("100")
        assert account.held == Decimal("0")

    def test_resolve_not_disputed(self):
        self.ledger.apply(deposit(1, 1, "100"))

        result = self.ledger.apply(resolve(1, 1))

        assert result.reason == RejectionReason.NOT_DISPUTED

    def test_resolve_wrong_client(self):
        self.ledger.apply(deposit(1, 1, "100"))
        self.ledger.apply(dispute(1, 1))

        result = self.ledger.apply(resolve(2, 1))

        assert result.reason == RejectionReason.CLIENT_MISMATCH
        assert self.ledger.get_account(1).held == Decimal("100")

    def test_chargeback(self):
        self.ledger.apply(deposit(1, 1, "100"))
        self.ledger.apply(dispute(1, 1))

        result = self.ledger.apply(chargeback(1, 1))

        assert result.is_applied
        account = self.ledger.get_account(1)
        assert account.available == Decimal("0")
        assert account.held == Decimal("0")
        assert account.total == Decimal("0")
        assert account.locked is True

    def test_chargeback_not_disputed(self):
        self.ledger.apply(deposit(1, 1, "100"))

        result = self.ledger.apply(chargeback(1, 1))

        assert result.reason == RejectionReason.NOT_DISPUTED
        assert self.ledger.get_account(1).locked is False

    def test_locked_account_still_accepts_by_default(self):
        self.ledger.apply(deposit(1, 1, "100"))
        self.ledger.apply(dispute(1, 1))
        self.ledger.apply(chargeback(1, 1))

        result = self.ledger.apply(deposit(1, 2, "50"))

        assert result.is_applied
        account = self.ledger.get_account(1)
        assert account.available == Decimal("50")
        assert account.locked is True

    def test_rejection_is_idempotent(self):
        self.ledger.apply(deposit(1, 1, "100"))
        before = self.ledger.snapshot()

        first = self.ledger.apply(resolve(1, 1))
        second = self.ledger.apply(resolve(1, 1))

        assert first == second
        assert self.ledger.snapshot() == before

    def test_snapshot_in_creation_order(self):
        self.ledger.apply(deposit(3, 1, "1"))
        self.ledger.apply(deposit(1, 2, "1"))
        self.ledger.apply(deposit(2, 3, "1"))

        assert list(self.ledger.snapshot()) == [3, 1, 2]


class TestLedgerPolicies:
    def test_inclusive_withdrawal_boundary(self):
        ledger = Ledger(LedgerConfig(withdrawal_boundary=WithdrawalBoundary.INCLUSIVE))
        ledger.apply(deposit(1, 1, "50"))

        assert ledger.apply(withdrawal(1, 2, "50")).is_applied
        assert ledger.get_account(1).available == Decimal("0")

        result = ledger.apply(withdrawal(1, 3, "0.0001"))
        assert result.reason == RejectionReason.INSUFFICIENT_FUNDS

    def test_reject_locked_accounts(self):
        ledger = Ledger(LedgerConfig(reject_locked_accounts=True))
        ledger.apply(deposit(1, 1, "100"))
        ledger.apply(deposit(1, 2, "20"))
        ledger.apply(dispute(1, 1))
        ledger.apply(chargeback(1, 1))

        deposit_result = ledger.apply(deposit(1, 3, "50"))
        withdrawal_result = ledger.apply(withdrawal(1, 4, "5"))

        assert deposit_result.reason == RejectionReason.ACCOUNT_LOCKED
        assert withdrawal_result.reason == RejectionReason.ACCOUNT_LOCKED
        assert deposit_result.reason.is_expected
        assert ledger.get_account(1).available == Decimal("20")

    def test_locked_account_disputes_still_processed(self):
        ledger = Ledger(LedgerConfig(reject_locked_accounts=True))
        ledger.apply(deposit(1, 1, "100"))
        ledger.apply(deposit(1, 2, "20"))
        ledger.apply(dispute(1, 1))
        ledger.apply(chargeback(1, 1))

        assert ledger.apply(dispute(1, 2)).is_applied
        assert ledger.get_account(1).held == Decimal("20")

    def test_withdrawal_disputes_disabled(self):
        ledger = Ledger(LedgerConfig(allow_withdrawal_disputes=False))
        ledger.apply(deposit(1, 1, "100"))
        ledger.apply(withdrawal(1, 2, "30"))

        result = ledger.apply(dispute(1, 2))

        assert result.reason == RejectionReason.NOT_DISPUTABLE
        account = ledger.get_account(1)
        assert account.available == Decimal("70")
        assert account.held == Decimal("0")
