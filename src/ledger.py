from decimal import Decimal
from typing import Dict, Optional, Tuple, Union, assert_never

from config import LedgerConfig, WithdrawalBoundary
from models import (
    AccountSnapshot,
    ClientAccount,
    ProcessingResult,
    RejectionReason,
    Transaction,
    TransactionType,
)
from state_manager import StateManager


class Ledger:
    """
    Applies transactions to client accounts, one at a time, in input order.

    apply() never raises and never logs: every outcome is returned as a
    ProcessingResult and a rejected transaction leaves state untouched.
    """

    def __init__(self, config: Optional[LedgerConfig] = None, state: Optional[StateManager] = None):
        self._config = config or LedgerConfig()
        self._state = state or StateManager()

    def apply(self, transaction: Transaction) -> ProcessingResult:
        account = self._state.get_or_create_account(transaction.client_id)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                return self._apply_deposit(account, transaction)
            case TransactionType.WITHDRAWAL:
                return self._apply_withdrawal(account, transaction)
            case TransactionType.DISPUTE:
                return self._apply_dispute(account, transaction)
            case TransactionType.RESOLVE:
                return self._apply_resolve(account, transaction)
            case TransactionType.CHARGEBACK:
                return self._apply_chargeback(account, transaction)
            case _:
                assert_never(transaction.transaction_type)

    def get_account(self, client_id: int) -> Optional[AccountSnapshot]:
        account = self._state.get_account(client_id)
        return account.snapshot() if account is not None else None

    def snapshot(self) -> Dict[int, AccountSnapshot]:
        return self._state.snapshot_accounts()

    def _check_revertible(self, account: ClientAccount, transaction: Transaction) -> Optional[ProcessingResult]:
        """Preconditions shared by deposits and withdrawals."""
        if transaction.amount is None:
            return ProcessingResult.rejected(transaction, RejectionReason.MISSING_AMOUNT)

        if self._state.get_transaction(transaction.transaction_id) is not None:
            return ProcessingResult.rejected(
                transaction, RejectionReason.DUPLICATE_TRANSACTION, "transaction id already recorded"
            )

        if account.locked and self._config.reject_locked_accounts:
            return ProcessingResult.rejected(transaction, RejectionReason.ACCOUNT_LOCKED)

        return None

    def _apply_deposit(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        rejection = self._check_revertible(account, transaction)
        if rejection is not None:
            return rejection

        account.credit(transaction.amount)
        self._state.store_transaction(transaction)
        return ProcessingResult.applied(transaction)

    def _apply_withdrawal(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        rejection = self._check_revertible(account, transaction)
        if rejection is not None:
            return rejection

        remaining = account.available + _signed_amount(transaction)
        if not self._is_sufficient(remaining):
            return ProcessingResult.rejected(
                transaction,
                RejectionReason.INSUFFICIENT_FUNDS,
                f"available {account.available}, requested {transaction.amount}",
            )

        account.debit(transaction.amount)
        self._state.store_transaction(transaction)
        return ProcessingResult.applied(transaction)

    def _is_sufficient(self, remaining: Decimal) -> bool:
        if self._config.withdrawal_boundary == WithdrawalBoundary.INCLUSIVE:
            return remaining >= 0
        return remaining > 0

    def _apply_dispute(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        found = self._find_referenced(transaction, expect_disputed=False)
        if isinstance(found, ProcessingResult):
            return found
        original, amount = found

        if original.transaction_type == TransactionType.WITHDRAWAL and not self._config.allow_withdrawal_disputes:
            return ProcessingResult.rejected(
                transaction, RejectionReason.NOT_DISPUTABLE, "withdrawal disputes are disabled"
            )

        account.hold(amount)
        self._state.mark_transaction_disputed(transaction.transaction_id)
        return ProcessingResult.applied(transaction)

    def _apply_resolve(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        found = self._find_referenced(transaction, expect_disputed=True)
        if isinstance(found, ProcessingResult):
            return found
        _, amount = found

        account.release_hold(amount)
        self._state.clear_transaction_dispute(transaction.transaction_id)
        return ProcessingResult.applied(transaction)

    def _apply_chargeback(self, account: ClientAccount, transaction: Transaction) -> ProcessingResult:
        found = self._find_referenced(transaction, expect_disputed=True)
        if isinstance(found, ProcessingResult):
            return found
        _, amount = found

        account.remove_held(amount)
        account.lock()
        self._state.clear_transaction_dispute(transaction.transaction_id)
        return ProcessingResult.applied(transaction)

    def _find_referenced(
        self, transaction: Transaction, expect_disputed: bool
    ) -> Union[ProcessingResult, Tuple[Transaction, Decimal]]:
        """
        Look up the transaction a dispute/resolve/chargeback refers to.

        Checks, in order: it exists, it belongs to the same client, its dispute
        state is the expected one, and it carries an amount. Returns the original
        transaction and its amount, or the rejection for the first failed check.
        """
        original = self._state.get_transaction(transaction.transaction_id)

        if original is None:
            return ProcessingResult.rejected(transaction, RejectionReason.UNKNOWN_TRANSACTION)

        if original.client_id != transaction.client_id:
            return ProcessingResult.rejected(
                transaction,
                RejectionReason.CLIENT_MISMATCH,
                f"tx {original.transaction_id} belongs to client {original.client_id}",
            )

        disputed = self._state.is_transaction_disputed(transaction.transaction_id)
        if disputed and not expect_disputed:
            return ProcessingResult.rejected(transaction, RejectionReason.ALREADY_DISPUTED)
        if not disputed and expect_disputed:
            return ProcessingResult.rejected(transaction, RejectionReason.NOT_DISPUTED)

        if original.amount is None:
            return ProcessingResult.rejected(
                transaction, RejectionReason.MISSING_AMOUNT, f"tx {original.transaction_id} has no amount"
            )

        return original, original.amount


def _signed_amount(transaction: Transaction) -> Decimal:
    """Balance delta of a deposit (+amount) or withdrawal (-amount)."""
    if transaction.transaction_type == TransactionType.WITHDRAWAL:
        return -transaction.amount
    return transaction.amount
