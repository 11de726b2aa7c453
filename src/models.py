from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def is_revertible(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingStatus(Enum):
    APPLIED = "applied"
    REJECTED = "rejected"


class RejectionReason(Enum):
    MISSING_AMOUNT = "missing_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ACCOUNT_LOCKED = "account_locked"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    CLIENT_MISMATCH = "client_mismatch"
    ALREADY_DISPUTED = "already_disputed"
    NOT_DISPUTED = "not_disputed"
    NOT_DISPUTABLE = "not_disputable"

    @property
    def is_expected(self) -> bool:
        """Business-rule rejections, as opposed to protocol violations."""
        return self in (RejectionReason.INSUFFICIENT_FUNDS, RejectionReason.ACCOUNT_LOCKED)


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class ProcessingResult:
    """Outcome of applying one transaction to the ledger."""

    transaction: Transaction
    status: ProcessingStatus
    reason: Optional[RejectionReason] = None
    detail: str = ""

    @classmethod
    def applied(cls, transaction: Transaction) -> "ProcessingResult":
        return cls(transaction=transaction, status=ProcessingStatus.APPLIED)

    @classmethod
    def rejected(cls, transaction: Transaction, reason: RejectionReason, detail: str = "") -> "ProcessingResult":
        return cls(transaction=transaction, status=ProcessingStatus.REJECTED, reason=reason, detail=detail)

    @property
    def is_applied(self) -> bool:
        return self.status == ProcessingStatus.APPLIED


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        # Leaves total reduced by amount.
        self.held -= amount

    def lock(self) -> None:
        self.locked = True

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )


class ProcessingStats:
    """Counters for tracking processing statistics."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.decode_errors = 0

    def record_result(self, result: ProcessingResult):
        if result.is_applied:
            self.applied += 1
        else:
            self.rejected += 1

    def record_decode_error(self):
        self.decode_errors += 1

    def __repr__(self) -> str:
        return f"Applied: {self.applied}, Rejected: {self.rejected}, Decode errors: {self.decode_errors}"
