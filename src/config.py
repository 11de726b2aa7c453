import os
from dataclasses import dataclass
from enum import Enum

DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVEL_ENV_VAR = "LOG_LEVEL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class WithdrawalBoundary(Enum):
    """How much must remain available after a withdrawal."""

    STRICT = "strict"  # resulting available > 0
    INCLUSIVE = "inclusive"  # resulting available >= 0


@dataclass(frozen=True)
class LedgerConfig:
    """
    Policy switches for the ledger.
    By default withdrawals must leave a positive balance, locked accounts still
    accept deposits and withdrawals, and withdrawals can be disputed.
    """

    withdrawal_boundary: WithdrawalBoundary = WithdrawalBoundary.STRICT
    reject_locked_accounts: bool = False
    allow_withdrawal_disputes: bool = True


def default_log_level() -> str:
    """Level from $LOG_LEVEL, falling back to WARNING when unset or unrecognised."""
    level = os.environ.get(LOG_LEVEL_ENV_VAR, DEFAULT_LOG_LEVEL).upper()
    return level if level in LOG_LEVELS else DEFAULT_LOG_LEVEL
