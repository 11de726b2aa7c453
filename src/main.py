import argparse
import csv
import logging
import sys
from decimal import Decimal
from typing import Dict, List, Optional, TextIO

from config import LOG_LEVELS, LedgerConfig, WithdrawalBoundary, default_log_level
from decoder import InputFormatError
from models import AccountSnapshot
from payments_engine import PaymentsEngine

logger = logging.getLogger(__name__)

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]


def format_decimal(value: Decimal) -> str:
    """Format decimal without trailing zeros or exponent."""
    normalized = value.normalize()
    return f"{normalized:f}"


def write_accounts(accounts: Dict[int, AccountSnapshot], out: TextIO) -> None:
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        writer.writerow([
            client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="payments-ledger",
        description="Replay a CSV of client transactions and print final account balances.",
    )
    parser.add_argument("input", help="path to the input CSV")
    parser.add_argument(
        "--inclusive-withdrawals",
        action="store_true",
        help="allow withdrawals that leave exactly zero available",
    )
    parser.add_argument(
        "--reject-locked",
        action="store_true",
        help="reject deposits and withdrawals on accounts locked by a chargeback",
    )
    parser.add_argument(
        "--no-withdrawal-disputes",
        action="store_true",
        help="reject disputes that reference a withdrawal",
    )
    parser.add_argument(
        "--log-level",
        default=default_log_level(),
        choices=LOG_LEVELS,
        type=str.upper,
        help="diagnostics level written to stderr (default: $LOG_LEVEL or WARNING)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> LedgerConfig:
    return LedgerConfig(
        withdrawal_boundary=WithdrawalBoundary.INCLUSIVE if args.inclusive_withdrawals else WithdrawalBoundary.STRICT,
        reject_locked_accounts=args.reject_locked,
        allow_withdrawal_disputes=not args.no_withdrawal_disputes,
    )


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(build_config(args))
    try:
        accounts = engine.process_file(args.input)
    except (OSError, InputFormatError, csv.Error, UnicodeDecodeError) as e:
        logger.error(f"Cannot process {args.input}: {e}")
        sys.exit(1)

    write_accounts(accounts, sys.stdout)


if __name__ == "__main__":
    main()
