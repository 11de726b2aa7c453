import csv
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, Tuple

from models import Transaction, TransactionType

REQUIRED_COLUMNS = ("type", "client", "tx")
AMOUNT_COLUMN = "amount"

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
# Largest decimal exponent of a 64-bit float
MAX_AMOUNT_EXPONENT = 308


class DecodeError(ValueError):
    """A single row could not be turned into a Transaction."""


class InputFormatError(Exception):
    """The input stream as a whole is unusable (e.g. missing header columns)."""


def iter_csv_rows(stream: Iterable[str]) -> Iterator[Tuple[int, Dict[str, Optional[str]]]]:
    """
    Yield (line_number, row) for each data row in a CSV stream.
    Header names are trimmed and checked up front; raises InputFormatError if
    the header is missing or lacks a required column.
    """
    reader = csv.DictReader(stream)
    if reader.fieldnames is None:
        raise InputFormatError("Input is empty, expected a header row")

    reader.fieldnames = [name.strip() for name in reader.fieldnames]
    missing = [column for column in REQUIRED_COLUMNS if column not in reader.fieldnames]
    if missing:
        raise InputFormatError(f"Header {reader.fieldnames} is missing columns: {', '.join(missing)}")

    for row in reader:
        yield reader.line_num, row


def decode_row(row: Dict[str, Optional[str]]) -> Transaction:
    """Parse a CSV row into a Transaction. Raises DecodeError on any malformed field."""
    if row.get(None):
        raise DecodeError(f"too many fields: {row}")

    normalized = {k: v.strip() for k, v in row.items() if k is not None and v is not None}

    for column in REQUIRED_COLUMNS:
        if not normalized.get(column):
            raise DecodeError(f"missing field '{column}'")

    transaction_type = _parse_type(normalized["type"])
    client_id = _parse_id(normalized["client"], "client", MAX_CLIENT_ID)
    transaction_id = _parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID)

    amount = None
    if transaction_type.is_revertible:
        amount_str = normalized.get(AMOUNT_COLUMN, "")
        if not amount_str:
            raise DecodeError(f"{transaction_type.value} tx {transaction_id} is missing an amount")
        amount = _parse_amount(amount_str)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_type(value: str) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise DecodeError(f"unknown transaction type '{value}'") from None


def _parse_id(value: str, field: str, maximum: int) -> int:
    # int() also takes signs, underscores and non-ASCII digits
    if not (value.isascii() and value.isdigit()):
        raise DecodeError(f"{field} '{value}' is not an unsigned integer")
    parsed = int(value)
    if not 0 <= parsed <= maximum:
        raise DecodeError(f"{field} {parsed} out of range 0..{maximum}")
    return parsed


def _parse_amount(value: str) -> Decimal:
    if not value.isascii() or "_" in value:
        raise DecodeError(f"amount '{value}' is not a number")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise DecodeError(f"amount '{value}' is not a number") from None
    if not amount.is_finite():
        raise DecodeError(f"amount '{value}' is not finite")
    if amount and amount.adjusted() > MAX_AMOUNT_EXPONENT:
        raise DecodeError(f"amount '{value}' is out of range")
    if amount < 0:
        raise DecodeError(f"amount {amount} is negative")
    return amount
