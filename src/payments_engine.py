import logging
from typing import Dict, Iterable, Optional

from config import LedgerConfig
from decoder import DecodeError, decode_row, iter_csv_rows
from ledger import Ledger
from models import AccountSnapshot, ProcessingResult, ProcessingStats, Transaction

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a CSV transaction stream through the ledger, strictly in input order.
    Turns decode failures and ledger rejections into log lines.
    """

    def __init__(self, config: Optional[LedgerConfig] = None):
        self._ledger = Ledger(config)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, AccountSnapshot]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", newline="", encoding="utf-8") as f:
            return self.process_stream(f)

    def process_stream(self, stream: Iterable[str]) -> Dict[int, AccountSnapshot]:
        logger.info("Starting processing")

        for line_number, row in iter_csv_rows(stream):
            try:
                transaction = decode_row(row)
            except DecodeError as e:
                self._stats.record_decode_error()
                logger.warning(f"Skipping line {line_number}: {e}")
                continue

            self.process_transaction(transaction)

        logger.info(f"Processing complete. {self._stats}")
        return self._ledger.snapshot()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        result = self._ledger.apply(transaction)
        self._stats.record_result(result)
        if not result.is_applied:
            self._report_rejection(result)
        return result

    def _report_rejection(self, result: ProcessingResult) -> None:
        message = f"Rejected {result.transaction}: {result.reason.value}"
        if result.detail:
            message += f" ({result.detail})"

        if result.reason.is_expected:
            logger.info(message)
        else:
            logger.warning(message)
