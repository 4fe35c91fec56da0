import logging
from typing import Dict, Iterable, Optional, TextIO, Union

from models import Transaction, InvalidRow, ClientAccount, ProcessingResult, ProcessingStats
from transaction_parser import read_transactions
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)

# Undecodable bytes survive as lone surrogates, which the parser rejects row by row.
INPUT_ENCODING = "utf-8"
INPUT_ERRORS = "surrogateescape"


class PaymentsEngine:
    """
    Replays a transaction stream, in order, against a mapping of client accounts.
    Undecodable rows are logged and skipped; rejected instructions are dropped silently.
    """

    def __init__(self, accounts: Optional[Dict[int, ClientAccount]] = None):
        self._processor = TransactionProcessor(accounts)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", encoding=INPUT_ENCODING, errors=INPUT_ERRORS, newline="") as f:
            return self.process_stream(f)

    def process_stream(self, stream: TextIO) -> Dict[int, ClientAccount]:
        """Process an already opened CSV text stream."""
        return self.process_transactions(read_transactions(stream))

    def process_transactions(self, records: Iterable[Union[Transaction, InvalidRow]]) -> Dict[int, ClientAccount]:
        """Apply every record in order and return the resulting accounts."""
        logger.info("Starting processing")

        for record in records:
            if isinstance(record, InvalidRow):
                self._stats.record_malformed()
                logger.warning(f"Skipping invalid row at line {record.line_number} {record.row}: {record.reason}")
                continue

            result = self._processor.process_transaction(record)
            if result == ProcessingResult.APPLIED:
                self._stats.record_applied()
            else:
                self._stats.record_ignored()

        logger.info(f"Processing complete. {self._stats.summary()}")
        return self._processor.get_all_accounts()


def process_transactions(
    records: Iterable[Union[Transaction, InvalidRow]],
    accounts: Optional[Dict[int, ClientAccount]] = None,
) -> Dict[int, ClientAccount]:
    """Replay ``records`` starting from ``accounts`` (empty by default) and return the final mapping."""
    return PaymentsEngine(accounts).process_transactions(records)
