import logging
import sys
from typing import Optional

from csv_io import read_transactions
from ledger import Ledger
from models import ProcessingStats

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Replays a transaction file into a Ledger, one row at a time, in file order.
    Malformed rows are dropped by the reader; every decoded transaction reaches the ledger.
    """

    def __init__(self, ledger: Optional[Ledger] = None):
        self._ledger = ledger if ledger is not None else Ledger()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Ledger:
        """Process CSV file and return the ledger holding final account states."""
        logger.info(f"Replaying transactions from {filepath}")

        for transaction in read_transactions(filepath, self._stats):
            result = self._ledger.apply(transaction)
            self._stats.record(result)

        logger.info(f"Replay complete: {len(self._ledger)} accounts")

        # Print final processing report to stderr
        print(self._stats, file=sys.stderr)

        return self._ledger
