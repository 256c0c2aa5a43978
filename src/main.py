import sys
import logging

from csv_io import write_accounts
from engine import LedgerEngine

logger = logging.getLogger(__name__)


def main(argv=None):
    argv = sys.argv if argv is None else argv

    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    if len(argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        sys.exit(1)

    filepath = argv[1]
    engine = LedgerEngine()
    try:
        ledger = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        sys.exit(1)

    write_accounts(ledger.snapshot(), sys.stdout)
    sys.stdout.flush()


if __name__ == "__main__":
    main()
