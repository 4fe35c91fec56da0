import logging
import os
import sys
from typing import List, Optional

from payments_engine import PaymentsEngine
from report import write_report

LOG_LEVEL_ENV = "PAYMENTS_LOG_LEVEL"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Diagnostics go to stderr; stdout carries only the report."""
    level_name = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: payments-engine <input.csv>", file=sys.stderr)
        sys.exit(1)

    configure_logging()

    filepath = args[0]
    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        sys.exit(1)

    write_report(accounts, sys.stdout)


if __name__ == "__main__":
    main()
