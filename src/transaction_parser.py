import csv
import logging
import re
from decimal import Decimal
from typing import Dict, Iterator, List, Optional, TextIO, Union

from models import Transaction, TransactionType, InvalidRow, MAX_CLIENT_ID, MAX_TRANSACTION_ID

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("type", "client", "tx")

_INTEGER_PATTERN = re.compile(r"\d+", re.ASCII)
_AMOUNT_PATTERN = re.compile(r"\d+(?:\.\d*)?|\.\d+", re.ASCII)


class TransactionParseError(ValueError):
    """Raised when a CSV row cannot be decoded into a Transaction."""


def parse_csv_row(row: Dict[Optional[str], object]) -> Transaction:
    """
    Parse a csv.DictReader row into a Transaction.

    Values are whitespace-trimmed. The amount column may be missing or empty;
    whether a kind needs one is decided when the transaction is applied.
    """
    surplus = row.get(None) or []
    if any(value.strip() for value in surplus):
        raise TransactionParseError(f"unexpected extra fields {surplus}")

    normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

    for column in REQUIRED_COLUMNS:
        if column not in normalized:
            raise TransactionParseError(f"missing column '{column}'")

    try:
        transaction_type = TransactionType(normalized["type"])
    except ValueError:
        raise TransactionParseError(f"unknown transaction type {normalized['type']!r}") from None

    client_id = _parse_integer(normalized["client"], "client", MAX_CLIENT_ID)
    transaction_id = _parse_integer(normalized["tx"], "tx", MAX_TRANSACTION_ID)

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        if not _AMOUNT_PATTERN.fullmatch(amount_str):
            raise TransactionParseError(f"invalid amount {amount_str!r}")
        amount = Decimal(amount_str)

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def _parse_integer(value: str, column: str, maximum: int) -> int:
    if not _INTEGER_PATTERN.fullmatch(value):
        raise TransactionParseError(f"invalid {column} {value!r}")
    digits = value.lstrip("0") or "0"
    if len(digits) > len(str(maximum)) or int(digits) > maximum:
        raise TransactionParseError(f"{column} {value} out of range (max {maximum})")
    return int(digits)


def read_transactions(stream: TextIO) -> Iterator[Union[Transaction, InvalidRow]]:
    """
    Lazily decode a CSV stream with a ``type,client,tx,amount`` header.

    Yields a Transaction per decodable row and an InvalidRow for every row that
    is not, so a single bad row never stops the stream. I/O errors propagate.
    """
    reader = csv.DictReader(stream)
    if reader.fieldnames is None:
        logger.warning("Input has no header row")
        return
    reader.fieldnames = [name.strip() for name in reader.fieldnames]

    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            yield InvalidRow(line_number=reader.line_num, row=[], reason=str(e))
            continue

        try:
            yield parse_csv_row(row)
        except TransactionParseError as e:
            yield InvalidRow(line_number=reader.line_num, row=_raw_fields(row), reason=str(e))


def _raw_fields(row: Dict[Optional[str], object]) -> List[str]:
    fields = [value for key, value in row.items() if key is not None and value is not None]
    return fields + list(row.get(None) or [])
