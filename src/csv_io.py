import csv
import logging
import re
import sys
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from errors import LedgerError, MalformedRow
from models import Transaction, TransactionType, AccountSnapshot, ProcessingStats, round_amount

logger = logging.getLogger(__name__)

OUTPUT_HEADER = ["client", "available", "held", "total", "locked"]

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1
# Amounts beyond what a double can hold are rejected along with inf and NaN
MAX_AMOUNT = Decimal(sys.float_info.max)

_UNSIGNED = re.compile(r"\+?[0-9]+")


def parse_row(row: Dict[Optional[str], object]) -> Transaction:
    """
    Parse a csv.DictReader row into a Transaction.
    Raises InvalidTransactionType or MalformedRow.
    """
    if None in row:
        raise MalformedRow(f"unexpected extra fields {row[None]}")
    if None in row.values():
        raise MalformedRow("missing trailing fields")

    for value in row.values():
        if not _is_clean_text(value):
            raise MalformedRow(f"field {value!r} is not valid UTF-8")

    normalized = {k.strip(): v.strip() for k, v in row.items()}

    try:
        transaction_type = TransactionType.parse(normalized["type"])
        client_id = _parse_id(normalized["client"], "client", MAX_CLIENT_ID)
        transaction_id = _parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID)
    except KeyError as e:
        raise MalformedRow(f"missing column {e}") from None

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=_parse_amount(normalized.get("amount", "")),
    )


def _is_clean_text(value: str) -> bool:
    # Undecodable input bytes surface as lone surrogates
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True


def _parse_id(value: str, name: str, upper: int) -> int:
    if not _UNSIGNED.fullmatch(value):
        raise MalformedRow(f"{name} {value!r} is not an unsigned integer")
    parsed = int(value)
    if parsed > upper:
        raise MalformedRow(f"{name} {parsed} out of range (max {upper})")
    return parsed


def _parse_amount(value: str) -> Optional[Decimal]:
    if not value:
        return None
    if "_" in value:
        raise MalformedRow(f"amount {value!r} is not a number")
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise MalformedRow(f"amount {value!r} is not a number") from None
    # inf and NaN parse as Decimal but have no fixed-point form
    if not amount.is_finite():
        raise MalformedRow(f"amount {value!r} is not finite")
    if amount.copy_abs() > MAX_AMOUNT:
        raise MalformedRow(f"amount {value!r} out of range")
    return amount


def read_transactions(filepath: str, stats: Optional[ProcessingStats] = None) -> Iterator[Transaction]:
    """
    Stream transactions from a CSV file with a header row.
    Rows that fail to decode are logged and dropped. I/O errors propagate.
    """
    with open(filepath, "r", newline="", encoding="utf-8", errors="surrogateescape") as f:
        reader = csv.DictReader(f)
        for row in reader:
            try:
                yield parse_row(row)
            except LedgerError as e:
                logger.warning(f"Failed to parse row {reader.line_num}: {e}")
                if stats is not None:
                    stats.record_malformed()


def format_amount(value: Decimal) -> str:
    """Fixed four fractional digits, e.g. 1.5 -> '1.5000'."""
    rounded = round_amount(value)
    if rounded.is_zero():
        rounded = rounded.copy_abs()
    return f"{rounded:f}"


def write_accounts(snapshots: Iterable[AccountSnapshot], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_HEADER)
    for snapshot in snapshots:
        writer.writerow([
            snapshot.client_id,
            format_amount(snapshot.available),
            format_amount(snapshot.held),
            format_amount(snapshot.total),
            str(snapshot.locked).lower(),
        ])
