from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_EVEN, localcontext
from enum import Enum
from typing import Dict, Optional

from errors import InvalidTransactionType

FOUR_PLACES = Decimal("0.0001")


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @classmethod
    def parse(cls, token: str) -> "TransactionType":
        """Case-sensitive lookup; unknown tokens are rejected rather than defaulted."""
        transaction_type = _TOKENS.get(token)
        if transaction_type is None:
            raise InvalidTransactionType(token)
        return transaction_type

    @property
    def is_monetary(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


_TOKENS = {transaction_type.value: transaction_type for transaction_type in TransactionType}


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    @property
    def has_negative_amount(self) -> bool:
        # is_signed() also catches -0
        return self.amount is not None and self.amount.is_signed()

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """A deposit or withdrawal accepted into an account's history."""

    amount: Decimal
    is_under_dispute: bool = False


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False
    history: Dict[int, TransactionRecord] = field(default_factory=dict, repr=False)

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def deposit(self, transaction_id: int, amount: Decimal) -> None:
        self.available += amount
        self.history[transaction_id] = TransactionRecord(amount=amount)

    def withdraw(self, transaction_id: int, amount: Decimal) -> None:
        self.available -= amount
        self.history[transaction_id] = TransactionRecord(amount=amount)

    def open_dispute(self, record: TransactionRecord) -> None:
        """Move the disputed amount from available to held."""
        self.available -= record.amount
        self.held += record.amount
        record.is_under_dispute = True

    def resolve_dispute(self, record: TransactionRecord) -> None:
        self.held -= record.amount
        self.available += record.amount

    def charge_back(self, record: TransactionRecord) -> None:
        self.held -= record.amount
        self.locked = True

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self.history

    def snapshot(self) -> AccountSnapshot:
        """Current balances rounded to four fractional digits."""
        return AccountSnapshot(
            client_id=self.client_id,
            available=round_amount(self.available),
            held=round_amount(self.held),
            total=round_amount(self.total),
            locked=self.locked,
        )


def round_amount(value: Decimal) -> Decimal:
    """
    Round to four fractional digits.
    Precision is widened so that large balances keep every integer digit.
    """
    with localcontext() as ctx:
        ctx.prec = max(28, value.adjusted() + 6)
        return value.quantize(FOUR_PLACES, rounding=ROUND_HALF_EVEN)


class ProcessingStats:
    """Counters for the end-of-run processing report."""

    def __init__(self):
        self.processed = 0
        self.ignored = 0
        self.malformed = 0

    def record(self, result: ProcessingResult):
        if result == ProcessingResult.APPLIED:
            self.processed += 1
        else:
            self.ignored += 1

    def record_malformed(self):
        self.malformed += 1

    def __str__(self) -> str:
        return f"Processed: {self.processed}, Ignored: {self.ignored}, Malformed: {self.malformed}"
