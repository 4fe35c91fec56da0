from dataclasses import dataclass, field
from decimal import Decimal, Context, InvalidOperation, MAX_PREC, MAX_EMAX, MIN_EMIN
from enum import Enum
from typing import Dict, List, Optional

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# Balances never round: sums and subtractions keep every digit of their operands.
LEDGER_CONTEXT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN, traps=[InvalidOperation])


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class InvalidRow:
    """A CSV row that could not be decoded into a Transaction."""

    line_number: int
    row: List[str]
    reason: str


@dataclass
class DepositEntry:
    amount: Decimal
    disputed: bool = False


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False
    transaction_log: Dict[int, DepositEntry] = field(default_factory=dict, repr=False)

    @property
    def total(self) -> Decimal:
        return LEDGER_CONTEXT.add(self.available, self.held)

    def deposit(self, transaction_id: int, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.add(self.available, amount)
        self.transaction_log[transaction_id] = DepositEntry(amount)

    def withdraw(self, amount: Decimal) -> None:
        self.available = LEDGER_CONTEXT.subtract(self.available, amount)

    def open_dispute(self, entry: DepositEntry) -> None:
        self.available = LEDGER_CONTEXT.subtract(self.available, entry.amount)
        self.held = LEDGER_CONTEXT.add(self.held, entry.amount)
        entry.disputed = True

    def resolve_dispute(self, entry: DepositEntry) -> None:
        self.held = LEDGER_CONTEXT.subtract(self.held, entry.amount)
        self.available = LEDGER_CONTEXT.add(self.available, entry.amount)
        entry.disputed = False

    def charge_back(self, entry: DepositEntry) -> None:
        """Drop the disputed funds for good and freeze the account."""
        self.held = LEDGER_CONTEXT.subtract(self.held, entry.amount)
        self.locked = True
        entry.disputed = False


class ProcessingStats:
    """Counters for a single engine run."""

    def __init__(self):
        self.applied = 0
        self.ignored = 0
        self.malformed = 0

    def record_applied(self):
        self.applied += 1

    def record_ignored(self):
        self.ignored += 1

    def record_malformed(self):
        self.malformed += 1

    def summary(self) -> str:
        return f"Applied: {self.applied}, Ignored: {self.ignored}, Malformed: {self.malformed}"
