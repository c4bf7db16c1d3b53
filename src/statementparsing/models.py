"""
Data models for statement parsing.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum


class Granularity(Enum):
    """Bucket size for spending time series."""

    DAILY = "daily"
    MONTHLY = "monthly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class Transaction:
    """Represents a single statement row."""

    id: str
    date: date
    description: str
    debit: float
    credit: float
    is_expense: bool
    amount: float
    category: str | None = None

    @classmethod
    def from_amounts(
        cls,
        row_index: int,
        booking_date: date,
        description: str,
        debit: float,
        credit: float,
    ) -> "Transaction":
        """Create a Transaction from already-parsed fields.

        Debit takes priority when both amounts are nonzero.
        """
        if debit == 0 and credit == 0:
            raise ValueError("Transaction needs a nonzero debit or credit")

        return cls(
            id=f"{booking_date.isoformat()}-{row_index}",
            date=booking_date,
            description=description,
            debit=debit,
            credit=credit,
            is_expense=debit > 0,
            amount=debit if debit > 0 else credit,
        )

    def with_category(self, category: str | None) -> "Transaction":
        """Return a copy carrying the given category."""
        return replace(self, category=category)


@dataclass(frozen=True)
class DateRange:
    """Inclusive date range."""

    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class CategoryBreakdown:
    """Expense total of one category."""

    category: str
    amount: float
    percentage: float
    color: str


@dataclass(frozen=True)
class VendorSpending:
    """Expense total of one vendor."""

    vendor: str
    amount: float
    transactions: int


@dataclass(frozen=True)
class SpendingPoint:
    """One bucket of a spending time series."""

    key: str
    amount: float
    label: str


@dataclass(frozen=True)
class StatementPeriod:
    """Earliest and latest transaction date of a batch."""

    start: str
    end: str
    start_date: date | None = None
    end_date: date | None = None


@dataclass(frozen=True)
class Totals:
    """Income and expense totals of a batch."""

    total_income: float
    total_expenses: float
    net_flow: float


@dataclass
class DailyGroup:
    """Transactions of one calendar day."""

    date: date
    transactions: list[Transaction] = field(default_factory=list)
    total_expenses: float = 0.0
    total_income: float = 0.0


@dataclass
class ParsingResult:
    """Result of loading a statement."""

    transactions: list[Transaction]
    totals: Totals
    statement_period: StatementPeriod
