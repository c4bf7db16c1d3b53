"""
Derived views over a list of transactions.

All functions are pure: they never modify the transactions passed in and
keep no state between calls.
"""

from collections.abc import Callable
from datetime import date, datetime

import pandas as pd

from .models import (
    CategoryBreakdown,
    DailyGroup,
    DateRange,
    Granularity,
    SpendingPoint,
    StatementPeriod,
    Totals,
    Transaction,
    VendorSpending,
)

UNCATEGORIZED = "Uncategorized"
NOT_AVAILABLE = "N/A"

CATEGORY_COLORS = [
    "hsl(160 84% 39%)",
    "hsl(217 91% 60%)",
    "hsl(38 92% 50%)",
    "hsl(0 84% 60%)",
    "hsl(142 76% 36%)",
    "hsl(270 95% 75%)",
    "hsl(24 95% 53%)",
    "hsl(195 95% 60%)",
    "hsl(295 95% 70%)",
    "hsl(45 95% 55%)",
]

_BUCKET_FORMATS = {
    Granularity.DAILY: "%Y-%m-%d",
    Granularity.MONTHLY: "%Y-%m",
    Granularity.YEARLY: "%Y",
}


def _expense_frame(
    transactions: list[Transaction],
    key: Callable[[Transaction], str],
) -> pd.DataFrame:
    """Two-column frame (key, amount) of the expense transactions."""
    expenses = [t for t in transactions if t.is_expense]
    return pd.DataFrame(
        {
            "key": [key(t) for t in expenses],
            "amount": [float(t.amount) for t in expenses],
        },
        columns=["key", "amount"],
    )


def format_period_date(day: date) -> str:
    """Format a date like ``Jan 5, 2024``."""
    return f"{day:%b} {day.day}, {day.year}"


def bucket_label(key: str, granularity: Granularity) -> str:
    """Human-readable label of a time series bucket key."""
    if granularity is Granularity.MONTHLY:
        return datetime.strptime(key, "%Y-%m").strftime("%b %Y")
    if granularity is Granularity.YEARLY:
        return key
    return datetime.strptime(key, "%Y-%m-%d").strftime("%b %d")


def category_breakdown(
    transactions: list[Transaction],
    lookup: Callable[[str], str | None] | None = None,
) -> list[CategoryBreakdown]:
    """
    Sum expenses per category, largest first.

    A transaction's own category wins, then ``lookup(description)``, then
    "Uncategorized". Returns an empty list when there are no expenses.
    """

    def resolve(transaction: Transaction) -> str:
        if transaction.category:
            return transaction.category
        if lookup is not None:
            found = lookup(transaction.description)
            if found:
                return found
        return UNCATEGORIZED

    frame = _expense_frame(transactions, resolve)
    if frame.empty:
        return []

    total = float(frame["amount"].sum())
    if total == 0:
        return []

    sums = frame.groupby("key", sort=False)["amount"].sum()

    breakdown = [
        CategoryBreakdown(
            category=str(category),
            amount=float(amount),
            percentage=float(amount) / total * 100,
            color=CATEGORY_COLORS[index % len(CATEGORY_COLORS)],
        )
        for index, (category, amount) in enumerate(sums.items())
    ]
    breakdown.sort(key=lambda item: item.amount, reverse=True)
    return breakdown


def vendor_ranking(
    transactions: list[Transaction],
    top_n: int | None = 10,
) -> list[VendorSpending]:
    """
    Sum expenses per vendor, largest first.

    Args:
        transactions: Transactions to rank
        top_n: Number of vendors to keep, or None for all of them

    Returns:
        List of VendorSpending objects
    """
    frame = _expense_frame(transactions, lambda t: t.description)
    if frame.empty:
        return []

    ranked = (
        frame.groupby("key", sort=False)
        .agg(amount=("amount", "sum"), transactions=("amount", "count"))
        .sort_values("amount", ascending=False, kind="stable")
    )
    if top_n is not None:
        ranked = ranked.head(top_n)

    return [
        VendorSpending(
            vendor=str(vendor),
            amount=float(row["amount"]),
            transactions=int(row["transactions"]),
        )
        for vendor, row in ranked.iterrows()
    ]


def spending_series(
    transactions: list[Transaction],
    granularity: Granularity = Granularity.DAILY,
    date_range: DateRange | None = None,
) -> list[SpendingPoint]:
    """
    Sum expenses per day, month or year, oldest bucket first.

    Args:
        transactions: Transactions to aggregate
        granularity: Bucket size
        date_range: Optional inclusive range applied before bucketing

    Returns:
        List of SpendingPoint objects
    """
    if date_range is not None:
        transactions = [t for t in transactions if t.date in date_range]

    bucket_format = _BUCKET_FORMATS[granularity]
    frame = _expense_frame(transactions, lambda t: t.date.strftime(bucket_format))
    if frame.empty:
        return []

    sums = frame.groupby("key", sort=True)["amount"].sum()

    return [
        SpendingPoint(
            key=str(key),
            amount=float(amount),
            label=bucket_label(str(key), granularity),
        )
        for key, amount in sums.items()
    ]


def statement_period(transactions: list[Transaction]) -> StatementPeriod:
    """Earliest and latest date across all transactions."""
    if not transactions:
        return StatementPeriod(start=NOT_AVAILABLE, end=NOT_AVAILABLE)

    first = min(t.date for t in transactions)
    last = max(t.date for t in transactions)
    return StatementPeriod(
        start=format_period_date(first),
        end=format_period_date(last),
        start_date=first,
        end_date=last,
    )


def compute_totals(transactions: list[Transaction]) -> Totals:
    """Total income, total expenses and net flow."""
    total_income = 0.0
    total_expenses = 0.0

    for transaction in transactions:
        if transaction.is_expense:
            total_expenses += transaction.amount
        else:
            total_income += transaction.amount

    return Totals(
        total_income=total_income,
        total_expenses=total_expenses,
        net_flow=total_income - total_expenses,
    )


def group_by_day(transactions: list[Transaction]) -> list[DailyGroup]:
    """Group transactions per calendar day, most recent day first."""
    groups: dict[date, DailyGroup] = {}

    for transaction in transactions:
        group = groups.setdefault(transaction.date, DailyGroup(date=transaction.date))
        group.transactions.append(transaction)
        if transaction.is_expense:
            group.total_expenses += transaction.amount
        else:
            group.total_income += transaction.amount

    return [groups[day] for day in sorted(groups, reverse=True)]
