"""
Text formatting of statement summaries.
"""

import logging

from .models import (
    CategoryBreakdown,
    DailyGroup,
    ParsingResult,
    SpendingPoint,
    VendorSpending,
)

logger = logging.getLogger(__name__)


def format_currency(amount: float) -> str:
    """Format an amount like ``$1,234.56``; negative amounts get a leading minus."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


class SummaryFormatter:
    """Formats summary information."""

    @staticmethod
    def format_summary(
        result: ParsingResult,
        breakdown: list[CategoryBreakdown] | None = None,
        vendors: list[VendorSpending] | None = None,
        series: list[SpendingPoint] | None = None,
    ) -> str:
        """Format a summary of a loaded statement.

        Args:
            result: ParsingResult object
            breakdown: Optional category breakdown to list
            vendors: Optional vendor ranking to list
            series: Optional spending time series to list
        """
        totals = result.totals
        period = result.statement_period
        net_sign = "+" if totals.net_flow >= 0 else ""

        lines = []
        lines.append("=== Statement Summary ===")
        lines.append(f"Statement period: {period.start} - {period.end}")
        lines.append(f"Transactions: {len(result.transactions)}")
        lines.append(
            f"Uncategorized transactions: {len([t for t in result.transactions if not t.category])}",
        )
        lines.append(f"Total income: {format_currency(totals.total_income)}")
        lines.append(f"Total expenses: {format_currency(totals.total_expenses)}")
        lines.append(f"Net flow: {net_sign}{format_currency(totals.net_flow)}")

        if breakdown:
            lines.append("")
            lines.append("Spending by category:")
            for item in breakdown:
                lines.append(
                    f"  {item.category}: {format_currency(item.amount)} ({item.percentage:.1f}%)",
                )

        if vendors:
            lines.append("")
            lines.append("Top vendors:")
            for rank, vendor in enumerate(vendors, start=1):
                plural = "" if vendor.transactions == 1 else "s"
                lines.append(
                    f"  {rank}. {vendor.vendor}: {format_currency(vendor.amount)} "
                    f"({vendor.transactions} transaction{plural})",
                )

        if series:
            lines.append("")
            lines.append("Spending over time:")
            for point in series:
                lines.append(f"  {point.label}: {format_currency(point.amount)}")

        return "\n".join(lines)


class TransactionFormatter:
    """Formats transactions grouped per day."""

    def __init__(self, uncategorized_label: str = "-"):
        self.uncategorized_label = uncategorized_label

    def format_daily_groups(self, groups: list[DailyGroup]) -> str:
        """
        Format daily groups, most recent day first.

        Args:
            groups: DailyGroup objects as returned by the aggregator

        Returns:
            Formatted string with one header line per day
        """
        if not groups:
            logger.debug("No transactions to format")
            return "No transactions."

        lines = []
        for group in groups:
            lines.append(
                f"{group.date.isoformat()} | expenses {format_currency(group.total_expenses)}"
                f" | income {format_currency(group.total_income)}",
            )
            for transaction in group.transactions:
                lines.append(self._format_transaction_line(transaction))

        return "\n".join(lines)

    def _format_transaction_line(self, transaction) -> str:
        sign = "-" if transaction.is_expense else "+"
        category = transaction.category or self.uncategorized_label
        return (
            f"  {sign}{format_currency(transaction.amount)} | "
            f"{transaction.description} | {category}"
        )
