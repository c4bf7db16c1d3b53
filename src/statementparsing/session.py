"""
Session class that orchestrates loading and categorizing a statement.
"""

import logging
from pathlib import Path

from . import aggregator
from .category_manager import CategoryStore
from .csv_parser import StatementParser, clean_description
from .models import (
    CategoryBreakdown,
    DailyGroup,
    DateRange,
    Granularity,
    ParsingResult,
    SpendingPoint,
    StatementPeriod,
    Totals,
    Transaction,
    VendorSpending,
)
from .storage import MemoryStorage

logger = logging.getLogger(__name__)


class DashboardSession:
    """Holds the transactions of the currently loaded statement."""

    def __init__(
        self,
        category_store: CategoryStore | None = None,
        csv_parser: StatementParser | None = None,
    ):
        self.category_store = category_store or CategoryStore(MemoryStorage())
        self.csv_parser = csv_parser or StatementParser()
        self.transactions: list[Transaction] = []
        self._unsubscribe = self.category_store.events.subscribe(
            self._on_category_change,
        )

    def close(self) -> None:
        """Stop following category changes."""
        self._unsubscribe()

    def _on_category_change(self, vendor: str, category: str) -> None:
        """Fill in categories of uncategorized transactions after a mapping change."""
        changed = 0
        for index, transaction in enumerate(self.transactions):
            if transaction.category:
                continue
            found = self.category_store.lookup(transaction.description)
            if found:
                self.transactions[index] = transaction.with_category(found)
                changed += 1
        if changed:
            logger.debug(
                f"Vendor '{vendor}' -> '{category}' categorized {changed} more transactions",
            )

    def load_file(self, file_path: str | Path) -> ParsingResult:
        """
        Parse and categorize a statement file, replacing the current batch.

        Raises:
            StatementParsingError: If the file cannot be read at all
        """
        return self._load(self.csv_parser.parse_file(file_path))

    def load_bytes(self, data: bytes) -> ParsingResult:
        """Parse and categorize uploaded file content."""
        return self._load(self.csv_parser.parse_bytes(data))

    def _load(self, transactions: list[Transaction]) -> ParsingResult:
        self.transactions = self.category_store.categorize(transactions)
        logger.info(f"Loaded {len(self.transactions)} transactions")
        return ParsingResult(
            transactions=self.transactions,
            totals=self.totals(),
            statement_period=self.statement_period(),
        )

    def reset(self) -> None:
        """Drop the current batch."""
        self.transactions = []

    def update_category(
        self,
        transaction_id: str,
        category: str,
    ) -> Transaction | None:
        """
        Assign a category to a transaction and remember it for its vendor.

        Returns:
            The updated transaction, or None if the id is unknown
        """
        for index, transaction in enumerate(self.transactions):
            if transaction.id == transaction_id:
                break
        else:
            logger.warning(f"Transaction '{transaction_id}' not found, category not set")
            return None

        self.category_store.update(clean_description(transaction.description), category)
        updated = transaction.with_category(category.strip())
        self.transactions[index] = updated
        return updated

    def categories(self) -> list[str]:
        return self.category_store.all_categories()

    def totals(self) -> Totals:
        return aggregator.compute_totals(self.transactions)

    def statement_period(self) -> StatementPeriod:
        return aggregator.statement_period(self.transactions)

    def category_breakdown(self) -> list[CategoryBreakdown]:
        return aggregator.category_breakdown(
            self.transactions,
            self.category_store.lookup,
        )

    def top_vendors(self, top_n: int | None = 10) -> list[VendorSpending]:
        return aggregator.vendor_ranking(self.transactions, top_n)

    def spending_series(
        self,
        granularity: Granularity = Granularity.DAILY,
        date_range: DateRange | None = None,
    ) -> list[SpendingPoint]:
        return aggregator.spending_series(self.transactions, granularity, date_range)

    def daily_groups(self) -> list[DailyGroup]:
        return aggregator.group_by_day(self.transactions)
