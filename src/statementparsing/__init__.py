"""
Statement Parsing - A parser and spending summary toolkit for bank statement CSVs.

This package provides tools to parse statement CSV exports, categorize
transactions by vendor, and compute the figures behind a spending dashboard.
"""

from .category_manager import DEFAULT_CATEGORIES, CategoryStore
from .csv_parser import StatementParser, StatementParsingError
from .events import CategoryEvents
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
from .output_formatter import SummaryFormatter, TransactionFormatter
from .session import DashboardSession
from .storage import JsonFileStorage, MemoryStorage, StorageBackend, StorageResult

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_CATEGORIES",
    "CategoryBreakdown",
    "CategoryEvents",
    "CategoryStore",
    "DailyGroup",
    "DashboardSession",
    "DateRange",
    "Granularity",
    "JsonFileStorage",
    "MemoryStorage",
    "ParsingResult",
    "SpendingPoint",
    "StatementParser",
    "StatementParsingError",
    "StatementPeriod",
    "StorageBackend",
    "StorageResult",
    "SummaryFormatter",
    "Totals",
    "Transaction",
    "TransactionFormatter",
    "VendorSpending",
]
