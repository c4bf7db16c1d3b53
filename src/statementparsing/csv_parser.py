"""
CSV parsing functionality for bank statement exports.

The export has no fixed header; row 0 is treated as a header only when its
first field is not a ``YYYY/MM/DD`` date. Columns used:

    0  transaction date (YYYY/MM/DD)
    6  description
    8  debit
    9  credit
"""

import csv
import io
import logging
import re
from collections.abc import Iterable
from datetime import date
from pathlib import Path

from .models import Transaction

logger = logging.getLogger(__name__)

DATE_COLUMN = 0
DESCRIPTION_COLUMN = 6
DEBIT_COLUMN = 8
CREDIT_COLUMN = 9
MIN_FIELDS = 10

_DATE_PATTERN = re.compile(r"^(\d{4})/(\d{2})/(\d{2})$")
_SPREADSHEET_PREFIX = re.compile(r'^="')
_AMOUNT_NOISE = re.compile(r"[\s$€£,()]")
_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


class StatementParsingError(ValueError):
    """Exception raised when a statement file cannot be read at all."""


def is_header_row(row: list[str]) -> bool:
    """Check whether the first field of a row fails to look like a date."""
    if not row:
        return False
    first = row[0].strip()
    return not first or not _DATE_PATTERN.match(first)


def parse_date(value: str) -> date | None:
    """Parse a YYYY/MM/DD date, returning None when malformed or invalid."""
    match = _DATE_PATTERN.match(value.strip())
    if not match:
        return None

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_amount(value: str | None) -> float:
    """
    Parse a monetary field into a non-negative magnitude.

    Currency symbols, thousands separators and parentheses are ignored and
    the leading number is used. Empty or non-numeric input yields 0.0.
    """
    if not value:
        return 0.0

    text = _AMOUNT_NOISE.sub("", value)
    match = _LEADING_NUMBER.match(text)
    if not match:
        return 0.0
    return abs(float(match.group()))


def clean_description(description: str) -> str:
    """Strip spreadsheet escaping (``="...``) and surrounding quotes."""
    cleaned = _SPREADSHEET_PREFIX.sub("", description.strip())
    return cleaned.strip('"').strip()


class StatementParser:
    """Parser for bank statement CSV export files."""

    def __init__(self, encoding: str = "utf-8-sig", delimiter: str = ","):
        self.encoding = encoding
        self.delimiter = delimiter

    def read_rows(self, file_path: str | Path) -> list[list[str]]:
        """
        Tokenize a CSV file into rows of fields.

        Raises:
            StatementParsingError: If the file cannot be read or decoded
        """
        try:
            with open(file_path, encoding=self.encoding, newline="") as f:
                return self._tokenize(f)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise StatementParsingError(f"Error parsing CSV file: {e}") from e

    def decode_rows(self, data: bytes) -> list[list[str]]:
        """Tokenize the raw bytes of an uploaded file."""
        try:
            text = data.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise StatementParsingError(f"Error parsing CSV file: {e}") from e
        return self.text_rows(text)

    def text_rows(self, text: str) -> list[list[str]]:
        """Tokenize CSV text."""
        try:
            return self._tokenize(io.StringIO(text, newline=""))
        except csv.Error as e:
            raise StatementParsingError(f"Error parsing CSV file: {e}") from e

    def _tokenize(self, lines: Iterable[str]) -> list[list[str]]:
        reader = csv.reader(lines, delimiter=self.delimiter)
        return [row for row in reader if any(field.strip() for field in row)]

    def parse_file(self, file_path: str | Path) -> list[Transaction]:
        """
        Parse a statement CSV file and return its transactions.

        Args:
            file_path: Path to the CSV file

        Returns:
            List of Transaction objects, most recent first
        """
        transactions = self.parse_rows(self.read_rows(file_path))
        logger.info(f"Parsed {len(transactions)} transactions from {file_path}")
        return transactions

    def parse_bytes(self, data: bytes) -> list[Transaction]:
        """Parse the raw bytes of a statement file."""
        return self.parse_rows(self.decode_rows(data))

    def parse_text(self, text: str) -> list[Transaction]:
        """Parse statement CSV text."""
        return self.parse_rows(self.text_rows(text))

    def parse_rows(self, rows: list[list[str]]) -> list[Transaction]:
        """
        Turn tokenized rows into transactions.

        Malformed rows are skipped. The result is sorted by date, most recent
        first; transactions on the same day keep their file order.
        """
        if not rows:
            return []

        start = 1 if is_header_row(rows[0]) else 0
        if start:
            logger.debug(f"Treating first row as header: {rows[0][:3]}")

        transactions = []
        for index in range(start, len(rows)):
            row = rows[index]
            if len(row) < MIN_FIELDS:
                logger.debug(
                    f"Skipping row {index}: expected {MIN_FIELDS} fields, got {len(row)}",
                )
                continue

            try:
                transaction = self._parse_row(index, row)
            except (ValueError, IndexError, TypeError, AttributeError) as e:
                logger.warning(f"Could not parse transaction row {index}: {e}")
                continue

            if transaction is not None:
                transactions.append(transaction)

        transactions.sort(key=lambda t: t.date, reverse=True)
        skipped = len(rows) - start - len(transactions)
        if skipped:
            logger.debug(f"Skipped {skipped} of {len(rows) - start} data rows")
        return transactions

    def _parse_row(self, index: int, row: list[str]) -> Transaction | None:
        date_str = row[DATE_COLUMN].strip()
        description = clean_description(row[DESCRIPTION_COLUMN])
        if not date_str or not description:
            logger.debug(f"Skipping row {index}: missing date or description")
            return None

        booking_date = parse_date(date_str)
        if booking_date is None:
            logger.debug(f"Skipping row {index}: invalid date '{date_str}'")
            return None

        debit = parse_amount(row[DEBIT_COLUMN])
        credit = parse_amount(row[CREDIT_COLUMN])
        if debit == 0 and credit == 0:
            logger.debug(f"Skipping row {index}: no debit or credit amount")
            return None

        return Transaction.from_amounts(
            row_index=index,
            booking_date=booking_date,
            description=description,
            debit=debit,
            credit=credit,
        )

    def filter_by_date_range(
        self,
        transactions: list[Transaction],
        start_date: date,
        end_date: date,
    ) -> list[Transaction]:
        """
        Filter transactions by date range.

        Args:
            transactions: List of transactions to filter
            start_date: Start date (inclusive)
            end_date: End date (inclusive)

        Returns:
            Filtered list of transactions
        """
        return [t for t in transactions if start_date <= t.date <= end_date]
