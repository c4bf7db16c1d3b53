"""Unit tests for aggregator.py."""

from datetime import date

import pytest

from statementparsing.aggregator import (
    CATEGORY_COLORS,
    UNCATEGORIZED,
    bucket_label,
    category_breakdown,
    compute_totals,
    format_period_date,
    group_by_day,
    spending_series,
    statement_period,
    vendor_ranking,
)
from statementparsing.models import DateRange, Granularity, Transaction


def expense(day, description, amount, category=None, index=0):
    return Transaction.from_amounts(index, day, description, amount, 0.0).with_category(
        category,
    )


def income(day, description, amount, index=0):
    return Transaction.from_amounts(index, day, description, 0.0, amount)


@pytest.fixture
def transactions():
    return [
        expense(date(2024, 3, 2), "Coffee Shop", 4.50, "Dining", 0),
        expense(date(2024, 3, 1), "AMAZON MKTPLACE", 60.00, None, 1),
        expense(date(2024, 2, 20), "Coffee Shop", 5.50, "Dining", 2),
        income(date(2024, 2, 15), "Employer Payroll", 2000.00, 3),
        expense(date(2024, 1, 10), "Shell Station", 30.00, "Transportation", 4),
        expense(date(2023, 12, 31), "Bookstore", 30.00, None, 5),
    ]


class TestCategoryBreakdown:
    """Tests for category_breakdown."""

    def test_groups_and_sorts_by_amount(self, transactions):
        """Test that expenses are summed per category, largest first."""
        breakdown = category_breakdown(transactions)

        assert [item.category for item in breakdown] == [
            UNCATEGORIZED,
            "Transportation",
            "Dining",
        ]
        assert breakdown[0].amount == pytest.approx(90.00)
        assert breakdown[1].amount == pytest.approx(30.00)
        assert breakdown[2].amount == pytest.approx(10.00)

    def test_percentages_sum_to_100(self, transactions):
        """Test that percentages add up to 100."""
        breakdown = category_breakdown(transactions)

        assert sum(item.percentage for item in breakdown) == pytest.approx(100.0)
        assert breakdown[0].percentage == pytest.approx(90 / 130 * 100)

    def test_lookup_fills_missing_categories(self, transactions):
        """Test that lookup is used for transactions without a category."""
        mapping = {"AMAZON MKTPLACE": "Shopping"}

        breakdown = category_breakdown(transactions, mapping.get)

        amounts = {item.category: item.amount for item in breakdown}
        assert amounts["Shopping"] == pytest.approx(60.00)
        assert amounts[UNCATEGORIZED] == pytest.approx(30.00)

    def test_own_category_wins_over_lookup(self):
        """Test that a transaction's own category is not overridden."""
        items = [expense(date(2024, 1, 1), "Coffee Shop", 5.0, "Dining")]

        breakdown = category_breakdown(items, lambda description: "Groceries")

        assert [item.category for item in breakdown] == ["Dining"]

    def test_colors_follow_first_appearance(self, transactions):
        """Test that colors are assigned by first appearance, not by rank."""
        breakdown = category_breakdown(transactions)
        colors = {item.category: item.color for item in breakdown}

        assert colors["Dining"] == CATEGORY_COLORS[0]
        assert colors[UNCATEGORIZED] == CATEGORY_COLORS[1]
        assert colors["Transportation"] == CATEGORY_COLORS[2]

    def test_no_expenses(self):
        """Test that income-only input gives an empty breakdown."""
        assert category_breakdown([income(date(2024, 1, 1), "Salary", 100.0)]) == []

    def test_empty_input(self):
        """Test that empty input gives an empty breakdown."""
        assert category_breakdown([]) == []


class TestVendorRanking:
    """Tests for vendor_ranking."""

    def test_sums_and_counts_per_vendor(self, transactions):
        """Test that amounts and counts are aggregated per vendor."""
        ranking = vendor_ranking(transactions)

        assert [v.vendor for v in ranking] == [
            "AMAZON MKTPLACE",
            "Shell Station",
            "Bookstore",
            "Coffee Shop",
        ]
        coffee = ranking[-1]
        assert coffee.amount == pytest.approx(10.00)
        assert coffee.transactions == 2

    def test_ties_keep_first_appearance_order(self, transactions):
        """Test that vendors with equal totals keep their input order."""
        ranking = vendor_ranking(transactions)

        assert ranking[1].vendor == "Shell Station"
        assert ranking[2].vendor == "Bookstore"

    def test_ignores_income(self, transactions):
        """Test that income transactions are not ranked."""
        vendors = [v.vendor for v in vendor_ranking(transactions)]
        assert "Employer Payroll" not in vendors

    def test_top_n(self, transactions):
        """Test truncation to the top N vendors."""
        ranking = vendor_ranking(transactions, top_n=2)
        assert [v.vendor for v in ranking] == ["AMAZON MKTPLACE", "Shell Station"]

    def test_top_n_none_keeps_all(self, transactions):
        """Test that top_n=None keeps every vendor."""
        assert len(vendor_ranking(transactions, top_n=None)) == 4

    def test_default_top_n_is_ten(self):
        """Test that at most ten vendors are returned by default."""
        items = [
            expense(date(2024, 1, 1), f"Vendor {i}", float(i + 1), index=i)
            for i in range(15)
        ]

        ranking = vendor_ranking(items)

        assert len(ranking) == 10
        assert ranking[0].vendor == "Vendor 14"

    def test_idempotent(self, transactions):
        """Test that re-aggregating yields identical results."""
        assert vendor_ranking(transactions) == vendor_ranking(transactions)

    def test_empty_input(self):
        """Test that empty input gives an empty ranking."""
        assert vendor_ranking([]) == []


class TestSpendingSeries:
    """Tests for spending_series."""

    def test_daily(self, transactions):
        """Test daily buckets sorted oldest first."""
        series = spending_series(transactions, Granularity.DAILY)

        assert [p.key for p in series] == [
            "2023-12-31",
            "2024-01-10",
            "2024-02-20",
            "2024-03-01",
            "2024-03-02",
        ]
        assert series[0].label == "Dec 31"
        assert series[-1].amount == pytest.approx(4.50)

    def test_monthly(self, transactions):
        """Test monthly buckets."""
        series = spending_series(transactions, Granularity.MONTHLY)

        assert [p.key for p in series] == ["2023-12", "2024-01", "2024-02", "2024-03"]
        assert [p.label for p in series] == ["Dec 2023", "Jan 2024", "Feb 2024", "Mar 2024"]
        assert series[-1].amount == pytest.approx(64.50)
        assert series[2].amount == pytest.approx(5.50)

    def test_yearly(self, transactions):
        """Test yearly buckets."""
        series = spending_series(transactions, Granularity.YEARLY)

        assert [(p.key, p.label) for p in series] == [
            ("2023", "2023"),
            ("2024", "2024"),
        ]
        assert series[1].amount == pytest.approx(100.00)

    def test_default_is_daily(self, transactions):
        """Test that daily buckets are the default."""
        assert spending_series(transactions) == spending_series(
            transactions,
            Granularity.DAILY,
        )

    def test_date_range_is_inclusive(self, transactions):
        """Test that the date range keeps both of its ends."""
        series = spending_series(
            transactions,
            Granularity.DAILY,
            DateRange(date(2024, 1, 10), date(2024, 3, 1)),
        )

        assert [p.key for p in series] == ["2024-01-10", "2024-02-20", "2024-03-01"]

    def test_date_range_without_matches(self, transactions):
        """Test that a range without expenses gives an empty series."""
        series = spending_series(
            transactions,
            Granularity.MONTHLY,
            DateRange(date(2020, 1, 1), date(2020, 12, 31)),
        )
        assert series == []

    def test_empty_input(self):
        """Test that empty input gives an empty series."""
        assert spending_series([], Granularity.MONTHLY) == []


class TestStatementPeriod:
    """Tests for statement_period."""

    def test_period(self, transactions):
        """Test earliest and latest dates over all transactions."""
        period = statement_period(transactions)

        assert period.start == "Dec 31, 2023"
        assert period.end == "Mar 2, 2024"
        assert period.start_date == date(2023, 12, 31)
        assert period.end_date == date(2024, 3, 2)

    def test_includes_income(self):
        """Test that income transactions count towards the period."""
        items = [
            expense(date(2024, 1, 5), "Coffee Shop", 4.50),
            income(date(2024, 2, 1), "Salary", 100.0),
        ]

        assert statement_period(items).end == "Feb 1, 2024"

    def test_empty(self):
        """Test the N/A sentinel for an empty list."""
        period = statement_period([])

        assert period.start == "N/A"
        assert period.end == "N/A"
        assert period.start_date is None


class TestTotals:
    """Tests for compute_totals."""

    def test_totals(self, transactions):
        """Test income, expenses and net flow."""
        totals = compute_totals(transactions)

        assert totals.total_income == pytest.approx(2000.00)
        assert totals.total_expenses == pytest.approx(130.00)
        assert totals.net_flow == pytest.approx(1870.00)

    def test_empty(self):
        """Test totals of an empty list."""
        totals = compute_totals([])
        assert (totals.total_income, totals.total_expenses, totals.net_flow) == (0.0, 0.0, 0.0)


class TestGroupByDay:
    """Tests for group_by_day."""

    def test_groups_newest_first(self):
        """Test grouping per day with per-day totals."""
        items = [
            expense(date(2024, 1, 5), "Coffee Shop", 4.50, index=0),
            income(date(2024, 1, 5), "Refund", 2.00, index=1),
            expense(date(2024, 1, 6), "Bakery", 3.00, index=2),
            expense(date(2024, 1, 5), "Kiosk", 1.50, index=3),
        ]

        groups = group_by_day(items)

        assert [g.date for g in groups] == [date(2024, 1, 6), date(2024, 1, 5)]
        assert [t.description for t in groups[1].transactions] == [
            "Coffee Shop",
            "Refund",
            "Kiosk",
        ]
        assert groups[1].total_expenses == pytest.approx(6.00)
        assert groups[1].total_income == pytest.approx(2.00)

    def test_empty(self):
        """Test that no transactions give no groups."""
        assert group_by_day([]) == []


class TestFormatting:
    """Tests for date label helpers."""

    def test_format_period_date(self):
        """Test the human-readable period date."""
        assert format_period_date(date(2024, 1, 5)) == "Jan 5, 2024"

    def test_bucket_label(self):
        """Test labels for each granularity."""
        assert bucket_label("2024-01-05", Granularity.DAILY) == "Jan 05"
        assert bucket_label("2024-01", Granularity.MONTHLY) == "Jan 2024"
        assert bucket_label("2024", Granularity.YEARLY) == "2024"
