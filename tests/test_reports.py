"""Tests for monthly aggregation and display formatting."""

import pytest
from datetime import date
from decimal import Decimal

from paisapal.models.ledger import Transaction
from paisapal.reports import (
    AggregationCache,
    budget_percent,
    category_spend,
    format_currency,
    format_display_date,
    month_label,
    month_options,
    month_totals,
    mood_spend,
    summarize_month,
    transactions_for_month,
)


CATEGORIES = ["Rent", "Groceries", "Transport"]
MOODS = ["Happy", "Stressed", "Neutral"]


def tx(day, type_, amount, category="Groceries", mood="Happy") -> Transaction:
    return Transaction(date=day, type=type_, amount=Decimal(amount), category=category, mood=mood)


@pytest.fixture
def log():
    return [
        tx(date(2025, 3, 1), "Income", "2000", category="Salary"),
        tx(date(2025, 3, 2), "Expense", "900", category="Rent", mood="Stressed"),
        tx(date(2025, 3, 5), "Expense", "45.50"),
        tx(date(2025, 3, 9), "Expense", "12.25", mood="Neutral"),
        tx(date(2025, 4, 1), "Expense", "900", category="Rent"),
        tx(date(2025, 2, 28), "Income", "50", category="Gift"),
    ]


class TestMonthFiltering:
    """Tests for selecting a month's transactions."""

    def test_transactions_for_month(self, log):
        march = transactions_for_month(log, "2025-03")
        assert len(march) == 4
        assert all(t.date.month == 3 for t in march)

    def test_empty_month(self, log):
        assert transactions_for_month(log, "2024-01") == []


class TestTotals:
    """Tests for income, expense and net."""

    def test_month_totals(self, log):
        totals = month_totals(transactions_for_month(log, "2025-03"))
        assert totals.income == Decimal("2000")
        assert totals.expenses == Decimal("957.75")
        assert totals.net == totals.income - totals.expenses

    def test_empty_totals_are_zero(self):
        totals = month_totals([])
        assert totals.income == totals.expenses == totals.net == Decimal("0")


class TestBreakdowns:
    """Tests for per-category and per-mood spend."""

    def test_category_spend_counts_expenses_only(self, log):
        spend = category_spend(transactions_for_month(log, "2025-03"), CATEGORIES)
        assert spend["Rent"] == Decimal("900")
        assert spend["Groceries"] == Decimal("57.75")
        assert spend["Transport"] == Decimal("0")
        assert "Salary" not in spend

    def test_category_spend_includes_unlisted_categories(self):
        """Test that spend on a category not in the list is still reported."""
        spend = category_spend([tx(date(2025, 3, 1), "Expense", "5", category="Pets")], CATEGORIES)
        assert spend["Pets"] == Decimal("5")

    def test_mood_spend(self, log):
        spend = mood_spend(transactions_for_month(log, "2025-03"), MOODS)
        assert spend["Stressed"] == Decimal("900")
        assert spend["Happy"] == Decimal("45.50")
        assert spend["Neutral"] == Decimal("12.25")

    def test_mood_spend_seeds_known_moods(self):
        assert mood_spend([], MOODS) == {m: Decimal("0") for m in MOODS}


class TestBudgets:
    """Tests for budget percent and budget lines."""

    @pytest.mark.parametrize("spent,limit,expected", [
        ("50", "200", 25),
        ("250", "200", 100),
        ("0", "0", 0),
        ("0.4", "0", 40),
        ("5", "0", 100),
        ("1", "3", 33),
        ("2", "3", 67),
    ])
    def test_budget_percent(self, spent, limit, expected):
        """Test rounding, the zero-limit divisor and the 100 cap."""
        assert budget_percent(Decimal(spent), Decimal(limit)) == expected

    def test_budget_percent_huge_amounts(self):
        """Test that very large spend or limits do not overflow the rounding."""
        assert budget_percent(Decimal("1E+30"), Decimal("100")) == 100
        assert budget_percent(Decimal("5"), Decimal("1E+30")) == 0
        assert budget_percent(Decimal("1E+30"), Decimal("0")) == 100

    def test_summarize_month_huge_expense(self, log):
        log.append(tx(date(2025, 3, 10), "Expense", "1E+30", category="Transport"))
        budgets = {"2025-03": {"Transport": Decimal("50")}}
        summary = summarize_month(log, "2025-03", CATEGORIES, MOODS, budgets)

        transport = summary.budget_lines[2]
        assert transport.spent == Decimal("1E+30")
        assert transport.percent == 100
        assert transport.over_budget

    def test_summarize_month(self, log):
        budgets = {"2025-03": {"Rent": Decimal("800"), "Groceries": Decimal("100")}}
        summary = summarize_month(log, "2025-03", CATEGORIES, MOODS, budgets)

        assert summary.month == "2025-03"
        assert summary.transaction_count == 4
        assert [line.category for line in summary.budget_lines] == CATEGORIES

        rent, groceries, transport = summary.budget_lines
        assert rent.over_budget
        assert rent.percent == 100
        assert groceries.percent == 58
        assert not groceries.over_budget
        assert transport.limit == Decimal("0")

    def test_budgets_are_per_month(self, log):
        """Test that another month's budgets do not apply."""
        budgets = {"2025-02": {"Rent": Decimal("800")}}
        summary = summarize_month(log, "2025-03", CATEGORIES, MOODS, budgets)
        assert summary.budget_lines[0].limit == Decimal("0")


class TestAggregationCache:
    """Tests for the summary cache."""

    def test_hit_and_miss(self, log):
        cache = AggregationCache()
        summary = summarize_month(log, "2025-03", CATEGORIES, MOODS, {})

        assert cache.get(1, "2025-03") is None
        cache.put(1, "2025-03", summary)
        assert cache.get(1, "2025-03") is summary
        assert cache.hits == 1
        assert cache.misses == 1

    def test_new_version_evicts_old(self, log):
        cache = AggregationCache()
        summary = summarize_month(log, "2025-03", CATEGORIES, MOODS, {})
        cache.put(1, "2025-03", summary)
        cache.put(2, "2025-04", summary)

        assert cache.get(1, "2025-03") is None
        assert cache.get(2, "2025-04") is summary

    def test_max_entries(self, log):
        cache = AggregationCache(max_entries=2)
        summary = summarize_month(log, "2025-03", CATEGORIES, MOODS, {})
        for month in ["2025-01", "2025-02", "2025-03"]:
            cache.put(1, month, summary)

        assert cache.get(1, "2025-01") is None
        assert cache.get(1, "2025-03") is summary


class TestFormatting:
    """Tests for display helpers."""

    def test_format_currency(self):
        assert format_currency(Decimal("1234.5")) == "£1,234.50"
        assert format_currency(Decimal("-12")) == "-£12.00"
        assert format_currency(None) == "£0.00"
        assert format_currency(Decimal("3"), symbol="$") == "$3.00"

    def test_format_display_date(self):
        assert format_display_date(date(2025, 3, 4)) == "04/03/2025"

    def test_month_label(self):
        assert month_label("2025-03") == "March 2025"

    def test_month_options_window(self):
        """Test six months either side of today, oldest first."""
        options = month_options(date(2025, 1, 31), window=6)
        assert len(options) == 13
        assert options[0].key == "2024-07"
        assert options[6].key == "2025-01"
        assert options[-1].key == "2025-07"
        assert options[6].label == "January 2025"
