"""
Monthly Aggregation

DESIGN DECISION: Aggregation is a set of pure functions over the
transaction log. Nothing is stored; every figure on the dashboard is
recomputed from transactions when asked for.

Conventions:
- Only transactions whose date falls in the month count
- Amounts are unsigned; type decides income vs expense
- Category and mood breakdowns count expenses only
- A category or mood with no spend reports zero, never a missing key
- An empty mood counts as the default mood

AggregationCache memoizes MonthSummary per (version, month). The session
bumps the version whenever the log or the budgets change, so a cached
summary is never served for stale data.
"""

from collections import OrderedDict
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from paisapal.models.ledger import (
    DEFAULT_MOOD,
    BudgetMap,
    Transaction,
    TransactionType,
    month_key,
)
from paisapal.models.report import BudgetLine, MonthSummary, MonthTotals


ZERO = Decimal("0")


def transactions_for_month(
    transactions: Iterable[Transaction],
    month: str,
) -> list[Transaction]:
    """Transactions dated inside the given ``YYYY-MM`` month, in log order."""
    return [t for t in transactions if month_key(t.date) == month]


def month_totals(month_transactions: Iterable[Transaction]) -> MonthTotals:
    """Sum income and expenses; net is derived."""
    income = ZERO
    expenses = ZERO
    for t in month_transactions:
        if t.type == TransactionType.INCOME:
            income += t.amount
        elif t.type == TransactionType.EXPENSE:
            expenses += t.amount
    return MonthTotals(income=income, expenses=expenses)


def category_spend(
    month_transactions: Iterable[Transaction],
    categories: Iterable[str] = (),
) -> dict[str, Decimal]:
    """
    Expense total per category.

    Every known category is present (zero if unused). Categories found on
    transactions but no longer in the list are included too.
    """
    spend: dict[str, Decimal] = {c: ZERO for c in categories}
    for t in month_transactions:
        if t.is_expense:
            spend[t.category] = spend.get(t.category, ZERO) + t.amount
    return spend


def mood_spend(
    month_transactions: Iterable[Transaction],
    moods: Iterable[str] = (),
) -> dict[str, Decimal]:
    """Expense total per mood, seeded with zero for every known mood."""
    spend: dict[str, Decimal] = {m: ZERO for m in moods}
    for t in month_transactions:
        if t.is_expense:
            mood = t.mood or DEFAULT_MOOD
            spend[mood] = spend.get(mood, ZERO) + t.amount
    return spend


def budget_percent(spent: Decimal, limit: Decimal) -> int:
    """Share of the limit used, capped at 100. A zero limit divides by one."""
    divisor = limit if limit else Decimal("1")
    if spent >= divisor:
        return 100
    percent = int((spent * 100 / divisor).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(0, min(100, percent))


def budget_lines(
    categories: Sequence[str],
    spend: dict[str, Decimal],
    limits: dict[str, Decimal],
) -> list[BudgetLine]:
    """Budget versus spend for every category in list order."""
    lines = []
    for category in categories:
        spent = spend.get(category, ZERO)
        limit = limits.get(category, ZERO)
        lines.append(BudgetLine(
            category=category,
            limit=limit,
            spent=spent,
            percent=budget_percent(spent, limit),
        ))
    return lines


def summarize_month(
    transactions: Iterable[Transaction],
    month: str,
    categories: Sequence[str],
    moods: Sequence[str],
    budgets: BudgetMap,
) -> MonthSummary:
    """Compute everything the dashboard shows for one month."""
    in_month = transactions_for_month(transactions, month)
    spend = category_spend(in_month, categories)
    return MonthSummary(
        month=month,
        transaction_count=len(in_month),
        totals=month_totals(in_month),
        category_spend=spend,
        mood_spend=mood_spend(in_month, moods),
        budget_lines=budget_lines(categories, spend, budgets.get(month, {})),
    )


class AggregationCache:
    """
    Memoizes month summaries keyed by (version, month).

    Entries for older versions are evicted when a newer version is stored.
    """

    def __init__(self, max_entries: int = 24):
        self._entries: "OrderedDict[tuple[int, str], MonthSummary]" = OrderedDict()
        self._max_entries = max_entries
        self.hits = 0
        self.misses = 0

    def get(self, version: int, month: str) -> Optional[MonthSummary]:
        summary = self._entries.get((version, month))
        if summary is None:
            self.misses += 1
            return None
        self._entries.move_to_end((version, month))
        self.hits += 1
        return summary

    def put(self, version: int, month: str, summary: MonthSummary) -> None:
        for key in [k for k in self._entries if k[0] != version]:
            del self._entries[key]
        self._entries[(version, month)] = summary
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()
