"""Monthly reporting package."""

from paisapal.reports.aggregation import (
    AggregationCache,
    budget_lines,
    budget_percent,
    category_spend,
    month_totals,
    mood_spend,
    summarize_month,
    transactions_for_month,
)
from paisapal.reports.formatting import (
    format_currency,
    format_display_date,
    month_label,
    month_options,
)

__all__ = [
    "AggregationCache",
    "budget_lines",
    "budget_percent",
    "category_spend",
    "month_totals",
    "mood_spend",
    "summarize_month",
    "transactions_for_month",
    "format_currency",
    "format_display_date",
    "month_label",
    "month_options",
]
