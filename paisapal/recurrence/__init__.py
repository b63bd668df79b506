"""Recurring saved item materialization."""

from paisapal.recurrence.engine import (
    RecurrenceEngine,
    add_months,
    first_occurrence_after,
    next_occurrence,
    transaction_from_saved_item,
)

__all__ = [
    "RecurrenceEngine",
    "add_months",
    "first_occurrence_after",
    "next_occurrence",
    "transaction_from_saved_item",
]
