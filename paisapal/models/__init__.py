"""
Data Models Package

This package contains all Pydantic models used in PaisaPal.
All data flowing through the system must conform to these schemas.
"""

from paisapal.models.ledger import (
    DEFAULT_CATEGORIES,
    DEFAULT_MOOD,
    BudgetMap,
    MaterializationResult,
    RecurrenceAnomaly,
    RepeatInterval,
    SavedItem,
    SavedItemDraft,
    Snapshot,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    coerce_amount,
    month_key,
    new_record_id,
    parse_month_key,
)
from paisapal.models.report import (
    BudgetLine,
    MonthOption,
    MonthSummary,
    MonthTotals,
)
from paisapal.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Ledger models
    "DEFAULT_CATEGORIES",
    "DEFAULT_MOOD",
    "BudgetMap",
    "MaterializationResult",
    "RecurrenceAnomaly",
    "RepeatInterval",
    "SavedItem",
    "SavedItemDraft",
    "Snapshot",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "coerce_amount",
    "month_key",
    "new_record_id",
    "parse_month_key",
    # Report models
    "BudgetLine",
    "MonthOption",
    "MonthSummary",
    "MonthTotals",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
