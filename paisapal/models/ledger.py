"""
Core Data Models for PaisaPal

These models define the schemas for everything the app stores or passes
between layers. They are designed to:
1. Coerce messy input (form strings, old snapshots) into safe values
2. Keep amounts exact (Decimal) and unsigned
3. Serialize to the camelCase snapshot format kept on the device

DESIGN DECISION: Stored records (Transaction, SavedItem, Snapshot) are
frozen. Nothing edits a record in place; updates produce copies. User input
arrives as a Draft first and only becomes a record after validation.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


DEFAULT_CATEGORIES = ["Rent", "Groceries", "Transport", "Entertainment", "Bills", "Savings"]
DEFAULT_MOOD = "Neutral"
MONTH_KEY_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

ZERO = Decimal("0")


def new_record_id() -> str:
    """Generate an opaque, process-unique record identifier."""
    return str(uuid4())


def month_key(day: date) -> str:
    """Return the ``YYYY-MM`` budgeting period a day falls in."""
    return f"{day.year:04d}-{day.month:02d}"


def parse_month_key(key: str) -> date:
    """
    Parse a ``YYYY-MM`` key into the first day of that month.

    Raises:
        ValueError: If the key is not a valid month key
    """
    if not isinstance(key, str) or not re.match(MONTH_KEY_PATTERN, key):
        raise ValueError(f"Invalid month key: {key!r}. Expected YYYY-MM")
    year, month = key.split("-")
    return date(int(year), int(month), 1)


def coerce_amount(value: Any) -> Decimal:
    """
    Turn an absent or garbage amount into a Decimal.

    Anything that is not a finite number becomes zero instead of failing.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money movement. Values match the stored snapshot."""
    INCOME = "Income"
    EXPENSE = "Expense"


class RepeatInterval(str, Enum):
    """
    How often a saved item auto-posts.

    NONE means the item is only used for quick-add.
    """
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def coerce(cls, value: Any) -> "RepeatInterval":
        """Map stored or submitted values onto an interval; unknown means NONE."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.NONE


# =============================================================================
# STORED RECORDS
# =============================================================================

class LedgerRecord(BaseModel):
    """Base for records persisted in the snapshot (camelCase on disk)."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )


class Transaction(LedgerRecord):
    """
    A single income or expense entry.

    CRITICAL: amount is always stored unsigned. Whether it adds or subtracts
    is decided by ``type`` at display and aggregation time only.
    """

    id: str = Field(
        default_factory=new_record_id,
        description="Opaque transaction ID"
    )
    date: date
    type: TransactionType
    category: str = Field(
        default="",
        description="Category name (not enforced against the category list)"
    )
    description: str = ""
    amount: Decimal = Field(
        default=ZERO,
        ge=0,
        description="Amount as entered, never signed"
    )
    mood: str = DEFAULT_MOOD
    saved_id: Optional[str] = Field(
        default=None,
        description="ID of the saved item this was posted from"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount_value(cls, v: Any) -> Decimal:
        return coerce_amount(v)

    @field_validator('description', 'category', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('mood', mode='before')
    @classmethod
    def default_mood(cls, v: Any) -> Any:
        return v or DEFAULT_MOOD

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the display sign applied (expenses negative)."""
        return -self.amount if self.is_expense else self.amount


class SavedItem(LedgerRecord):
    """
    A template for a recurring or quick-add expense.

    next_due is only meaningful when repeat is not NONE. anchor_day pins a
    monthly schedule to a day of month so that short months clamp without
    drifting the following occurrences.
    """

    id: str = Field(
        default_factory=new_record_id,
        description="Opaque saved item ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Shown to the user and used as the transaction description"
    )
    amount: Decimal = Field(
        default=ZERO,
        ge=0,
    )
    category: str = ""
    mood: str = DEFAULT_MOOD
    repeat: RepeatInterval = RepeatInterval.NONE
    next_due: Optional[date] = Field(
        default=None,
        description="Next day an occurrence is due"
    )
    anchor_day: Optional[int] = Field(
        default=None,
        ge=1,
        le=31,
        description="Day of month a monthly schedule is pinned to"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount_value(cls, v: Any) -> Decimal:
        return coerce_amount(v)

    @field_validator('category', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator('mood', mode='before')
    @classmethod
    def default_mood(cls, v: Any) -> Any:
        return v or DEFAULT_MOOD

    @field_validator('repeat', mode='before')
    @classmethod
    def coerce_repeat(cls, v: Any) -> RepeatInterval:
        return RepeatInterval.coerce(v)

    @property
    def is_recurring(self) -> bool:
        return self.repeat != RepeatInterval.NONE


BudgetMap = dict[str, dict[str, Decimal]]


class Snapshot(LedgerRecord):
    """
    The full persisted application state.

    Loaded once at startup and written back whole after every change.
    """

    categories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CATEGORIES),
        description="Ordered category names"
    )
    selected_month: str = Field(
        default_factory=lambda: month_key(date.today()),
        pattern=MONTH_KEY_PATTERN,
        description="Month the user is looking at"
    )
    budgets: BudgetMap = Field(
        default_factory=dict,
        description="month key -> category -> limit"
    )
    transactions: list[Transaction] = Field(default_factory=list)
    saved_items: list[SavedItem] = Field(default_factory=list)

    def budget_for(self, month: str, category: str) -> Decimal:
        """Budget limit for a category in a month; absent means zero."""
        return self.budgets.get(month, {}).get(category, ZERO)


# =============================================================================
# DRAFTS - unverified user input
# =============================================================================

class TransactionDraft(BaseModel):
    """
    A transaction as typed into the form.

    CRITICAL: This is PROPOSED data. It must pass validation before a
    Transaction is created from it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    booked_on: Optional[date] = Field(
        default=None,
        description="Transaction date; today when left empty"
    )
    type: Optional[str] = TransactionType.EXPENSE.value
    category: Optional[str] = None
    description: Optional[str] = None
    amount: Decimal = ZERO
    mood: Optional[str] = None

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount_value(cls, v: Any) -> Decimal:
        return coerce_amount(v)

    @field_validator('booked_on', mode='before')
    @classmethod
    def empty_date_to_none(cls, v: Any) -> Any:
        return v or None


class SavedItemDraft(BaseModel):
    """A saved item as typed into the form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    amount: Decimal = ZERO
    category: Optional[str] = None
    mood: Optional[str] = None
    repeat: RepeatInterval = RepeatInterval.NONE

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_amount_value(cls, v: Any) -> Decimal:
        return coerce_amount(v)

    @field_validator('repeat', mode='before')
    @classmethod
    def coerce_repeat(cls, v: Any) -> RepeatInterval:
        return RepeatInterval.coerce(v)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of checking a draft or a category name."""

    subject: str = Field(
        ...,
        description="What was validated (e.g., 'transaction', 'saved_item')"
    )
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def warnings(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "warning"]


# =============================================================================
# RECURRENCE MODELS
# =============================================================================

class RecurrenceAnomaly(BaseModel):
    """
    Reported when a saved item had more past occurrences than the backfill cap.

    The item is fast-forwarded past the current date; ``skipped`` occurrences
    were never materialized.
    """

    saved_id: str
    name: str
    repeat: RepeatInterval
    original_next_due: date
    emitted: int = Field(ge=0)
    skipped: int = Field(ge=0)
    resumed_at: date = Field(
        ...,
        description="next_due after the fast-forward"
    )


class MaterializationResult(BaseModel):
    """Output of one recurrence run."""

    new_transactions: list[Transaction] = Field(default_factory=list)
    saved_items: list[SavedItem] = Field(default_factory=list)
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="The incoming log with new_transactions appended"
    )
    anomalies: list[RecurrenceAnomaly] = Field(default_factory=list)
    items_changed: bool = Field(
        default=False,
        description="True when any saved item was initialized or advanced"
    )

    @property
    def changed(self) -> bool:
        return bool(self.new_transactions) or self.items_changed
