"""
Tests for PaisaPal

Test strategy:
1. Unit tests for individual components (models, engine, validators)
2. Integration tests for the session flow (with in-memory storage)
3. No real files outside pytest's tmp_path
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from paisapal.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)
from paisapal.models.ledger import (
    DEFAULT_CATEGORIES,
    RecurrenceAnomaly,
    RepeatInterval,
    SavedItem,
    Snapshot,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    coerce_amount,
    month_key,
    parse_month_key,
)
from paisapal.models.report import BudgetLine, MonthTotals


class TestLedgerModels:
    """Tests for the stored record models."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        tx = Transaction(
            date=date(2025, 3, 4),
            type=TransactionType.EXPENSE,
            category="Groceries",
            description="Weekly shop",
            amount=Decimal("42.10"),
            mood="Happy",
        )
        assert tx.category == "Groceries"
        assert tx.amount == Decimal("42.10")
        assert tx.saved_id is None
        assert tx.id

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from text fields."""
        tx = Transaction(date=date(2025, 3, 4), type="Income", category="  Salary  ")
        assert tx.category == "Salary"

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            Transaction(date=date(2025, 3, 4), type="Expense", amount=Decimal("-5"))

    def test_transaction_garbage_amount_becomes_zero(self):
        """Test that a non-numeric amount is coerced to zero."""
        tx = Transaction(date=date(2025, 3, 4), type="Expense", amount="abc")
        assert tx.amount == Decimal("0")

    def test_transaction_empty_mood_defaults_to_neutral(self):
        """Test that a missing mood becomes Neutral."""
        tx = Transaction(date=date(2025, 3, 4), type="Expense", mood="")
        assert tx.mood == "Neutral"

    def test_transaction_rejects_unknown_type(self):
        """Test that type must be Income or Expense."""
        with pytest.raises(ValueError):
            Transaction(date=date(2025, 3, 4), type="Transfer")

    def test_signed_amount(self):
        """Test that expenses display negative and income positive."""
        expense = Transaction(date=date(2025, 3, 4), type="Expense", amount=10)
        income = Transaction(date=date(2025, 3, 4), type="Income", amount=10)
        assert expense.signed_amount == Decimal("-10")
        assert income.signed_amount == Decimal("10")

    def test_transaction_dumps_camel_case(self):
        """Test that the stored form uses camelCase keys."""
        tx = Transaction(date=date(2025, 3, 4), type="Expense", amount=5, saved_id="s1")
        data = tx.model_dump(mode="json", by_alias=True)
        assert data["savedId"] == "s1"
        assert data["date"] == "2025-03-04"
        assert "saved_id" not in data

    def test_transaction_reads_camel_case(self):
        """Test that stored camelCase records validate."""
        tx = Transaction.model_validate({
            "id": "t1",
            "date": "2025-03-04",
            "type": "Expense",
            "amount": 12.5,
            "savedId": "s1",
        })
        assert tx.saved_id == "s1"
        assert tx.amount == Decimal("12.5")

    def test_transaction_is_immutable(self):
        """Test that records cannot be mutated in place."""
        tx = Transaction(date=date(2025, 3, 4), type="Expense")
        with pytest.raises(ValueError):
            tx.category = "Rent"

    def test_saved_item_requires_name(self):
        """Test that a saved item needs a name."""
        with pytest.raises(ValueError):
            SavedItem(name="", amount=5)

    def test_saved_item_repeat_coercion(self):
        """Test that repeat values are normalized and unknown ones become none."""
        assert SavedItem(name="a", repeat="Weekly").repeat == RepeatInterval.WEEKLY
        assert SavedItem(name="a", repeat="fortnightly").repeat == RepeatInterval.NONE
        assert SavedItem(name="a", repeat=None).repeat == RepeatInterval.NONE

    def test_saved_item_is_recurring(self):
        """Test is_recurring for each interval."""
        assert not SavedItem(name="a").is_recurring
        assert SavedItem(name="a", repeat="daily").is_recurring

    def test_saved_item_anchor_day_bounds(self):
        """Test that anchor_day must be a day of month."""
        with pytest.raises(ValueError):
            SavedItem(name="a", repeat="monthly", anchor_day=32)


class TestSnapshot:
    """Tests for the Snapshot model."""

    def test_defaults(self):
        """Test a fresh snapshot."""
        snapshot = Snapshot()
        assert snapshot.categories == DEFAULT_CATEGORIES
        assert snapshot.selected_month == month_key(date.today())
        assert snapshot.transactions == []
        assert snapshot.saved_items == []

    def test_budget_for_absent_is_zero(self):
        """Test that a missing budget reads as zero."""
        snapshot = Snapshot(budgets={"2025-03": {"Rent": Decimal("900")}})
        assert snapshot.budget_for("2025-03", "Rent") == Decimal("900")
        assert snapshot.budget_for("2025-03", "Groceries") == Decimal("0")
        assert snapshot.budget_for("2025-04", "Rent") == Decimal("0")

    def test_selected_month_pattern(self):
        """Test that selected_month must be YYYY-MM."""
        with pytest.raises(ValueError):
            Snapshot(selected_month="2025-13")


class TestHelpers:
    """Tests for module-level helpers."""

    def test_month_key(self):
        assert month_key(date(2025, 1, 9)) == "2025-01"

    def test_parse_month_key(self):
        assert parse_month_key("2024-02") == date(2024, 2, 1)

    @pytest.mark.parametrize("key", ["2024-2", "2024-00", "24-02", "", None])
    def test_parse_month_key_rejects_invalid(self, key):
        """Test that malformed keys raise ValueError."""
        with pytest.raises(ValueError):
            parse_month_key(key)

    @pytest.mark.parametrize("value,expected", [
        (None, Decimal("0")),
        ("", Decimal("0")),
        ("12.50", Decimal("12.50")),
        (7, Decimal("7")),
        ("NaN", Decimal("0")),
        (True, Decimal("0")),
    ])
    def test_coerce_amount(self, value, expected):
        """Test amount coercion of absent and garbage input."""
        assert coerce_amount(value) == expected

    def test_draft_empty_date_is_none(self):
        """Test that an empty date on a draft means today."""
        draft = TransactionDraft(booked_on="", amount="3")
        assert draft.booked_on is None
        assert draft.amount == Decimal("3")


class TestReportModels:
    """Tests for report models."""

    def test_month_totals_net(self):
        """Test that net is income minus expenses."""
        totals = MonthTotals(income=Decimal("100"), expenses=Decimal("30.50"))
        assert totals.net == Decimal("69.50")

    def test_budget_line_over_budget(self):
        """Test over-budget and remaining."""
        line = BudgetLine(category="Rent", limit=Decimal("100"), spent=Decimal("120"), percent=100)
        assert line.over_budget
        assert line.remaining == Decimal("-20")


class TestActivityModels:
    """Tests for activity models."""

    def test_activity_event_creation(self):
        """Test ActivityEvent creation."""
        event = ActivityEvent(
            event_type=ActivityEventType.CATEGORY_ADDED,
            description="Category 'Pets' added",
        )
        assert event.event_type == ActivityEventType.CATEGORY_ADDED
        assert event.severity == ActivitySeverity.INFO
        assert event.event_id is not None

    def test_activity_event_to_log_dict(self):
        """Test conversion to log dict."""
        session_id = uuid4()
        event = ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_LOADED,
            description="Loaded",
            session_id=session_id,
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "snapshot_loaded"
        assert log_dict["session_id"] == str(session_id)

    def test_long_description_is_truncated(self):
        """Test that descriptions are capped instead of failing."""
        event = ActivityEvent(
            event_type=ActivityEventType.CATEGORY_ADDED,
            description="x" * 600,
        )
        assert len(event.description) == 500

    def test_builder_transaction_added(self):
        """Test the transaction_added builder and its quick add variant."""
        tx = Transaction(date=date(2025, 3, 4), type="Expense", category="Rent", amount=5)
        event = ActivityEventBuilder.transaction_added(tx, session_id=None)
        quick = ActivityEventBuilder.transaction_added(tx, session_id=None, quick_add=True)
        assert event.event_type == ActivityEventType.TRANSACTION_ADDED
        assert quick.event_type == ActivityEventType.QUICK_ADDED
        assert event.entity_id == tx.id
        assert event.is_user_action

    def test_builder_recurrence_capped(self):
        """Test that capped backfill is a warning with the anomaly attached."""
        anomaly = RecurrenceAnomaly(
            saved_id="s1",
            name="Coffee",
            repeat=RepeatInterval.DAILY,
            original_next_due=date(2000, 1, 1),
            emitted=10,
            skipped=90,
            resumed_at=date(2000, 4, 10),
        )
        event = ActivityEventBuilder.recurrence_capped(anomaly, session_id=None)
        assert event.severity == ActivitySeverity.WARNING
        assert event.details["skipped"] == 90
        assert event.details["resumed_at"] == "2000-04-10"


class TestValidationResult:
    """Tests for validation result."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            subject="transaction",
            issues=[
                ValidationIssue(field="category", issue_type="missing", message="Category is required"),
                ValidationIssue(
                    field="category",
                    issue_type="unknown",
                    message="Unknown category",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors
        assert not result.is_valid
        assert result.error_count == 1
        assert result.warnings == ["Unknown category"]

    def test_validation_result_warnings_only(self):
        """Test result with only warnings is valid."""
        result = ValidationResult(
            subject="transaction",
            issues=[
                ValidationIssue(field="category", issue_type="unknown", message="x", severity="warning"),
            ],
        )
        assert result.is_valid
        assert result.error_count == 0
