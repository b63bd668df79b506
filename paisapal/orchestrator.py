"""
Budget Book Orchestrator

This module ties the components together and defines the session flow:
1. Startup (load snapshot → materialize recurring items → persist)
2. User intents (add, delete, budget, category, saved item, quick add,
   month selection, export)
3. Read-only views (month summary, month options)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is stored from input that failed validation
- Every change is persisted immediately as a whole snapshot
- A failed write never loses the in-memory state; it is logged and retried
  on the next change
- Every step is logged

Recurring items are materialized once, when the session starts. Creating
a recurring saved item sets next_due to today but posts nothing until the
next start.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, Optional

from paisapal.activity import ActivityLogger
from paisapal.config import get_settings
from paisapal.export import export_transactions_csv
from paisapal.models.activity import ActivityEventType
from paisapal.models.ledger import (
    DEFAULT_MOOD,
    BudgetMap,
    MaterializationResult,
    SavedItem,
    SavedItemDraft,
    Snapshot,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationResult,
    coerce_amount,
    month_key,
)
from paisapal.models.report import MonthOption, MonthSummary
from paisapal.recurrence import RecurrenceEngine, transaction_from_saved_item
from paisapal.reports import AggregationCache, month_options, summarize_month, transactions_for_month
from paisapal.services.storage import (
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    SnapshotCorruptError,
    SnapshotStorageInterface,
    StorageError,
)
from paisapal.validation import InputValidator


class BudgetBook:
    """
    One running session over a stored snapshot.

    All state lives in an immutable Snapshot that is replaced on every
    change. Views read from the current snapshot; intents build a new one
    and persist it.
    """

    def __init__(
        self,
        storage: SnapshotStorageInterface,
        engine: Optional[RecurrenceEngine] = None,
        validator: Optional[InputValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
        today: Callable[[], date] = date.today,
        moods: Optional[Iterable[str]] = None,
        sanitize_csv: Optional[bool] = None,
    ):
        """
        Args:
            storage: Where the snapshot is read from and written to
            engine: Recurrence engine; built from settings when omitted
            validator: Input validator
            activity_logger: Session logger; a fresh session when omitted
            today: Clock used for materialization and default dates
            moods: Mood tags offered to the user; defaults to settings
            sanitize_csv: Strip commas from every CSV text field, not just
                          the description; defaults to settings
        """
        app_settings = get_settings().app
        self._storage = storage
        self._engine = engine or RecurrenceEngine()
        self._validator = validator or InputValidator()
        self._activity_logger = activity_logger or ActivityLogger()
        self._today = today
        self._moods = list(moods) if moods is not None else app_settings.moods_list
        self._sanitize_csv = (
            app_settings.csv_sanitize_all_fields if sanitize_csv is None else sanitize_csv
        )
        self._month_window = app_settings.month_window

        self._snapshot = self._default_snapshot()
        self._version = 0
        self._cache = AggregationCache()
        self.last_save_error: Optional[str] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def version(self) -> int:
        """Bumped on every change; summaries are cached per version."""
        return self._version

    @property
    def categories(self) -> list[str]:
        return list(self._snapshot.categories)

    @property
    def moods(self) -> list[str]:
        return list(self._moods)

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._snapshot.transactions)

    @property
    def saved_items(self) -> list[SavedItem]:
        return list(self._snapshot.saved_items)

    @property
    def selected_month(self) -> str:
        return self._snapshot.selected_month

    @property
    def budgets(self) -> BudgetMap:
        return {m: dict(limits) for m, limits in self._snapshot.budgets.items()}

    @property
    def activity_logger(self) -> ActivityLogger:
        return self._activity_logger

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    def start(self) -> MaterializationResult:
        """
        Load the stored snapshot and post every recurring occurrence due
        up to today.

        An unreadable snapshot is replaced by defaults. Calling start again
        reloads from storage; materialization posts nothing twice.

        Returns:
            The materialization result (empty when nothing was due)
        """
        self._snapshot = self._load_snapshot()
        self._touch()

        today = self._today()
        result = self._engine.materialize(
            today,
            self._snapshot.saved_items,
            self._snapshot.transactions,
        )

        for anomaly in result.anomalies:
            self._activity_logger.log_recurrence_capped(anomaly)

        if result.changed:
            self._replace(
                transactions=result.transactions,
                saved_items=result.saved_items,
            )
            self._activity_logger.log_recurrence_materialized(
                run_date=today,
                created=len(result.new_transactions),
            )

        return result

    def _load_snapshot(self) -> Snapshot:
        try:
            snapshot = self._storage.load()
        except SnapshotCorruptError as e:
            self._activity_logger.log_snapshot_reset(str(e))
            return self._default_snapshot()
        except StorageError as e:
            self._activity_logger.log_error(
                error_type="storage_read_failed",
                error_message=str(e),
            )
            self._activity_logger.log_snapshot_reset(str(e))
            return self._default_snapshot()

        if snapshot is None:
            return self._default_snapshot()

        self._activity_logger.log_snapshot_loaded(
            transaction_count=len(snapshot.transactions),
            saved_item_count=len(snapshot.saved_items),
        )
        return snapshot

    def _default_snapshot(self) -> Snapshot:
        return Snapshot(selected_month=month_key(self._today()))

    # ------------------------------------------------------------------
    # Intents
    # ------------------------------------------------------------------

    def add_transaction(self, draft: TransactionDraft) -> Transaction:
        """
        Record a transaction typed in by the user.

        The new transaction goes to the front of the log. An empty date
        means today.

        Raises:
            InputRejectedError: If a required field is missing
        """
        result = self._validator.validate_transaction(draft, self._snapshot.categories)
        self._reject_if_invalid(result)

        transaction = Transaction(
            date=draft.booked_on or self._today(),
            type=TransactionType(draft.type),
            category=draft.category,
            description=draft.description or "",
            amount=draft.amount,
            mood=draft.mood or DEFAULT_MOOD,
        )
        self._replace(transactions=[transaction, *self._snapshot.transactions])
        self._activity_logger.log_transaction_added(transaction)
        return transaction

    def delete_transaction(self, transaction_id: str) -> bool:
        """
        Remove a transaction by id.

        Returns:
            False if no transaction had that id (nothing changes)
        """
        remaining = [t for t in self._snapshot.transactions if t.id != transaction_id]
        found = len(remaining) != len(self._snapshot.transactions)
        if found:
            self._replace(transactions=remaining)
        self._activity_logger.log_transaction_deleted(transaction_id, found)
        return found

    def set_budget(self, category: str, value: Any, month: Optional[str] = None) -> Decimal:
        """
        Set a category's limit for a month (the selected month by default).

        Empty or non-numeric input means zero, which is "no budget".

        Raises:
            InputRejectedError: If the limit is negative or the month is not
                                a valid key
        """
        month = month or self._snapshot.selected_month
        self._reject_if_invalid(self._validator.validate_month_key(month))

        limit = coerce_amount(value)
        self._reject_if_invalid(self._validator.validate_budget_limit(limit))

        budgets = self.budgets
        budgets.setdefault(month, {})[category] = limit
        self._replace(budgets=budgets)
        self._activity_logger.log_budget_set(month, category, str(limit))
        return limit

    def add_category(self, name: Optional[str]) -> str:
        """
        Append a category to the list.

        Raises:
            InputRejectedError: If the name is empty or already present
        """
        result = self._validator.validate_category_name(name, self._snapshot.categories)
        self._reject_if_invalid(result)

        cleaned = name.strip()
        self._replace(categories=[*self._snapshot.categories, cleaned])
        self._activity_logger.log_user_action(
            event_type=ActivityEventType.CATEGORY_ADDED,
            description=f"Category '{cleaned}' added",
            entity_type="category",
            entity_id=cleaned,
        )
        return cleaned

    def create_saved_item(self, draft: SavedItemDraft) -> SavedItem:
        """
        Store a reusable template.

        A recurring item is due from today; its first occurrence is posted
        the next time the session starts.

        Raises:
            InputRejectedError: If name, amount or category is missing
        """
        result = self._validator.validate_saved_item(draft, self._snapshot.categories)
        self._reject_if_invalid(result)

        item = SavedItem(
            name=draft.name,
            amount=draft.amount,
            category=draft.category,
            mood=draft.mood or DEFAULT_MOOD,
            repeat=draft.repeat,
        )
        if item.is_recurring:
            item = item.model_copy(update={"next_due": self._today()})

        self._replace(saved_items=[item, *self._snapshot.saved_items])
        self._activity_logger.log_user_action(
            event_type=ActivityEventType.SAVED_ITEM_CREATED,
            description=f"Saved item '{item.name}' created",
            entity_type="saved_item",
            entity_id=item.id,
            details={"repeat": item.repeat.value, "amount": str(item.amount)},
        )
        return item

    def quick_add(self, saved_id: str) -> Optional[Transaction]:
        """
        Post a saved item as an Expense dated today.

        The item's schedule is not touched.

        Returns:
            The new transaction, or None if no saved item has that id
        """
        item = next((s for s in self._snapshot.saved_items if s.id == saved_id), None)
        if item is None:
            self._activity_logger.log_error(
                error_type="saved_item_not_found",
                error_message=f"No saved item with id {saved_id}",
            )
            return None

        transaction = transaction_from_saved_item(item, self._today())
        self._replace(transactions=[transaction, *self._snapshot.transactions])
        self._activity_logger.log_transaction_added(transaction, quick_add=True)
        return transaction

    def select_month(self, month: str) -> str:
        """
        Change the month the views show.

        Raises:
            InputRejectedError: If the key is not ``YYYY-MM``
        """
        self._reject_if_invalid(self._validator.validate_month_key(month))
        if month != self._snapshot.selected_month:
            self._replace(selected_month=month)
            self._activity_logger.log_user_action(
                event_type=ActivityEventType.MONTH_SELECTED,
                description=f"Viewing {month}",
                details={"month": month},
            )
        return month

    def export_csv(self) -> str:
        """The whole transaction log as CSV text."""
        text = export_transactions_csv(
            self._snapshot.transactions,
            sanitize_all_fields=self._sanitize_csv,
        )
        self._activity_logger.log_user_action(
            event_type=ActivityEventType.CSV_EXPORTED,
            description="Transactions exported to CSV",
            details={"rows": len(self._snapshot.transactions)},
        )
        return text

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def month_transactions(self, month: Optional[str] = None) -> list[Transaction]:
        return transactions_for_month(
            self._snapshot.transactions,
            month or self._snapshot.selected_month,
        )

    def month_summary(self, month: Optional[str] = None) -> MonthSummary:
        """Totals, breakdowns and budget lines for a month (cached per version)."""
        month = month or self._snapshot.selected_month
        summary = self._cache.get(self._version, month)
        if summary is None:
            summary = summarize_month(
                self._snapshot.transactions,
                month,
                self._snapshot.categories,
                self._moods,
                self._snapshot.budgets,
            )
            self._cache.put(self._version, month, summary)
        return summary

    def month_options(self) -> list[MonthOption]:
        return month_options(self._today(), self._month_window)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reject_if_invalid(self, result: ValidationResult) -> None:
        if result.has_errors:
            self._activity_logger.log_input_rejected(
                subject=result.subject,
                issues=[i.model_dump() for i in result.issues],
            )
        self._validator.raise_for_errors(result)

    def _replace(self, **changes: Any) -> None:
        self._snapshot = self._snapshot.model_copy(update=changes)
        self._touch()
        self._persist()

    def _touch(self) -> None:
        self._version += 1

    def _persist(self) -> bool:
        """Write the current snapshot; a failure is logged, not raised."""
        try:
            self._storage.save(self._snapshot)
        except StorageError as e:
            self.last_save_error = str(e)
            self._activity_logger.log_snapshot_save_failed(str(e))
            return False
        self.last_save_error = None
        return True


def create_budget_book(
    use_storage: bool = True,
    today: Callable[[], date] = date.today,
) -> BudgetBook:
    """
    Factory function to create a ready-to-start BudgetBook.

    Args:
        use_storage: Whether to use the snapshot file.
                    Set to False to run with in-memory storage only.
        today: Clock for the session

    Returns:
        A BudgetBook; call start() before use
    """
    activity_logger = ActivityLogger()
    storage: SnapshotStorageInterface

    if use_storage:
        try:
            storage = JsonFileSnapshotStorage(activity_logger=activity_logger)
        except (OSError, ValueError) as e:
            # Storage not configured - continue in memory
            activity_logger.log_error(
                error_type="storage_unavailable",
                error_message=str(e),
            )
            storage = InMemorySnapshotStorage()
    else:
        storage = InMemorySnapshotStorage()

    return BudgetBook(
        storage=storage,
        activity_logger=activity_logger,
        today=today,
    )
