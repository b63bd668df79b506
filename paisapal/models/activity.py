"""
Activity Models for PaisaPal

Every significant action in a session is described by an ActivityEvent
and written to the structured log. This provides:
1. A readable trace of what a session did to the snapshot
2. Debugging information when a snapshot fails to load or save
3. Visibility of recurrence backfill anomalies

DESIGN DECISION: Events are logged, never stored. The snapshot holds the
user's data only; there is no persisted history.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from paisapal.models.ledger import RecurrenceAnomaly, Transaction


class ActivityEventType(str, Enum):
    """Types of events a session emits."""
    # Snapshot lifecycle
    SNAPSHOT_LOADED = "snapshot_loaded"
    SNAPSHOT_RESET = "snapshot_reset"
    SNAPSHOT_SAVE_FAILED = "snapshot_save_failed"
    RECORD_SKIPPED = "record_skipped"

    # Recurrence
    RECURRENCE_MATERIALIZED = "recurrence_materialized"
    RECURRENCE_CAPPED = "recurrence_capped"

    # User intents
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    BUDGET_SET = "budget_set"
    CATEGORY_ADDED = "category_added"
    SAVED_ITEM_CREATED = "saved_item_created"
    QUICK_ADDED = "quick_added"
    MONTH_SELECTED = "month_selected"
    CSV_EXPORTED = "csv_exported"
    INPUT_REJECTED = "input_rejected"

    # System events
    SYSTEM_ERROR = "system_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single activity event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'saved_item', 'snapshot')"
    )
    entity_id: Optional[str] = None

    # All events from one running session share this ID
    session_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user intent?"
    )

    @field_validator('description', mode='before')
    @classmethod
    def truncate_description(cls, v: Any) -> Any:
        if isinstance(v, str) and len(v) > 500:
            return v[:497] + "..."
        return v

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "session_id": str(self.session_id) if self.session_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.transaction_added(tx, session_id)
        event = ActivityEventBuilder.recurrence_capped(anomaly, session_id)
    """

    @staticmethod
    def snapshot_loaded(
        transaction_count: int,
        saved_item_count: int,
        session_id: Optional[UUID],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_LOADED,
            entity_type="snapshot",
            session_id=session_id,
            description=(
                f"Snapshot loaded with {transaction_count} transactions "
                f"and {saved_item_count} saved items"
            ),
            details={
                "transaction_count": transaction_count,
                "saved_item_count": saved_item_count,
            },
        )

    @staticmethod
    def snapshot_reset(
        reason: str,
        session_id: Optional[UUID],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_RESET,
            severity=ActivitySeverity.WARNING,
            entity_type="snapshot",
            session_id=session_id,
            description="Stored snapshot could not be read; starting from defaults",
            error_message=reason,
        )

    @staticmethod
    def snapshot_save_failed(
        error_message: str,
        session_id: Optional[UUID],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SNAPSHOT_SAVE_FAILED,
            severity=ActivitySeverity.ERROR,
            entity_type="snapshot",
            session_id=session_id,
            description="Snapshot could not be written; changes kept in memory",
            error_message=error_message,
        )

    @staticmethod
    def record_skipped(
        section: str,
        index: int,
        error_message: str,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECORD_SKIPPED,
            severity=ActivitySeverity.WARNING,
            entity_type="snapshot",
            description=f"Skipped malformed record {index} in {section}",
            details={
                "section": section,
                "index": index,
            },
            error_message=error_message,
        )

    @staticmethod
    def recurrence_materialized(
        run_date: date,
        created: int,
        session_id: Optional[UUID],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECURRENCE_MATERIALIZED,
            entity_type="saved_item",
            session_id=session_id,
            description=f"Posted {created} recurring transactions up to {run_date.isoformat()}",
            details={
                "run_date": run_date.isoformat(),
                "created": created,
            },
        )

    @staticmethod
    def recurrence_capped(
        anomaly: RecurrenceAnomaly,
        session_id: Optional[UUID],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.RECURRENCE_CAPPED,
            severity=ActivitySeverity.WARNING,
            entity_type="saved_item",
            entity_id=anomaly.saved_id,
            session_id=session_id,
            description=(
                f"Backfill for '{anomaly.name}' stopped after {anomaly.emitted} "
                f"occurrences; {anomaly.skipped} skipped"
            ),
            details=anomaly.model_dump(mode="json"),
        )

    @staticmethod
    def transaction_added(
        transaction: Transaction,
        session_id: Optional[UUID],
        quick_add: bool = False,
    ) -> ActivityEvent:
        event_type = (
            ActivityEventType.QUICK_ADDED
            if quick_add
            else ActivityEventType.TRANSACTION_ADDED
        )
        return ActivityEvent(
            event_type=event_type,
            entity_type="transaction",
            entity_id=transaction.id,
            session_id=session_id,
            description=(
                f"{transaction.type.value} added: {transaction.category} "
                f"{transaction.amount}"
            ),
            details={
                "date": transaction.date.isoformat(),
                "category": transaction.category,
                "amount": str(transaction.amount),
                "saved_id": transaction.saved_id,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        found: bool,
        session_id: Optional[UUID],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TRANSACTION_DELETED,
            severity=ActivitySeverity.INFO if found else ActivitySeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            session_id=session_id,
            description=(
                "Transaction deleted" if found else "Delete requested for unknown transaction"
            ),
            is_user_action=True,
        )

    @staticmethod
    def budget_set(
        month: str,
        category: str,
        limit: str,
        session_id: Optional[UUID],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.BUDGET_SET,
            entity_type="budget",
            entity_id=f"{month}/{category}",
            session_id=session_id,
            description=f"Budget for {category} in {month} set to {limit}",
            details={
                "month": month,
                "category": category,
                "limit": limit,
            },
            is_user_action=True,
        )

    @staticmethod
    def user_action(
        event_type: ActivityEventType,
        description: str,
        session_id: Optional[UUID],
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> ActivityEvent:
        """Generic intent event for actions with no dedicated builder."""
        return ActivityEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            session_id=session_id,
            description=description,
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def input_rejected(
        subject: str,
        issues: list[dict],
        session_id: Optional[UUID],
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.INPUT_REJECTED,
            severity=ActivitySeverity.WARNING,
            entity_type=subject,
            session_id=session_id,
            description=f"{subject.replace('_', ' ').capitalize()} rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        session_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SYSTEM_ERROR,
            severity=ActivitySeverity.ERROR,
            session_id=session_id,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
