"""
Activity Logger

DESIGN DECISION: Every significant action in a session is logged.
This provides:
1. A trace of what each session changed
2. Debugging capability when snapshots are unreadable
3. Visibility of skipped backfill occurrences

The activity logger:
- Writes structured JSON lines through structlog
- Never raises; a logging failure must not break a user intent
- Tags every event with the session ID it came from
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID, uuid4

import structlog

from paisapal.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)
from paisapal.models.ledger import RecurrenceAnomaly, Transaction


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route the structured log to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class ActivityLogger:
    """
    Central activity logging service.

    One instance per running session; the session ID is attached to every
    event so log lines from one app start can be grouped.
    """

    def __init__(self, session_id: Optional[UUID] = None):
        self._session_id = session_id or create_session_id()
        self._logger = structlog.get_logger("paisapal.activity")

    @property
    def session_id(self) -> UUID:
        return self._session_id

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at the level matching its severity."""
        if event.session_id is None:
            event = event.model_copy(update={"session_id": self._session_id})
        log_dict = event.to_log_dict()

        try:
            if event.severity == ActivitySeverity.ERROR:
                self._logger.error("activity_event", **log_dict)
            elif event.severity == ActivitySeverity.WARNING:
                self._logger.warning("activity_event", **log_dict)
            elif event.severity == ActivitySeverity.DEBUG:
                self._logger.debug("activity_event", **log_dict)
            else:
                self._logger.info("activity_event", **log_dict)
        except Exception as e:
            # Logging failures never propagate to the caller
            logging.getLogger(__name__).error("activity logging failed: %s", e)

    def log_snapshot_loaded(self, transaction_count: int, saved_item_count: int) -> None:
        self.log(ActivityEventBuilder.snapshot_loaded(
            transaction_count=transaction_count,
            saved_item_count=saved_item_count,
            session_id=self._session_id,
        ))

    def log_snapshot_reset(self, reason: str) -> None:
        """Log that the stored snapshot was unreadable and defaults are used."""
        self.log(ActivityEventBuilder.snapshot_reset(
            reason=reason,
            session_id=self._session_id,
        ))

    def log_snapshot_save_failed(self, error_message: str) -> None:
        self.log(ActivityEventBuilder.snapshot_save_failed(
            error_message=error_message,
            session_id=self._session_id,
        ))

    def log_record_skipped(self, section: str, index: int, error_message: str) -> None:
        self.log(ActivityEventBuilder.record_skipped(
            section=section,
            index=index,
            error_message=error_message,
        ))

    def log_recurrence_materialized(self, run_date: date, created: int) -> None:
        self.log(ActivityEventBuilder.recurrence_materialized(
            run_date=run_date,
            created=created,
            session_id=self._session_id,
        ))

    def log_recurrence_capped(self, anomaly: RecurrenceAnomaly) -> None:
        self.log(ActivityEventBuilder.recurrence_capped(
            anomaly=anomaly,
            session_id=self._session_id,
        ))

    def log_transaction_added(self, transaction: Transaction, quick_add: bool = False) -> None:
        self.log(ActivityEventBuilder.transaction_added(
            transaction=transaction,
            session_id=self._session_id,
            quick_add=quick_add,
        ))

    def log_transaction_deleted(self, transaction_id: str, found: bool) -> None:
        self.log(ActivityEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            found=found,
            session_id=self._session_id,
        ))

    def log_budget_set(self, month: str, category: str, limit: str) -> None:
        self.log(ActivityEventBuilder.budget_set(
            month=month,
            category=category,
            limit=limit,
            session_id=self._session_id,
        ))

    def log_user_action(
        self,
        event_type: ActivityEventType,
        description: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        self.log(ActivityEventBuilder.user_action(
            event_type=event_type,
            description=description,
            session_id=self._session_id,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        ))

    def log_input_rejected(self, subject: str, issues: list[dict]) -> None:
        self.log(ActivityEventBuilder.input_rejected(
            subject=subject,
            issues=issues,
            session_id=self._session_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(ActivityEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            session_id=self._session_id,
        ))


def create_session_id() -> UUID:
    """
    Create a new session ID.

    Use this once per app start and pass it to the session's ActivityLogger.
    """
    return uuid4()
