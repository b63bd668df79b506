"""
Recurrence Engine

Turns saved items with a repeat interval into concrete transactions.

At startup the engine looks at each recurring saved item and posts one
Expense for every due date from its next_due up to and including today,
then moves next_due to the first date after today. An app that was not
opened for a month therefore catches up on every missed occurrence.

DESIGN DECISION: Monthly schedules clamp to the end of short months and
keep their anchor day. A rent item anchored on the 31st posts on Jan 31,
Feb 28 (29 in leap years), Mar 31, Apr 30. We never let a date library
roll Feb 31 over into March.

GUARANTEES:
- Every posted transaction carries the originating item's id as saved_id
- next_due only ever moves forward
- Running twice for the same day posts nothing the second time
- Backfill per item is capped; the rest is skipped and reported
"""

import calendar
from datetime import date, timedelta
from typing import Iterable, Optional

from paisapal.config import get_settings
from paisapal.models.ledger import (
    DEFAULT_MOOD,
    MaterializationResult,
    RecurrenceAnomaly,
    RepeatInterval,
    SavedItem,
    Transaction,
    TransactionType,
)


_STEP_DAYS = {
    RepeatInterval.DAILY: 1,
    RepeatInterval.WEEKLY: 7,
}


def add_months(day: date, months: int, anchor_day: Optional[int] = None) -> date:
    """
    Move a date by whole calendar months, clamping to the month's last day.

    Args:
        day: Starting date
        months: Number of months to move (may be negative)
        anchor_day: Preferred day of month; defaults to ``day.day``
    """
    index = day.month - 1 + months
    year = day.year + index // 12
    month = index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(anchor_day or day.day, last_day))


def next_occurrence(day: date, repeat: RepeatInterval, anchor_day: Optional[int] = None) -> date:
    """Return the schedule point after ``day``."""
    if repeat in _STEP_DAYS:
        return day + timedelta(days=_STEP_DAYS[repeat])
    if repeat == RepeatInterval.MONTHLY:
        return add_months(day, 1, anchor_day)
    raise ValueError(f"Saved items with repeat={repeat.value!r} have no schedule")


def first_occurrence_after(
    day: date,
    current_date: date,
    repeat: RepeatInterval,
    anchor_day: Optional[int] = None,
) -> tuple[date, int]:
    """
    Jump straight to the first schedule point strictly after ``current_date``.

    Returns:
        (next_point, passed) where ``passed`` is how many schedule points
        from ``day`` onwards fall on or before ``current_date``
    """
    if day > current_date:
        return day, 0

    if repeat in _STEP_DAYS:
        step = _STEP_DAYS[repeat]
        passed = (current_date - day).days // step + 1
        return day + timedelta(days=passed * step), passed

    if repeat == RepeatInterval.MONTHLY:
        months = (current_date.year - day.year) * 12 + current_date.month - day.month
        candidate = add_months(day, months, anchor_day)
        if candidate <= current_date:
            months += 1
            candidate = add_months(day, months, anchor_day)
        return candidate, months

    raise ValueError(f"Saved items with repeat={repeat.value!r} have no schedule")


def transaction_from_saved_item(item: SavedItem, on: date) -> Transaction:
    """Build the Expense a saved item posts on a given day."""
    return Transaction(
        date=on,
        type=TransactionType.EXPENSE,
        category=item.category,
        description=item.name,
        amount=item.amount,
        mood=item.mood or DEFAULT_MOOD,
        saved_id=item.id,
    )


class RecurrenceEngine:
    """
    Materializes due occurrences of recurring saved items.

    The engine is pure: it never touches storage. It receives the saved
    items and the transaction log and returns updated copies.
    """

    def __init__(self, max_occurrences: Optional[int] = None):
        """
        Args:
            max_occurrences: Backfill cap per item per run. Defaults to the
                             ``max_backfill_occurrences`` setting.
        """
        if max_occurrences is None:
            max_occurrences = get_settings().app.max_backfill_occurrences
        if max_occurrences < 1:
            raise ValueError("max_occurrences must be at least 1")
        self._max_occurrences = max_occurrences

    def materialize(
        self,
        current_date: date,
        saved_items: Iterable[SavedItem],
        transaction_log: Iterable[Transaction] = (),
    ) -> MaterializationResult:
        """
        Post every occurrence due on or before ``current_date``.

        Items without a repeat interval pass through untouched. An item whose
        next_due is unset starts today: it is due now, never retroactively.
        """
        new_transactions: list[Transaction] = []
        updated_items: list[SavedItem] = []
        anomalies: list[RecurrenceAnomaly] = []
        items_changed = False

        for item in saved_items:
            if not item.is_recurring:
                updated_items.append(item)
                continue

            posted, advanced, anomaly = self._roll_forward(item, current_date)
            new_transactions.extend(posted)
            updated_items.append(advanced)
            if anomaly is not None:
                anomalies.append(anomaly)
            if advanced != item:
                items_changed = True

        return MaterializationResult(
            new_transactions=new_transactions,
            saved_items=updated_items,
            transactions=[*transaction_log, *new_transactions],
            anomalies=anomalies,
            items_changed=items_changed,
        )

    def _roll_forward(
        self,
        item: SavedItem,
        current_date: date,
    ) -> tuple[list[Transaction], SavedItem, Optional[RecurrenceAnomaly]]:
        """Advance one item past ``current_date``, collecting its occurrences."""
        start = item.next_due or current_date
        anchor_day = item.anchor_day
        if item.repeat == RepeatInterval.MONTHLY and anchor_day is None:
            anchor_day = start.day

        posted: list[Transaction] = []
        anomaly = None
        next_due = start

        while next_due <= current_date:
            if len(posted) >= self._max_occurrences:
                resumed_at, skipped = first_occurrence_after(
                    next_due, current_date, item.repeat, anchor_day
                )
                anomaly = RecurrenceAnomaly(
                    saved_id=item.id,
                    name=item.name,
                    repeat=item.repeat,
                    original_next_due=start,
                    emitted=len(posted),
                    skipped=skipped,
                    resumed_at=resumed_at,
                )
                next_due = resumed_at
                break
            posted.append(transaction_from_saved_item(item, next_due))
            next_due = next_occurrence(next_due, item.repeat, anchor_day)

        advanced = item.model_copy(update={"next_due": next_due, "anchor_day": anchor_day})
        return posted, advanced, anomaly
