"""
Snapshot encoding and tolerant decoding.

The on-device format is the JSON object the app has always written:

    {"categories": [...], "selectedMonth": "2025-08",
     "budgets": {"2025-08": {"Groceries": "200"}},
     "transactions": [...], "savedItems": [...]}

Decoding never fails because of one bad field. A missing or malformed
top-level field keeps its default, and a malformed record inside
``transactions`` or ``savedItems`` is dropped and reported through
``on_skip``.
"""

import re
from decimal import Decimal
from typing import Any, Callable, Optional

from pydantic import ValidationError

from paisapal.models.ledger import (
    MONTH_KEY_PATTERN,
    BudgetMap,
    SavedItem,
    Snapshot,
    Transaction,
    coerce_amount,
)
from paisapal.services.storage.interface import SnapshotCorruptError


SkipCallback = Callable[[str, int, str], None]

_MONTH_KEY = re.compile(MONTH_KEY_PATTERN)


def encode_snapshot(snapshot: Snapshot) -> dict:
    """Convert a snapshot to the JSON-ready stored form."""
    return snapshot.model_dump(mode="json", by_alias=True)


def decode_snapshot(payload: Any, on_skip: Optional[SkipCallback] = None) -> Snapshot:
    """
    Build a Snapshot from stored data.

    Raises:
        SnapshotCorruptError: If the payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise SnapshotCorruptError(
            f"Snapshot must be a JSON object, got {type(payload).__name__}"
        )

    def skip(section: str, index: int, error: str) -> None:
        if on_skip is not None:
            on_skip(section, index, error)

    fields: dict[str, Any] = {}

    categories = _decode_categories(payload.get("categories"))
    if categories is not None:
        fields["categories"] = categories
    elif "categories" in payload:
        skip("categories", 0, "categories is not a list of names")

    selected_month = payload.get("selectedMonth")
    if isinstance(selected_month, str) and _MONTH_KEY.match(selected_month):
        fields["selected_month"] = selected_month
    elif selected_month is not None:
        skip("selectedMonth", 0, f"invalid month key {selected_month!r}")

    budgets = payload.get("budgets")
    if isinstance(budgets, dict):
        fields["budgets"] = _decode_budgets(budgets, skip)
    elif budgets is not None:
        skip("budgets", 0, "budgets is not an object")

    fields["transactions"] = _decode_records(
        payload.get("transactions"), Transaction, "transactions", skip
    )
    fields["saved_items"] = _decode_records(
        payload.get("savedItems"), SavedItem, "savedItems", skip
    )

    return Snapshot(**fields)


def _decode_categories(value: Any) -> Optional[list[str]]:
    if not isinstance(value, list):
        return None
    names: list[str] = []
    for entry in value:
        if isinstance(entry, str) and entry.strip() and entry.strip() not in names:
            names.append(entry.strip())
    return names


def _decode_budgets(value: dict, skip: SkipCallback) -> BudgetMap:
    budgets: BudgetMap = {}
    for index, (month, limits) in enumerate(value.items()):
        if not (isinstance(month, str) and _MONTH_KEY.match(month)) or not isinstance(limits, dict):
            skip("budgets", index, f"invalid budget entry for {month!r}")
            continue
        month_limits: dict[str, Decimal] = {}
        for category, limit in limits.items():
            amount = coerce_amount(limit)
            if amount < 0:
                skip("budgets", index, f"negative budget for {category!r} in {month}")
                continue
            month_limits[str(category)] = amount
        budgets[month] = month_limits
    return budgets


def _decode_records(value: Any, model: type, section: str, skip: SkipCallback) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        skip(section, 0, f"{section} is not a list")
        return []

    records = []
    for index, raw in enumerate(value):
        try:
            records.append(model.model_validate(raw))
        except ValidationError as e:
            skip(section, index, str(e))
    return records
