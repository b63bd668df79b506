"""
CSV Export

Writes the transaction log in the layout users already have spreadsheets
for:

    id,date,type,category,description,mood,amount

There is no quoting. Commas inside the description are replaced with
spaces so the row still splits into seven fields. Category and mood are
written verbatim unless ``sanitize_all_fields`` is set, in which case they
get the same treatment. Amounts are the stored unsigned value.
"""

from decimal import Decimal
from typing import Iterable

from paisapal.models.ledger import Transaction


CSV_COLUMNS = ["id", "date", "type", "category", "description", "mood", "amount"]
CSV_FILENAME = "transactions.csv"
CSV_MIME_TYPE = "text/csv"


def _strip_commas(value: str) -> str:
    return (value or "").replace(",", " ")


def format_csv_amount(amount: Decimal) -> str:
    """Plain number without trailing zeros or exponent (``5``, ``12.5``)."""
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def transaction_to_csv_row(
    transaction: Transaction,
    sanitize_all_fields: bool = False,
) -> list[str]:
    """Convert a transaction to its CSV fields in column order."""
    category = transaction.category
    mood = transaction.mood
    if sanitize_all_fields:
        category = _strip_commas(category)
        mood = _strip_commas(mood)

    return [
        transaction.id,
        transaction.date.isoformat(),
        transaction.type.value,
        category,
        _strip_commas(transaction.description),
        mood,
        format_csv_amount(transaction.amount),
    ]


def export_transactions_csv(
    transactions: Iterable[Transaction],
    sanitize_all_fields: bool = False,
) -> str:
    """Render the full log as CSV text, header first, rows joined by newlines."""
    lines = [",".join(CSV_COLUMNS)]
    for transaction in transactions:
        lines.append(",".join(transaction_to_csv_row(transaction, sanitize_all_fields)))
    return "\n".join(lines)
