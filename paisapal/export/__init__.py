"""Data export package."""

from paisapal.export.csv_export import (
    CSV_COLUMNS,
    CSV_FILENAME,
    CSV_MIME_TYPE,
    export_transactions_csv,
    format_csv_amount,
    transaction_to_csv_row,
)

__all__ = [
    "CSV_COLUMNS",
    "CSV_FILENAME",
    "CSV_MIME_TYPE",
    "export_transactions_csv",
    "format_csv_amount",
    "transaction_to_csv_row",
]
