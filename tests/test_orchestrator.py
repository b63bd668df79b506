"""
Integration tests for the BudgetBook session flow.

Storage is in memory (or under tmp_path); the clock is fixed.
"""

import pytest
from datetime import date
from decimal import Decimal

from paisapal.models.ledger import (
    DEFAULT_CATEGORIES,
    SavedItemDraft,
    TransactionDraft,
    TransactionType,
)
from paisapal.orchestrator import BudgetBook, create_budget_book
from paisapal.services.storage import (
    InMemorySnapshotStorage,
    JsonFileSnapshotStorage,
    SnapshotWriteError,
)
from paisapal.validation import InputRejectedError


TODAY = date(2025, 1, 22)

WEEKLY_PAYLOAD = {
    "categories": ["Rent", "Transport"],
    "selectedMonth": "2025-01",
    "savedItems": [
        {"id": "s1", "name": "Bus pass", "amount": "10", "category": "Transport",
         "mood": "Neutral", "repeat": "weekly", "nextDue": "2025-01-01"},
    ],
}


class FailingStorage(InMemorySnapshotStorage):
    """Storage whose writes always fail."""

    def save(self, snapshot):
        raise SnapshotWriteError("disk full")


def make_book(storage=None, today=TODAY) -> BudgetBook:
    return BudgetBook(
        storage=storage if storage is not None else InMemorySnapshotStorage(),
        today=lambda: today,
        moods=["Happy", "Stressed", "Neutral"],
        sanitize_csv=False,
    )


@pytest.fixture
def book():
    book = make_book()
    book.start()
    return book


class TestStartup:
    """Tests for loading and materializing at startup."""

    def test_fresh_start_uses_defaults(self):
        storage = InMemorySnapshotStorage()
        book = make_book(storage)
        result = book.start()

        assert not result.changed
        assert book.categories == DEFAULT_CATEGORIES
        assert book.selected_month == "2025-01"
        assert book.transactions == []
        assert storage.save_count == 0

    def test_start_materializes_and_persists(self):
        storage = InMemorySnapshotStorage(WEEKLY_PAYLOAD)
        book = make_book(storage)
        result = book.start()

        assert len(result.new_transactions) == 4
        assert len(book.transactions) == 4
        assert all(t.saved_id == "s1" for t in book.transactions)
        assert book.saved_items[0].next_due == date(2025, 1, 29)
        assert storage.save_count == 1
        assert storage.payload["savedItems"][0]["nextDue"] == "2025-01-29"

    def test_restart_same_day_posts_nothing(self):
        storage = InMemorySnapshotStorage(WEEKLY_PAYLOAD)
        make_book(storage).start()

        second = make_book(storage)
        result = second.start()

        assert result.new_transactions == []
        assert len(second.transactions) == 4
        assert storage.save_count == 1

    def test_corrupt_file_falls_back_to_defaults(self, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text("{this is not json", encoding="utf-8")
        book = make_book(JsonFileSnapshotStorage(path=path))
        book.start()

        assert book.categories == DEFAULT_CATEGORIES
        assert book.transactions == []

    def test_non_object_snapshot_falls_back_to_defaults(self):
        book = make_book(InMemorySnapshotStorage(["not", "a", "snapshot"]))
        book.start()
        assert book.categories == DEFAULT_CATEGORIES

    def test_malformed_records_do_not_block_startup(self):
        storage = InMemorySnapshotStorage({
            "transactions": [
                {"id": "ok", "date": "2025-01-02", "type": "Income", "amount": "100"},
                {"id": "broken", "date": "not a date", "type": "Income"},
            ],
        })
        book = make_book(storage)
        book.start()
        assert [t.id for t in book.transactions] == ["ok"]


class TestIntents:
    """Tests for user intents."""

    def test_add_transaction_prepends(self, book):
        first = book.add_transaction(TransactionDraft(category="Rent", amount="900"))
        second = book.add_transaction(
            TransactionDraft(type="Income", category="Rent", amount="50", booked_on=date(2025, 1, 5))
        )

        assert [t.id for t in book.transactions] == [second.id, first.id]
        assert first.date == TODAY
        assert first.mood == "Neutral"
        assert second.type == TransactionType.INCOME

    def test_add_transaction_persists(self):
        storage = InMemorySnapshotStorage()
        book = make_book(storage)
        book.start()
        book.add_transaction(TransactionDraft(category="Rent", amount="900"))

        assert storage.save_count == 1
        assert storage.payload["transactions"][0]["amount"] == "900"

    def test_rejected_transaction_changes_nothing(self):
        storage = InMemorySnapshotStorage()
        book = make_book(storage)
        book.start()

        with pytest.raises(InputRejectedError):
            book.add_transaction(TransactionDraft(category="Rent", amount=""))

        assert book.transactions == []
        assert storage.save_count == 0

    def test_delete_transaction(self, book):
        tx = book.add_transaction(TransactionDraft(category="Rent", amount="1"))
        assert book.delete_transaction(tx.id) is True
        assert book.transactions == []

    def test_delete_unknown_transaction(self, book):
        book.add_transaction(TransactionDraft(category="Rent", amount="1"))
        assert book.delete_transaction("missing") is False
        assert len(book.transactions) == 1

    def test_set_budget(self, book):
        assert book.set_budget("Rent", "900") == Decimal("900")
        assert book.budgets["2025-01"]["Rent"] == Decimal("900")
        assert book.set_budget("Groceries", "200", month="2025-02") == Decimal("200")
        assert book.budgets["2025-02"]["Groceries"] == Decimal("200")

    def test_set_budget_garbage_is_zero(self, book):
        assert book.set_budget("Rent", "lots") == Decimal("0")

    def test_set_budget_rejects_negative(self, book):
        with pytest.raises(InputRejectedError):
            book.set_budget("Rent", "-5")
        assert book.budgets == {}

    def test_add_category(self, book):
        assert book.add_category("  Pets ") == "Pets"
        assert book.categories[-1] == "Pets"

    def test_add_duplicate_category(self, book):
        with pytest.raises(InputRejectedError, match="Category already exists."):
            book.add_category("Rent")
        assert book.categories == DEFAULT_CATEGORIES

    def test_create_recurring_saved_item(self, book):
        item = book.create_saved_item(
            SavedItemDraft(name="Gym", amount="30", category="Bills", repeat="monthly")
        )
        assert item.next_due == TODAY
        assert book.saved_items[0] == item
        assert book.transactions == []

    def test_create_plain_saved_item(self, book):
        item = book.create_saved_item(SavedItemDraft(name="Coffee", amount="3", category="Groceries"))
        assert item.next_due is None
        assert not item.is_recurring

    def test_create_saved_item_requires_fields(self, book):
        with pytest.raises(InputRejectedError):
            book.create_saved_item(SavedItemDraft(name="Coffee"))
        assert book.saved_items == []

    def test_recurring_item_posts_on_next_start(self):
        storage = InMemorySnapshotStorage()
        book = make_book(storage)
        book.start()
        book.create_saved_item(SavedItemDraft(name="Gym", amount="30", category="Bills", repeat="weekly"))

        restarted = make_book(storage)
        result = restarted.start()

        assert len(result.new_transactions) == 1
        assert restarted.transactions[0].date == TODAY
        assert restarted.saved_items[0].next_due == date(2025, 1, 29)

    def test_quick_add(self, book):
        item = book.create_saved_item(
            SavedItemDraft(name="Coffee", amount="3", category="Groceries", mood="Happy")
        )
        tx = book.quick_add(item.id)

        assert tx.type == TransactionType.EXPENSE
        assert tx.date == TODAY
        assert tx.description == "Coffee"
        assert tx.saved_id == item.id
        assert book.transactions[0] == tx

    def test_quick_add_does_not_touch_schedule(self, book):
        item = book.create_saved_item(
            SavedItemDraft(name="Gym", amount="30", category="Bills", repeat="weekly")
        )
        book.quick_add(item.id)
        assert book.saved_items[0].next_due == TODAY

    def test_quick_add_unknown_item(self, book):
        assert book.quick_add("missing") is None
        assert book.transactions == []

    def test_select_month(self, book):
        assert book.select_month("2024-12") == "2024-12"
        assert book.selected_month == "2024-12"

    def test_select_invalid_month(self, book):
        with pytest.raises(InputRejectedError):
            book.select_month("December")
        assert book.selected_month == "2025-01"

    def test_save_failure_keeps_state(self):
        book = make_book(FailingStorage())
        book.start()
        tx = book.add_transaction(TransactionDraft(category="Rent", amount="5"))

        assert book.transactions == [tx]
        assert book.last_save_error == "disk full"


class TestViews:
    """Tests for summaries and export."""

    def test_month_summary(self, book):
        book.add_transaction(TransactionDraft(type="Income", category="Rent", amount="100"))
        book.add_transaction(TransactionDraft(category="Rent", amount="40", mood="Stressed"))
        book.add_transaction(
            TransactionDraft(category="Rent", amount="999", booked_on=date(2024, 12, 1))
        )
        book.set_budget("Rent", "80")

        summary = book.month_summary()
        assert summary.totals.income == Decimal("100")
        assert summary.totals.expenses == Decimal("40")
        assert summary.totals.net == Decimal("60")
        assert summary.mood_spend["Stressed"] == Decimal("40")
        assert summary.budget_lines[0].percent == 50

    def test_month_summary_is_cached_per_version(self, book):
        first = book.month_summary()
        assert book.month_summary() is first

        book.add_transaction(TransactionDraft(category="Rent", amount="5"))
        second = book.month_summary()
        assert second is not first
        assert second.totals.expenses == Decimal("5")

    def test_month_transactions(self, book):
        book.add_transaction(TransactionDraft(category="Rent", amount="5"))
        book.add_transaction(TransactionDraft(category="Rent", amount="5", booked_on=date(2024, 12, 1)))
        assert len(book.month_transactions()) == 1
        assert len(book.month_transactions("2024-12")) == 1

    def test_month_options(self, book):
        options = book.month_options()
        assert "2025-01" in [o.key for o in options]

    def test_export_csv(self, book):
        book.add_transaction(TransactionDraft(category="Rent", amount="5", description="a,b"))
        lines = book.export_csv().split("\n")
        assert lines[0] == "id,date,type,category,description,mood,amount"
        assert lines[1].endswith(",Rent,a b,Neutral,5")

    def test_huge_amount_summary_and_export(self, book):
        """Test that a very large expense still summarizes and exports."""
        book.add_transaction(TransactionDraft(category="Rent", amount="1E+30"))
        book.set_budget("Rent", "80")

        summary = book.month_summary()
        assert summary.totals.expenses == Decimal("1E+30")
        assert summary.budget_lines[0].percent == 100
        assert book.export_csv().split("\n")[1].endswith(",Neutral," + "1" + "0" * 30)


class TestFactory:
    """Tests for create_budget_book."""

    def test_in_memory_book(self):
        book = create_budget_book(use_storage=False, today=lambda: TODAY)
        book.start()
        assert book.selected_month == "2025-01"
        assert book.categories == DEFAULT_CATEGORIES
