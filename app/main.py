"""
Streamlit Frontend for PaisaPal

The screen people open to log spending, check budgets and see which
moods their money goes on.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear messages in simple language when something is missing
3. Visual feedback for every operation
4. No hidden actions

The UI only collects input and shows results. Every change goes through
the BudgetBook, which validates, stores and logs it.
"""

from datetime import date

import streamlit as st

from paisapal.activity import configure_logging
from paisapal.config import get_settings
from paisapal.export import CSV_FILENAME, CSV_MIME_TYPE
from paisapal.models.ledger import (
    DEFAULT_MOOD,
    RepeatInterval,
    SavedItemDraft,
    TransactionDraft,
    TransactionType,
)
from paisapal.orchestrator import BudgetBook, create_budget_book
from paisapal.reports import format_currency, format_display_date, month_label
from paisapal.validation import InputRejectedError


# Page configuration
st.set_page_config(
    page_title="PaisaPal",
    page_icon="💷",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_book() -> BudgetBook:
    """Create and start the session's BudgetBook (cached)."""
    configure_logging(get_settings().app.log_level)
    book = create_budget_book(use_storage=True)
    result = book.start()
    if result.new_transactions:
        st.session_state.startup_notice = (
            f"🔁 Added {len(result.new_transactions)} recurring transactions that came due."
        )
    if result.anomalies:
        st.session_state.startup_warning = (
            "Some recurring items were very far behind; older occurrences were skipped."
        )
    return book


def money(amount) -> str:
    return format_currency(amount, get_settings().app.currency_symbol)


def show_save_status(book: BudgetBook):
    if book.last_save_error:
        st.sidebar.markdown(f"""
        <div class="warning-box">
            <h4>⚠️ Not saved to disk</h4>
            <p>Your changes are kept for now and will be saved with the next change.</p>
            <p><small>{book.last_save_error}</small></p>
        </div>
        """, unsafe_allow_html=True)


def main():
    """Main application entry point."""
    book = get_book()

    # Sidebar navigation
    st.sidebar.title("💷 PaisaPal")
    st.sidebar.markdown("---")

    options = book.month_options()
    keys = [o.key for o in options]
    labels = {o.key: o.label for o in options}
    if book.selected_month not in labels:
        keys.append(book.selected_month)
        labels[book.selected_month] = month_label(book.selected_month)

    selected = st.sidebar.selectbox(
        "Month",
        options=keys,
        index=keys.index(book.selected_month),
        format_func=lambda k: labels[k],
    )
    if selected != book.selected_month:
        book.select_month(selected)
        st.rerun()

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "➕ Add Transaction", "⭐ Saved Items",
         "📋 Transactions", "😊 Mood Insights", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    show_save_status(book)

    if "startup_notice" in st.session_state:
        st.success(st.session_state.pop("startup_notice"))
    if "startup_warning" in st.session_state:
        st.warning(st.session_state.pop("startup_warning"))

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(book)
    elif page == "➕ Add Transaction":
        render_add_page(book)
    elif page == "⭐ Saved Items":
        render_saved_page(book)
    elif page == "📋 Transactions":
        render_transactions_page(book)
    elif page == "😊 Mood Insights":
        render_mood_page(book)
    elif page == "⚙️ Settings":
        render_settings_page(book)


def render_dashboard_page(book: BudgetBook):
    """Render totals and budgets for the selected month."""
    summary = book.month_summary()
    st.title(f"📊 {month_label(summary.month)}")

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", money(summary.totals.income))
    col2.metric("Expenses", money(summary.totals.expenses))
    col3.metric("Net", money(summary.totals.net))

    st.markdown("---")
    st.subheader("🎯 Budgets")

    for line in summary.budget_lines:
        name_col, bar_col, input_col = st.columns([2, 4, 2])
        with name_col:
            st.markdown(f"**{line.category}**")
            st.caption(f"{money(line.spent)} of {money(line.limit)}")
        with bar_col:
            st.progress(line.percent / 100)
            if line.over_budget:
                st.caption("🔴 Over budget")
        with input_col:
            new_limit = st.number_input(
                "Limit",
                min_value=0.0,
                value=float(line.limit),
                step=10.0,
                key=f"budget-{summary.month}-{line.category}",
                label_visibility="collapsed",
            )
            if new_limit != float(line.limit):
                try:
                    book.set_budget(line.category, new_limit)
                    st.rerun()
                except InputRejectedError as e:
                    st.error(str(e))


def render_add_page(book: BudgetBook):
    """Render the new transaction form."""
    st.title("➕ Add Transaction")

    with st.form("add-transaction", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            booked_on = st.date_input("Date", value=date.today())
            tx_type = st.radio(
                "Type",
                options=[t.value for t in TransactionType],
                index=1,
                horizontal=True,
            )
            category = st.selectbox("Category", options=book.categories)
        with col2:
            amount = st.number_input("Amount", min_value=0.0, step=1.0)
            description = st.text_input("Description")
            mood = st.selectbox(
                "Mood",
                options=book.moods,
                index=book.moods.index(DEFAULT_MOOD) if DEFAULT_MOOD in book.moods else 0,
            )

        submitted = st.form_submit_button("💾 Save", type="primary")

    if submitted:
        draft = TransactionDraft(
            booked_on=booked_on,
            type=tx_type,
            category=category,
            description=description,
            amount=amount,
            mood=mood,
        )
        try:
            transaction = book.add_transaction(draft)
            st.success(f"✅ Saved {transaction.type.value.lower()} of {money(transaction.amount)}.")
        except InputRejectedError as e:
            st.error(str(e))


def render_saved_page(book: BudgetBook):
    """Render saved items with quick add."""
    st.title("⭐ Saved Items")
    st.markdown("Save things you pay often. Recurring items are added for you.")

    with st.expander("Create a saved item"):
        with st.form("create-saved-item", clear_on_submit=True):
            name = st.text_input("Name")
            amount = st.number_input("Amount", min_value=0.0, step=1.0)
            category = st.selectbox("Category", options=book.categories)
            mood = st.selectbox("Mood", options=book.moods)
            repeat = st.selectbox(
                "Repeat",
                options=list(RepeatInterval),
                format_func=lambda r: r.value.title(),
            )
            submitted = st.form_submit_button("💾 Save item", type="primary")

        if submitted:
            draft = SavedItemDraft(
                name=name,
                amount=amount,
                category=category,
                mood=mood,
                repeat=repeat,
            )
            try:
                book.create_saved_item(draft)
                st.success("✅ Saved.")
            except InputRejectedError as e:
                st.error(str(e))

    st.markdown("---")

    if not book.saved_items:
        st.info("No saved items yet.")
        return

    for item in book.saved_items:
        col1, col2, col3 = st.columns([4, 3, 2])
        with col1:
            st.markdown(f"**{item.name}** · {item.category}")
            st.caption(money(item.amount))
        with col2:
            if item.is_recurring and item.next_due:
                st.caption(f"🔁 {item.repeat.value.title()}, next on {format_display_date(item.next_due)}")
        with col3:
            if st.button("⚡ Quick add", key=f"quick-{item.id}"):
                if book.quick_add(item.id):
                    st.success(f"Added {item.name}.")
                else:
                    st.error("That saved item no longer exists.")


def render_transactions_page(book: BudgetBook):
    """Render the month's transactions with delete and export."""
    st.title(f"📋 Transactions · {month_label(book.selected_month)}")

    st.download_button(
        "⬇️ Export all to CSV",
        data=book.export_csv(),
        file_name=CSV_FILENAME,
        mime=CSV_MIME_TYPE,
    )

    st.markdown("---")

    month_tx = book.month_transactions()
    if not month_tx:
        st.info("No transactions this month.")
        return

    for tx in month_tx:
        col1, col2, col3, col4 = st.columns([2, 4, 2, 1])
        col1.write(format_display_date(tx.date))
        col2.write(f"{tx.category} · {tx.description or '-'} · {tx.mood}")
        col3.write(money(tx.signed_amount))
        if col4.button("🗑️", key=f"delete-{tx.id}"):
            book.delete_transaction(tx.id)
            st.rerun()


def render_mood_page(book: BudgetBook):
    """Render spending per mood."""
    summary = book.month_summary()
    st.title("😊 Mood Insights")
    st.markdown(f"What you spent, by how you felt, in {month_label(summary.month)}.")

    total = summary.totals.expenses
    if not total:
        st.info("No spending recorded this month.")
        return

    for mood, spent in sorted(summary.mood_spend.items(), key=lambda kv: kv[1], reverse=True):
        st.markdown(f"**{mood}** · {money(spent)}")
        st.progress(float(spent / total))


def render_settings_page(book: BudgetBook):
    """Render categories and storage status."""
    st.title("⚙️ Settings")

    st.markdown("### Categories")
    st.write(", ".join(book.categories))

    with st.form("add-category", clear_on_submit=True):
        name = st.text_input("New category")
        submitted = st.form_submit_button("➕ Add category")
    if submitted:
        try:
            added = book.add_category(name)
            st.success(f"✅ Added {added}.")
        except InputRejectedError as e:
            st.error(str(e))

    st.markdown("---")
    st.markdown("### Storage")

    from paisapal.config import validate_all_settings

    status = validate_all_settings()
    for name, key in [("Snapshot storage", "storage"), ("App settings", "app")]:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.caption(f"Snapshot file: {get_settings().storage.snapshot_path}")


if __name__ == "__main__":
    main()
