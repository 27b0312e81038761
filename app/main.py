"""
Streamlit Frontend for Budget Reçus

A single screen to follow a monthly budget per payment card: pick a card
and a month, see what is left, scan a receipt and keep the expense.

DESIGN PRINCIPLES:
1. One screen, everything visible
2. Nothing is saved without an explicit "Save" on a reviewed draft
3. Clear error messages; a failed scan asks for a new photo
4. Visual feedback for every operation

Every widget calls exactly one LedgerController method.
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from budget_recus.controller import LedgerController, create_controller
from budget_recus.ledger import LedgerError
from budget_recus.months import next_month, prev_month, split_month
from budget_recus.models.ledger import Draft, OCRProgress
from budget_recus.services.ocr import RecognitionFailedError
from budget_recus.services.transfer import ImportDocumentError, export_filename
from budget_recus.validation import InvalidEntryError


# Page configuration
st.set_page_config(
    page_title="Budget Reçus",
    page_icon="🧾",
    layout="centered",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
    }
    .negative {
        color: #dc3545;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_controller() -> LedgerController:
    """Get or create the controller (cached), hydrated once."""
    controller = create_controller()
    run_async(controller.hydrate())
    return controller


def format_eur(value: Decimal) -> str:
    return f"{value:,.2f} €".replace(",", " ").replace(".", ",")


def month_choices(current: str, span: int = 12) -> list[str]:
    """The displayed month with a year of neighbours on both sides."""
    months = [current]
    before, after = current, current
    for _ in range(span):
        before = prev_month(before)
        after = next_month(after)
        months.insert(0, before)
        months.append(after)
    return months


def month_label(month: str) -> str:
    year, number = split_month(month)
    return date(year, number, 1).strftime("%B %Y")


def main():
    """Main application entry point."""
    controller = get_controller()

    if "uploader_key" not in st.session_state:
        st.session_state.uploader_key = 0
    if "pending_import" not in st.session_state:
        st.session_state.pending_import = None

    st.title("🧾 Budget Reçus")

    render_selectors(controller)
    render_summary(controller)
    render_scan(controller)

    if controller.state.draft is not None:
        render_draft(controller, controller.state.draft)

    render_expenses(controller)
    render_sidebar(controller)


def render_selectors(controller: LedgerController):
    """Card and month selection."""
    state = controller.state
    col1, col2 = st.columns(2)

    with col1:
        card_ids = [card.id for card in state.cards]
        names = {card.id: card.name for card in state.cards}
        selected = st.selectbox(
            "Card",
            card_ids,
            index=card_ids.index(state.current_card_id),
            format_func=names.get,
        )
        if selected != state.current_card_id:
            run_async(controller.select_card(selected))
            st.rerun()

    with col2:
        months = month_choices(state.current_month)
        selected_month = st.selectbox(
            "Month",
            months,
            index=months.index(state.current_month),
            format_func=month_label,
        )
        if selected_month != state.current_month:
            run_async(controller.select_month(selected_month))
            st.rerun()


def render_summary(controller: LedgerController):
    """Budget, available, spent and remaining for the selection."""
    summary = controller.summary()
    card = controller.ledger.card(summary.card_id)

    col1, col2, col3 = st.columns(3)
    col1.metric("Available", format_eur(summary.available))
    col2.metric("Spent", format_eur(summary.spent))
    remaining_class = "big-number negative" if summary.remaining < 0 else "big-number"
    col3.markdown(
        f'<div>Remaining</div><div class="{remaining_class}">'
        f"{format_eur(summary.remaining)}</div>",
        unsafe_allow_html=True,
    )

    st.caption(
        f"Monthly budget {format_eur(summary.budget)} · "
        f"card started {month_label(card.start_month)}"
    )

    with st.expander("✏️ Edit this month's budget"):
        with st.form("budget_form"):
            value = st.text_input("Budget (€)", value=str(summary.budget))
            if st.form_submit_button("Save budget"):
                try:
                    run_async(controller.edit_budget(value))
                    st.rerun()
                except InvalidEntryError as e:
                    st.error(str(e))


def render_scan(controller: LedgerController):
    """Receipt upload and OCR, or a blank manual entry."""
    uploaded_file = st.file_uploader(
        "📷 Scan a receipt",
        type=["jpg", "jpeg", "png", "webp"],
        key=f"receipt_{st.session_state.uploader_key}",
    )

    col1, col2 = st.columns(2)
    with col1:
        if uploaded_file and st.button("🔍 Read receipt", type="primary"):
            progress_bar = st.progress(0.0, text="Starting...")

            def on_progress(event: OCRProgress):
                progress_bar.progress(event.progress, text=event.phase)

            try:
                run_async(controller.scan_receipt(
                    uploaded_file.getvalue(),
                    on_progress=on_progress,
                ))
            except RecognitionFailedError as e:
                st.session_state.uploader_key += 1
                st.error(str(e))
                return
            st.session_state.uploader_key += 1
            st.rerun()

    with col2:
        if st.button("➕ Add manually"):
            controller.new_manual_draft()
            st.rerun()


def render_draft(controller: LedgerController, draft: Draft):
    """Review form: nothing is saved until the user presses Save."""
    st.markdown("---")
    st.subheader("✏️ Edit expense" if draft.is_edit else "🧾 Review expense")

    if draft.raw_text:
        with st.expander("Recognized text"):
            st.text(draft.raw_text)

    with st.form("draft_form"):
        amount = st.text_input(
            "Amount (€)",
            value="" if draft.amount is None else str(draft.amount),
        )
        expense_date = st.text_input("Date (YYYY-MM-DD)", value=draft.date)
        merchant = st.text_input("Merchant", value=draft.merchant)
        note = st.text_input("Note", value=draft.note)

        col1, col2 = st.columns(2)
        save = col1.form_submit_button("✅ Save", type="primary")
        discard = col2.form_submit_button("❌ Discard")

    if save:
        try:
            outcome = run_async(controller.save_draft(amount, expense_date, merchant, note))
        except InvalidEntryError as e:
            st.error(str(e))
            return
        for warning in outcome.warnings:
            st.toast(warning, icon="⚠️")
        st.rerun()

    if discard:
        controller.discard_draft()
        st.rerun()


def render_expenses(controller: LedgerController):
    """Expenses of the selection, newest first."""
    summary = controller.summary()
    st.markdown("---")
    st.subheader(f"Expenses · {month_label(summary.month)}")

    if not summary.expenses:
        st.info("No expenses this month.")
        return

    for expense in summary.expenses:
        col1, col2, col3, col4 = st.columns([3, 2, 1, 1])
        col1.markdown(f"**{expense.merchant}**  \n{expense.note}")
        col2.markdown(
            f"{format_eur(expense.amount)}  \n{expense.date_iso.date().isoformat()}"
        )
        if col3.button("✏️", key=f"edit_{expense.id}"):
            controller.edit_expense(expense.id)
            st.rerun()
        if col4.button("🗑️", key=f"delete_{expense.id}"):
            try:
                run_async(controller.delete_expense(expense.id))
            except LedgerError as e:
                st.error(str(e))
                return
            st.rerun()


def render_sidebar(controller: LedgerController):
    """Cards and data transfer."""
    st.sidebar.title("⚙️ Settings")

    st.sidebar.subheader("New card")
    with st.sidebar.form("card_form", clear_on_submit=True):
        name = st.text_input("Card name")
        start = st.text_input(
            "Start month (YYYY-MM)",
            value=controller.state.current_month,
        )
        if st.form_submit_button("Add card"):
            try:
                run_async(controller.add_card(name, start_month=start))
                st.rerun()
            except InvalidEntryError as e:
                st.sidebar.error(str(e))

    st.sidebar.subheader("Data")
    st.sidebar.download_button(
        "📤 Export (JSON)",
        data=controller.export_document(),
        file_name=export_filename(),
        mime="application/json",
    )

    imported = st.sidebar.file_uploader("📥 Import (JSON)", type=["json"])
    if imported is not None and st.sidebar.button("Import this file"):
        text = imported.getvalue().decode("utf-8", errors="replace")
        try:
            run_async(controller.import_document(text, confirm=False))
        except ImportDocumentError as e:
            st.sidebar.error(str(e))
            return
        st.session_state.pending_import = text

    if st.session_state.pending_import is not None:
        st.sidebar.warning("Importing replaces ALL current data. Continue?")
        col1, col2 = st.sidebar.columns(2)
        if col1.button("Yes, replace"):
            text = st.session_state.pending_import
            st.session_state.pending_import = None
            try:
                run_async(controller.import_document(text, confirm=True))
            except ImportDocumentError as e:
                st.sidebar.error(str(e))
                return
            st.rerun()
        if col2.button("Cancel"):
            st.session_state.pending_import = None
            st.rerun()


if __name__ == "__main__":
    main()
