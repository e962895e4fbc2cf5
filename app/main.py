"""
Streamlit Frontend for Expense Tracker

Pages: login, signup, dashboard, history (full list) and settings.

DESIGN PRINCIPLES:
1. Every button press is one awaited controller action
2. Failures are shown next to the control that triggered them
3. Buttons are disabled while their request is in flight
4. Nothing is shown as saved before the store confirmed it

The page reads only view models (LedgerView / ActionResult) from the
controller; it never touches the ledger directly.
"""

import asyncio
from datetime import date

import streamlit as st

from src.formatting import SUPPORTED_CURRENCIES
from src.models.transaction import (
    LedgerView,
    SortKey,
    Theme,
    TransactionDraft,
    TransactionFilter,
    TransactionType,
)
from src.orchestrator import (
    ExpenseTrackerController,
    SharedServices,
    create_app_components,
    create_shared_services,
)


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💸",
    layout="centered",
    initial_sidebar_state="expanded",
)

LIGHT_CSS = """
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .balance-card {
        padding: 16px;
        border-radius: 10px;
        margin: 6px 0;
        background-color: #f5f7fa;
    }
    .income { color: #28a745; font-weight: bold; }
    .expense { color: #dc3545; font-weight: bold; }
    .negative { color: #dc3545; }
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
    }
</style>
"""

DARK_CSS = """
<style>
    .stApp { background-color: #1e1e2e; color: #e6e6e6; }
    .balance-card { background-color: #2a2a3d; }
</style>
"""

PAGES = ["🏠 Dashboard", "📜 History", "⚙️ Settings"]


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_shared_services() -> SharedServices:
    """Storage, account registry and settings, shared by every browser session (cached)."""
    return create_shared_services()


def get_controller() -> ExpenseTrackerController:
    """Get or create this browser session's controller."""
    if "controller" not in st.session_state:
        controller = create_app_components(shared=get_shared_services())
        run_async(controller.start())
        st.session_state.controller = controller
    return st.session_state.controller


def apply_theme(controller: ExpenseTrackerController) -> None:
    st.markdown(LIGHT_CSS, unsafe_allow_html=True)
    if controller.view_parameters.theme == Theme.DARK:
        st.markdown(DARK_CSS, unsafe_allow_html=True)


def main():
    """Main application entry point."""
    controller = get_controller()
    apply_theme(controller)

    if not controller.is_authenticated:
        render_auth_page(controller)
        return

    user = controller.current_user
    st.sidebar.title("💸 Expense Tracker")
    if user is not None:
        st.sidebar.markdown(f"Signed in as **{user.display_name or user.email}**")
    st.sidebar.markdown("---")

    if "next_page" in st.session_state:
        st.session_state.page = st.session_state.pop("next_page")

    page = st.sidebar.radio("Navigate to:", PAGES, key="page")

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Logout"):
        result = run_async(controller.sign_out())
        if result.success:
            st.rerun()
        st.sidebar.error(result.message)

    if controller.last_error:
        st.error(controller.last_error)
        if st.button("🔄 Retry", disabled=controller.is_busy("load")):
            run_async(controller.reload())
            st.rerun()

    if page == PAGES[0]:
        render_dashboard_page(controller)
    elif page == PAGES[1]:
        render_history_page(controller)
    elif page == PAGES[2]:
        render_settings_page(controller)


def render_auth_page(controller: ExpenseTrackerController):
    """Login and signup tabs."""
    st.title("💸 Expense Tracker")
    if controller.has_cached_session:
        st.info("Your session has expired. Please sign in again.")

    login_tab, signup_tab = st.tabs(["Login", "Sign up"])

    with login_tab:
        with st.form("login_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button(
                "Login",
                type="primary",
                disabled=controller.is_busy("auth"),
            )
        if submitted:
            with st.spinner("Signing in..."):
                result = run_async(controller.sign_in(email, password))
            if result.success:
                st.rerun()
            st.error(result.message)

    with signup_tab:
        with st.form("signup_form"):
            name = st.text_input("Name")
            email = st.text_input("Email", key="signup_email")
            password = st.text_input("Password", type="password", key="signup_password")
            submitted = st.form_submit_button(
                "Create account",
                type="primary",
                disabled=controller.is_busy("auth"),
            )
        if submitted:
            with st.spinner("Creating your account..."):
                result = run_async(controller.sign_up(email, password, display_name=name or None))
            if result.success:
                st.rerun()
            st.error(result.message)


def render_balance(view: LedgerView):
    """Balance, income and expense cards."""
    balance_class = "negative" if view.balance.is_negative else ""
    st.markdown(f"""
    <div class="balance-card">
        <div>Balance</div>
        <div class="big-number {balance_class}">{view.balance_display}</div>
    </div>
    """, unsafe_allow_html=True)

    col1, col2 = st.columns(2)
    with col1:
        st.markdown(f"""
        <div class="balance-card">Income<br><span class="income">{view.income_display}</span></div>
        """, unsafe_allow_html=True)
    with col2:
        st.markdown(f"""
        <div class="balance-card">Expense<br><span class="expense">{view.expense_display}</span></div>
        """, unsafe_allow_html=True)


def render_transaction_list(controller: ExpenseTrackerController, view: LedgerView, key_prefix: str):
    """One row per item with a delete button."""
    if view.empty_message:
        st.info(view.empty_message)
        return

    for item in view.items:
        col1, col2, col3 = st.columns([4, 2, 1])
        with col1:
            st.markdown(f"**{item.description}**  \n{item.date}")
        with col2:
            css = "expense" if item.is_expense else "income"
            st.markdown(f'<span class="{css}">{item.display_amount}</span>', unsafe_allow_html=True)
        with col3:
            delete_key = f"delete:{item.id}"
            if st.button("🗑️", key=f"{key_prefix}-{delete_key}", disabled=controller.is_busy(delete_key)):
                result = run_async(controller.delete_transaction(item.id))
                if result.success:
                    st.rerun()
                st.error(result.message)


def render_add_form(controller: ExpenseTrackerController):
    """The add-transaction form with inline field errors."""
    st.subheader("➕ Add Transaction")
    field_errors = st.session_state.get("field_errors", {})

    with st.form("add_form", clear_on_submit=False):
        description = st.text_input("Description", placeholder="e.g., Groceries")
        if "description" in field_errors:
            st.caption(f"⚠️ {field_errors['description']}")

        amount = st.text_input("Amount", placeholder="0.00")
        if "amount" in field_errors:
            st.caption(f"⚠️ {field_errors['amount']}")

        transaction_type = st.radio(
            "Type",
            options=[TransactionType.INCOME, TransactionType.EXPENSE],
            index=None,
            horizontal=True,
            format_func=lambda t: t.value.title(),
        )
        if "type" in field_errors:
            st.caption(f"⚠️ {field_errors['type']}")

        tx_date = st.date_input("Date", value=date.today())

        submitted = st.form_submit_button(
            "Add Transaction",
            type="primary",
            disabled=controller.is_busy("add"),
        )

    if submitted:
        draft = TransactionDraft(
            description=description,
            amount=amount,
            type=transaction_type.value if transaction_type else None,
            date=tx_date.isoformat() if tx_date else None,
        )
        with st.spinner("Saving..."):
            result = run_async(controller.add_transaction(draft))
        st.session_state.field_errors = result.field_errors
        if result.success:
            st.success(result.message)
            st.session_state.next_page = PAGES[1]
            st.rerun()
        elif result.redirect_to_login:
            st.warning(result.message)
            st.rerun()
        else:
            st.error(result.message)


def render_dashboard_page(controller: ExpenseTrackerController):
    """Balance summary, recent transactions and the add form."""
    view = controller.dashboard_view()
    st.title("🏠 Dashboard")
    st.caption(view.today)

    render_balance(view)
    st.markdown("---")
    st.subheader("Recent Transactions")
    render_transaction_list(controller, view, key_prefix="dashboard")
    st.markdown("---")
    render_add_form(controller)


def render_history_page(controller: ExpenseTrackerController):
    """Full transaction list with filter and sort controls."""
    st.title("📜 History")

    col1, col2 = st.columns(2)
    with col1:
        filters = list(TransactionFilter)
        selected_filter = st.selectbox(
            "Show",
            options=filters,
            index=filters.index(controller.view_parameters.filter),
            format_func=lambda f: f.value.title(),
        )
    with col2:
        sort_keys = list(SortKey)
        selected_sort = st.selectbox(
            "Sort by",
            options=sort_keys,
            index=sort_keys.index(controller.view_parameters.sort_key),
            format_func=lambda s: s.value.title(),
        )

    controller.set_filter(selected_filter)
    controller.set_sort(selected_sort)

    view = controller.history_view()
    render_balance(view)
    st.markdown("---")
    render_transaction_list(controller, view, key_prefix="history")


def render_settings_page(controller: ExpenseTrackerController):
    """Currency, theme and connection status."""
    st.title("⚙️ Settings")

    st.markdown("### Preferences")
    codes = list(SUPPORTED_CURRENCIES)
    current = controller.view_parameters.currency
    currency = st.selectbox(
        "Currency",
        options=codes,
        index=codes.index(current) if current in codes else 0,
        format_func=lambda c: f"{c} ({SUPPORTED_CURRENCIES[c].symbol})",
    )
    if currency != current:
        result = controller.set_currency(currency)
        if not result.success:
            st.error(result.message)
        st.rerun()

    dark = st.toggle("Dark mode", value=controller.view_parameters.theme == Theme.DARK)
    if dark != (controller.view_parameters.theme == Theme.DARK):
        controller.toggle_theme()
        st.rerun()

    st.markdown("---")
    st.markdown("### Connection Status")

    from src.config import validate_all_settings

    status = validate_all_settings()
    if status.get("google_sheets", False):
        st.success("✅ Google Sheets (Storage) - Configured")
    else:
        error = status.get("google_sheets_error", "Not configured")
        st.warning(f"⚠️ Google Sheets (Storage) - {error}. Using in-memory storage.")

    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
