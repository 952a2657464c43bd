# finance_frontend/streamlit_app.py
import json
from datetime import date

import pandas as pd
import streamlit as st

from finance_frontend.api import ApiClient, ApiError
from finance_frontend.budgets import budgets_with_progress
from finance_frontend.filters import filter_transactions
from finance_frontend.forecast import forecast_summary
from finance_frontend.forms import index_of, options_with_current
from finance_frontend.hooks import make_hooks

ACCOUNT_TYPES = ["bank", "credit", "cash", "savings", "investment", "other"]
NOTE_TYPES = ["tip", "goal", "reminder"]
NOTE_PRIORITIES = ["low", "medium", "high"]
BUDGET_PERIODS = ["monthly", "weekly", "yearly"]
FALLBACK_CURRENCIES = ["AED", "USD", "EUR", "GBP", "INR", "PKR", "SAR", "CNY", "JPY"]
FALLBACK_CATEGORIES = ["Other"]

# ---------------- Page config ----------------
st.set_page_config(page_title="Finance Tracker", layout="wide", page_icon="💸")


# ---------------- Session State Management ----------------
def init_session_state():
    if "client" not in st.session_state:
        st.session_state.client = ApiClient()
    if "hooks" not in st.session_state:
        st.session_state.hooks = make_hooks(st.session_state.client)
    if "user" not in st.session_state:
        st.session_state.user = None
    if "lookups" not in st.session_state:
        st.session_state.lookups = {}


def client():
    return st.session_state.client


def hook(name):
    return st.session_state.hooks[name]


def clear_user_cache():
    for h in st.session_state.hooks.values():
        h.clear()
    st.session_state.lookups = {}


def lookup(name, fetch, fallback):
    """Categories and currencies change rarely; fetch them once per session."""
    if name not in st.session_state.lookups:
        try:
            st.session_state.lookups[name] = fetch()
        except ApiError:
            return fallback
    return st.session_state.lookups[name]


def currency_codes():
    return lookup("currencies", lambda: [c["code"] for c in client().currencies()], FALLBACK_CURRENCIES)


def categories():
    return lookup("categories", client().categories, FALLBACK_CATEGORIES)


# ---------------- Helpers ----------------
def format_currency(amount, currency="AED"):
    return f"{currency} {float(amount or 0):,.2f}"


def parse_tags(text):
    return [t.strip() for t in (text or "").split(",") if t.strip()]


def run_action(action, success_message):
    """Call a mutation and report the outcome inline."""
    try:
        result = action()
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return None
    st.success(f"✅ {success_message}")
    return result


def pick_record(records, label, describe, key):
    if not records:
        return None
    ids = [r["id"] for r in records]
    by_id = {r["id"]: r for r in records}
    selected = st.selectbox(label, ids, format_func=lambda i: describe(by_id[i]), key=key)
    return by_id.get(selected)


def show_hook_error(h):
    if h.error:
        st.error(f"❌ {h.error}")


# ---------------- Authentication ----------------
def handle_auth(mode, name, email, password):
    try:
        if mode == "Register":
            payload = client().register(name, email, password)
        else:
            payload = client().login(email, password)
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return False

    st.session_state.user = payload["user"]
    clear_user_cache()
    st.success("✅ Login successful!")
    return True


def render_sidebar():
    with st.sidebar:
        st.title("🔐 Account")

        if client().authenticated:
            user = st.session_state.user or {}
            st.success(f"Logged in as **{user.get('name', user.get('email', ''))}**")
            if st.button("🚪 Logout", use_container_width=True, key="logout_btn"):
                client().logout()
                st.session_state.user = None
                clear_user_cache()
                st.rerun()
        else:
            mode = st.radio("Action", ["Login", "Register"], horizontal=True, key="auth_tab")
            name = st.text_input("👤 Name", key="name_input") if mode == "Register" else ""
            email = st.text_input("📧 Email", key="email_input")
            password = st.text_input("🔒 Password", type="password", key="password_input")

            if st.button("Submit", use_container_width=True, key="auth_submit"):
                if email and password and (mode == "Login" or name):
                    if handle_auth(mode, name, email, password):
                        st.rerun()
                else:
                    st.warning("Please fill in every field")
            return None

        st.markdown("---")
        return st.radio("Navigate", list(PAGES), key="page")


# ---------------- Dashboard ----------------
def render_dashboard():
    st.header("📊 Dashboard Overview")
    try:
        summary = client().dashboard()
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return

    currency = (st.session_state.user or {}).get("currency", "AED")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("💵 Income", format_currency(summary["income"], currency))
    col2.metric("💰 Expenses", format_currency(summary["expenses"], currency))
    col3.metric("📈 Net", format_currency(summary["balance"], currency))
    col4.metric("🏦 Accounts", format_currency(summary["accounts_total"], currency))

    left, right = st.columns(2)
    with left:
        st.subheader("Spending by category")
        if summary["by_category"]:
            st.dataframe(pd.DataFrame(summary["by_category"]), use_container_width=True, hide_index=True)
        else:
            st.info("No expenses yet")
    with right:
        st.subheader("Recent transactions")
        if summary["recent"]:
            recent = pd.DataFrame(summary["recent"])[["date", "type", "description", "amount", "category"]]
            st.dataframe(recent, use_container_width=True, hide_index=True)
        else:
            st.info("💳 No transactions found. Add your first transaction!")


# ---------------- Transactions ----------------
def transaction_form(key, record=None, accounts=()):
    record = record or {}
    account_ids = [""] + [a["id"] for a in accounts]
    account_names = {a["id"]: a["name"] for a in accounts}
    cats = options_with_current(categories(), record.get("category"))
    currencies = options_with_current(currency_codes(), record.get("currency"))

    with st.form(key, clear_on_submit=record == {}):
        col_a, col_b = st.columns(2)
        with col_a:
            t_type = st.selectbox("🔸 Type", ["expense", "income"], index=index_of(["expense", "income"], record.get("type")))
            t_amount = st.number_input("💰 Amount", min_value=0.0, value=float(record.get("amount", 0.0)), step=10.0, format="%.2f")
            t_desc = st.text_input("📝 Description", value=record.get("description", ""))
            t_date = st.date_input("📅 Date", value=pd.to_datetime(record["date"]).date() if record.get("date") else date.today())
        with col_b:
            t_cat = st.selectbox("🏷️ Category", cats, index=index_of(cats, record.get("category") or "Other", len(cats) - 1))
            t_currency = st.selectbox("💱 Currency", currencies, index=index_of(currencies, record.get("currency")))
            t_account = st.selectbox("🏦 Account", account_ids, index=index_of(account_ids, record.get("account_id")),
                                     format_func=lambda i: account_names.get(i, "(none)"))
            t_tags = st.text_input("Tags (comma separated)", value=", ".join(record.get("tags", [])))
        submitted = st.form_submit_button("💾 Save", use_container_width=True)

    if not submitted:
        return None
    return {
        "type": t_type,
        "amount": t_amount,
        "description": t_desc,
        "date": t_date.isoformat(),
        "category": t_cat,
        "currency": t_currency,
        "account_id": t_account or None,
        "tags": parse_tags(t_tags),
    }


def render_bulk_add():
    with st.expander("📁 Bulk Add"):
        template = pd.DataFrame(columns=["type", "description", "amount", "category", "date"])
        rows = st.data_editor(template, num_rows="dynamic", use_container_width=True, key="bulk_rows")
        if st.button("🚀 Add all rows", use_container_width=True, key="bulk_btn"):
            payload = [
                {k: v for k, v in row.items() if pd.notna(v) and v != ""}
                for row in rows.to_dict("records")
            ]
            result = run_action(lambda: hook("transactions").bulk_add(payload), "Transactions added")
            if result:
                st.caption(f"{result['inserted']} transactions added")


def render_transactions():
    st.header("💳 Transactions")
    tx_hook = hook("transactions")
    accounts = hook("accounts").fetch()

    with st.expander("➕ Add Transaction", expanded=True):
        data = transaction_form("add_tx", accounts=accounts)
        if data:
            run_action(lambda: tx_hook.create(data), f"Added {data['description']}")

    render_bulk_add()

    st.subheader("📋 Your Transactions")
    df = tx_hook.frame()
    show_hook_error(tx_hook)
    if df.empty:
        st.info("💳 No transactions found. Add your first transaction above!")
        return

    col1, col2 = st.columns(2)
    with col1:
        search_term = st.text_input("🔍 Search description or amount", key="search_term")
    with col2:
        type_filter = st.selectbox("Type", ["all", "income", "expense"], key="type_filter")

    account_names = {a["id"]: a["name"] for a in accounts}
    with st.expander("🔎 More filters"):
        col_a, col_b, col_c = st.columns(3)
        with col_a:
            cat_filter = st.multiselect("Categories", sorted(df['category'].dropna().unique()), key="cat_filter")
            all_tags = sorted({t for tags in df['tags'] if isinstance(tags, list) for t in tags})
            tag_filter = st.multiselect("Tags (all of)", all_tags, key="tag_filter")
        with col_b:
            account_filter = st.selectbox("Account", [""] + list(account_names), key="account_filter",
                                          format_func=lambda i: account_names.get(i, "Any"))
            use_dates = st.checkbox("Filter by date", key="use_dates")
            date_from = st.date_input("From", value=date.today().replace(day=1), key="date_from")
            date_to = st.date_input("To", value=date.today(), key="date_to")
        with col_c:
            amount_min = st.number_input("Min amount", min_value=0.0, value=0.0, step=10.0, key="amount_min")
            amount_max = st.number_input("Max amount (0 = no limit)", min_value=0.0, value=0.0, step=10.0,
                                         key="amount_max")

    filtered_df = filter_transactions(
        df,
        search=search_term,
        tx_type=type_filter,
        categories=cat_filter,
        tags=tag_filter,
        account_id=account_filter or None,
        date_from=date_from if use_dates else None,
        date_to=date_to if use_dates else None,
        amount_min=amount_min or None,
        amount_max=amount_max or None,
    )
    st.caption(f"Showing {len(filtered_df)} of {len(df)} transactions")

    display_df = filtered_df.drop(columns=["id", "account_id"]).copy()
    display_df['date'] = display_df['date'].dt.strftime('%Y-%m-%d')
    st.dataframe(display_df, use_container_width=True, hide_index=True)

    st.subheader("✏️ Edit or delete")
    record = pick_record(
        tx_hook.items, "Transaction",
        lambda t: f"{t['date'][:10]} · {t['description']} · {format_currency(t['amount'], t['currency'])}",
        key="edit_tx_pick"
    )
    if record:
        data = transaction_form(f"edit_tx_{record['id']}", record=record, accounts=accounts)
        if data:
            run_action(lambda: tx_hook.update(record["id"], data), "Transaction updated")
        if st.button("🗑️ Delete transaction", key="delete_tx"):
            run_action(lambda: tx_hook.delete(record["id"]), "Transaction deleted")

    if st.button("🔄 Refresh Data", use_container_width=True, key="refresh_tx"):
        tx_hook.refetch()


# ---------------- Accounts ----------------
def account_form(key, record=None):
    record = record or {}
    currencies = options_with_current(currency_codes(), record.get("currency"))
    with st.form(key, clear_on_submit=record == {}):
        col_a, col_b = st.columns(2)
        with col_a:
            name = st.text_input("Name", value=record.get("name", ""))
            a_type = st.selectbox("Type", ACCOUNT_TYPES, index=index_of(ACCOUNT_TYPES, record.get("type")))
            balance = st.number_input("Balance", value=float(record.get("balance", 0.0)), step=100.0, format="%.2f")
            currency = st.selectbox("Currency", currencies, index=index_of(currencies, record.get("currency")))
        with col_b:
            number = st.text_input("Account number", value=record.get("account_number") or "")
            institution = st.text_input("Institution", value=record.get("institution") or "")
            description = st.text_area("Description", value=record.get("description") or "")
        submitted = st.form_submit_button("💾 Save", use_container_width=True)

    if not submitted:
        return None
    return {
        "name": name, "type": a_type, "balance": balance, "currency": currency,
        "account_number": number, "institution": institution, "description": description,
    }


def render_accounts():
    st.header("🏦 Accounts")
    acc_hook = hook("accounts")

    with st.expander("➕ Add Account"):
        data = account_form("add_account")
        if data:
            run_action(lambda: acc_hook.create(data), f"Added {data['name']}")

    accounts = acc_hook.fetch()
    show_hook_error(acc_hook)
    if not accounts:
        st.info("No accounts yet")
        return

    cols = st.columns(min(len(accounts), 3))
    for i, account in enumerate(accounts):
        cols[i % len(cols)].metric(
            f"{account['name']} ({account['type']})",
            format_currency(account['balance'], account['currency'])
        )

    record = pick_record(accounts, "Account", lambda a: a["name"], key="edit_account_pick")
    if record:
        data = account_form(f"edit_account_{record['id']}", record=record)
        if data:
            run_action(lambda: acc_hook.update(record["id"], data), "Account updated")
        if st.button("🗑️ Delete account", key="delete_account"):
            run_action(lambda: acc_hook.delete(record["id"]), "Account deleted")

    if st.button("🔄 Refresh", use_container_width=True, key="refresh_accounts"):
        acc_hook.refetch()


# ---------------- Budgets ----------------
def render_budgets():
    st.header("🎯 Budgets")
    budget_hook = hook("budgets")
    cats = categories()
    currencies = currency_codes()

    with st.expander("➕ Add Budget"):
        with st.form("add_budget", clear_on_submit=True):
            category = st.selectbox("Category", cats)
            amount = st.number_input("Budget amount", min_value=0.0, step=50.0, format="%.2f")
            currency = st.selectbox("Currency", currencies)
            period = st.selectbox("Period", BUDGET_PERIODS)
            if st.form_submit_button("💾 Save", use_container_width=True):
                run_action(
                    lambda: budget_hook.create({"category": category, "budget_amount": amount,
                                                "currency": currency, "period": period}),
                    f"Budget for {category} added"
                )

    budgets = budget_hook.fetch()
    show_hook_error(budget_hook)
    if not budgets:
        st.info("No budgets yet")
        return

    for budget in budgets_with_progress(budgets, hook("transactions").frame()):
        with st.container(border=True):
            st.markdown(f"**{budget['category']}** · {budget['period']}")
            col1, col2, col3 = st.columns(3)
            col1.metric("Budget", format_currency(budget["budget_amount"], budget["currency"]))
            col2.metric("Spent", format_currency(budget["spent"], budget["currency"]))
            col3.metric("Remaining", format_currency(budget["remaining"], budget["currency"]))
            st.progress(int(budget["progress"]), text=f"{budget['progress']:.1f}%")
            if budget["is_over_budget"]:
                over = budget["spent"] - budget["budget_amount"]
                st.error(f"Over budget by {format_currency(over, budget['currency'])}")
            if st.button("🗑️ Delete", key=f"delete_budget_{budget['id']}"):
                run_action(lambda b=budget: budget_hook.delete(b["id"]), "Budget deleted")


# ---------------- Notes ----------------
def render_notes():
    st.header("📝 Notes")
    note_hook = hook("notes")

    with st.expander("➕ Add Note"):
        with st.form("add_note", clear_on_submit=True):
            title = st.text_input("Title")
            content = st.text_area("Content")
            col1, col2 = st.columns(2)
            n_type = col1.selectbox("Type", NOTE_TYPES)
            priority = col2.selectbox("Priority", NOTE_PRIORITIES, index=1)
            tags = st.text_input("Tags (comma separated)")
            if st.form_submit_button("💾 Save", use_container_width=True):
                run_action(
                    lambda: note_hook.create({"title": title, "content": content, "type": n_type,
                                              "priority": priority, "tags": parse_tags(tags)}),
                    "Note added"
                )

    notes = note_hook.fetch()
    show_hook_error(note_hook)
    if not notes:
        st.info("No notes yet")
        return

    for note in notes:
        with st.expander(f"[{note['priority']}] {note['title']} · {note['type']}"):
            st.write(note["content"])
            if note["tags"]:
                st.caption(", ".join(note["tags"]))
            if st.button("🗑️ Delete", key=f"delete_note_{note['id']}"):
                run_action(lambda n=note: note_hook.delete(n["id"]), "Note deleted")


# ---------------- Forecasting ----------------
def render_forecast_overview(pending_items):
    summary = forecast_summary(pending_items, hook("transactions").fetch())
    currency = (st.session_state.user or {}).get("currency", "AED")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("💰 Current Balance", format_currency(summary["current_balance"], currency))
    col2.metric("📥 Pending Income", format_currency(summary["pending_income"], currency))
    col3.metric("📤 Pending Expenses", format_currency(summary["pending_expenses"], currency))
    col4.metric("🔮 Projected Balance", format_currency(summary["projected_balance"], currency),
                delta=format_currency(summary["net_pending"], currency))


def render_forecasting():
    st.header("🔮 Forecasting")
    pending_hook = hook("pending")
    accounts = hook("accounts").fetch()
    account_ids = [""] + [a["id"] for a in accounts]
    account_names = {a["id"]: a["name"] for a in accounts}
    currencies = currency_codes()

    with st.expander("➕ Add expected transaction", expanded=True):
        with st.form("add_pending", clear_on_submit=True):
            col_a, col_b = st.columns(2)
            p_type = col_a.selectbox("Type", ["income", "expense"])
            p_amount = col_a.number_input("Amount", min_value=0.0, step=100.0, format="%.2f")
            p_currency = col_a.selectbox("💱 Currency", currencies)
            p_desc = col_b.text_input("Description")
            p_date = col_b.date_input("Expected date", value=date.today())
            p_account = col_b.selectbox("🏦 Account", account_ids, format_func=lambda i: account_names.get(i, "(none)"))
            p_cat = st.selectbox("Category", categories())
            if st.form_submit_button("💾 Save", use_container_width=True):
                run_action(
                    lambda: pending_hook.create({"type": p_type, "amount": p_amount, "description": p_desc,
                                                 "date": p_date.isoformat(), "category": p_cat,
                                                 "currency": p_currency, "account_id": p_account or None}),
                    "Expected transaction added"
                )

    items = pending_hook.fetch()
    show_hook_error(pending_hook)
    render_forecast_overview(items)
    if not items:
        st.info("Nothing pending")
        return

    for item in items:
        col1, col2, col3 = st.columns([4, 1, 1])
        sign = "+" if item["type"] == "income" else "-"
        account = account_names.get(item.get("account_id"))
        label = f"{item['date'][:10]} · {item['description']} · {sign}{format_currency(item['amount'], item['currency'])}"
        col1.write(f"{label} · {account}" if account else label)
        if col2.button("✅ Approve", key=f"approve_{item['id']}"):
            run_action(lambda i=item: pending_hook.approve(i["id"]), "Approved and added to transactions")
        if col3.button("🗑️ Delete", key=f"delete_pending_{item['id']}"):
            run_action(lambda i=item: pending_hook.delete(i["id"]), "Deleted")


# ---------------- Settings ----------------
def render_settings():
    st.header("⚙️ Settings")
    try:
        profile = client().get_profile()
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return

    currencies = options_with_current(currency_codes(), profile["currency"])
    with st.form("profile_form"):
        name = st.text_input("Name", value=profile["name"])
        email = st.text_input("Email", value=profile["email"])
        currency = st.selectbox("Preferred currency", currencies, index=index_of(currencies, profile["currency"]))
        if st.form_submit_button("💾 Save profile"):
            user = run_action(lambda: client().update_profile({"name": name, "email": email, "currency": currency}),
                              "Profile updated")
            if user:
                st.session_state.user = user

    photo = st.file_uploader("Profile photo", type=["png", "jpg", "jpeg", "gif", "webp"], key="photo_upload")
    if photo and st.button("📷 Upload photo", key="upload_photo"):
        run_action(lambda: client().upload_profile_photo(photo.name, photo.getvalue()), "Photo uploaded")

    with st.form("password_form", clear_on_submit=True):
        current = st.text_input("Current password", type="password")
        new = st.text_input("New password", type="password")
        if st.form_submit_button("🔒 Change password"):
            run_action(lambda: client().change_password(current, new), "Password changed")

    st.subheader("📦 Data")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Prepare export", key="prepare_export"):
            data = run_action(client().export_data, "Export ready")
            if data:
                st.download_button("⬇️ Download JSON", data=json.dumps(data, indent=2),
                                   file_name="finance-export.json", mime="application/json")
    with col2:
        upload = st.file_uploader("Import JSON export", type=["json"], key="import_upload")
        if upload and st.button("⬆️ Import", key="import_btn"):
            try:
                document = json.loads(upload.getvalue().decode("utf-8"))
            except (UnicodeDecodeError, json.JSONDecodeError):
                st.error("❌ File is not valid JSON")
                return
            if run_action(lambda: client().import_data(document), "Data imported"):
                clear_user_cache()


PAGES = {
    "Dashboard": render_dashboard,
    "Transactions": render_transactions,
    "Accounts": render_accounts,
    "Budgets": render_budgets,
    "Notes": render_notes,
    "Forecasting": render_forecasting,
    "Settings": render_settings,
}


def main():
    init_session_state()
    page = render_sidebar()
    if not client().authenticated or page is None:
        st.info("🔐 Please login to manage your finances")
        return
    PAGES[page]()


main()
