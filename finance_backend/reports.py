# finance_backend/reports.py
import pandas as pd
from flask import Blueprint, g, jsonify

from . import guard
from .accounts import accounts
from .errors import handle_errors
from .transactions import transactions

RECENT_COUNT = 5

bp = guard.protect(Blueprint("reports", __name__, url_prefix="/api"))


def empty_summary(accounts_total=0.0):
    return {
        "income": 0.0,
        "expenses": 0.0,
        "balance": 0.0,
        "accounts_total": accounts_total,
        "by_category": [],
        "daily": [],
        "recent": [],
    }


def dashboard_summary(tx_records, account_records):
    """Totals, expense breakdown by category, daily series and most recent transactions."""
    accounts_total = round(float(sum(float(a.get("balance") or 0) for a in account_records)), 2)
    if not tx_records:
        return empty_summary(accounts_total)

    df = pd.DataFrame(tx_records)
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce').fillna(0)
    df['date'] = pd.to_datetime(df['date'], errors='coerce')

    income = float(df.loc[df['type'] == 'income', 'amount'].sum())
    expenses = float(df.loc[df['type'] == 'expense', 'amount'].sum())

    by_category = []
    expense_df = df[df['type'] == 'expense']
    if not expense_df.empty:
        totals = expense_df.groupby('category')['amount'].sum().sort_values(ascending=False)
        for category, amount in totals.items():
            by_category.append({
                "category": category,
                "amount": round(float(amount), 2),
                "percent": round(float(amount) / expenses * 100, 2) if expenses else 0,
            })

    dated = df.dropna(subset=['date']).copy()
    daily = []
    if not dated.empty:
        dated['day'] = dated['date'].dt.strftime('%Y-%m-%d')
        pivot = dated.pivot_table(index='day', columns='type', values='amount', aggfunc='sum', fill_value=0)
        for day, row in pivot.sort_index().iterrows():
            daily.append({
                "date": day,
                "income": round(float(row.get('income', 0)), 2),
                "expense": round(float(row.get('expense', 0)), 2),
            })

    recent_ids = df.sort_values('date', ascending=False, na_position='last')['id'].head(RECENT_COUNT).tolist()
    by_id = {t['id']: t for t in tx_records}

    return {
        "income": round(income, 2),
        "expenses": round(expenses, 2),
        "balance": round(income - expenses, 2),
        "accounts_total": accounts_total,
        "by_category": by_category,
        "daily": daily,
        "recent": [by_id[i] for i in recent_ids],
    }


@bp.route("/dashboard", methods=["GET"])
@handle_errors
def dashboard():
    summary = dashboard_summary(transactions.list(g.user_id), accounts.list(g.user_id))
    return jsonify(summary)
