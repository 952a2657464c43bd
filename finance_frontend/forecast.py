# finance_frontend/forecast.py
import pandas as pd


def _totals_by_type(records):
    df = records if isinstance(records, pd.DataFrame) else pd.DataFrame(list(records))
    if df.empty or 'type' not in df.columns:
        return 0.0, 0.0
    amounts = pd.to_numeric(df['amount'], errors='coerce').fillna(0)
    income = float(amounts[df['type'] == 'income'].sum())
    expense = float(amounts[df['type'] == 'expense'].sum())
    return income, expense


def forecast_summary(pending, transactions):
    """
    Where the balance ends up once every pending entry is approved.

    Both arguments are lists of dicts or DataFrames. The current balance is
    committed income minus committed expenses.
    """
    income, expense = _totals_by_type(transactions)
    pending_income, pending_expenses = _totals_by_type(pending)
    current_balance = income - expense
    net_pending = pending_income - pending_expenses

    return {
        "current_balance": round(current_balance, 2),
        "pending_income": round(pending_income, 2),
        "pending_expenses": round(pending_expenses, 2),
        "net_pending": round(net_pending, 2),
        "projected_balance": round(current_balance + net_pending, 2),
    }
