# finance_frontend/budgets.py
import pandas as pd


def calculate_budget_progress(budget, transactions):
    """
    Compare a budget against the expenses recorded in its category.

    ``transactions`` is a list of transaction dicts or a DataFrame of them.
    Recomputed on every call; nothing here is stored.
    """
    budget_amount = float(budget.get("budget_amount") or 0)
    df = transactions if isinstance(transactions, pd.DataFrame) else pd.DataFrame(list(transactions))

    spent = 0.0
    if not df.empty:
        mask = (df['type'] == 'expense') & (df['category'] == budget.get("category"))
        spent = float(pd.to_numeric(df.loc[mask, 'amount'], errors='coerce').fillna(0).sum())

    if budget_amount > 0:
        progress = min(100.0, spent / budget_amount * 100)
    else:
        progress = 100.0 if spent > 0 else 0.0

    return {
        "spent": round(spent, 2),
        "remaining": round(max(0.0, budget_amount - spent), 2),
        "progress": round(progress, 2),
        "is_over_budget": spent > budget_amount,
    }


def budgets_with_progress(budgets, transactions):
    return [{**b, **calculate_budget_progress(b, transactions)} for b in budgets]
