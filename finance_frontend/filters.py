# finance_frontend/filters.py
import pandas as pd


def filter_transactions(df, search=None, tx_type="all", categories=(), tags=(), account_id=None,
                        date_from=None, date_to=None, amount_min=None, amount_max=None):
    """
    Narrow a transactions DataFrame (as built by ``TransactionsHook.frame``).

    Every criterion is optional and they combine with AND. ``tags`` keeps rows
    carrying all of the given tags. Date bounds are inclusive; a ``date_to``
    without a time covers that whole day.
    """
    if df.empty:
        return df

    mask = pd.Series(True, index=df.index)

    if search:
        term = str(search).lower()
        in_desc = df['description'].fillna('').astype(str).str.lower().str.contains(term, regex=False)
        in_amount = df['amount'].astype(str).str.contains(term, regex=False)
        mask &= in_desc | in_amount
    if tx_type and tx_type != "all":
        mask &= df['type'] == tx_type
    if categories:
        mask &= df['category'].isin(list(categories))
    if tags:
        wanted = set(tags)
        mask &= df['tags'].apply(lambda t: isinstance(t, (list, tuple)) and wanted.issubset(t))
    if account_id:
        mask &= df['account_id'] == account_id

    dates = pd.to_datetime(df['date'], errors='coerce')
    if date_from is not None:
        mask &= dates >= pd.Timestamp(date_from)
    if date_to is not None:
        end = pd.Timestamp(date_to)
        if end == end.normalize():
            end = end + pd.Timedelta(days=1) - pd.Timedelta(microseconds=1)
        mask &= dates <= end

    amounts = pd.to_numeric(df['amount'], errors='coerce')
    if amount_min is not None:
        mask &= amounts >= float(amount_min)
    if amount_max is not None:
        mask &= amounts <= float(amount_max)

    return df[mask]
