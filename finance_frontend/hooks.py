# finance_frontend/hooks.py
"""
Per-resource fetch-and-cache state.

Each hook owns the last list it fetched for one resource. Mutations go through
the hook and trigger a full re-fetch of that resource only; other hooks are
not told, so e.g. adding a transaction leaves the accounts hook stale until it
is refreshed itself.
"""
import logging
import time

import pandas as pd

from .api import RESOURCES, ApiError

logger = logging.getLogger("finance-frontend")

CACHE_SECONDS = 120

FRAME_COLUMNS = {
    "transactions": ["id", "date", "type", "description", "amount", "currency", "category", "tags", "account_id"],
    "pending": ["id", "date", "type", "description", "amount", "currency", "category", "account_id"],
}


class ResourceHook:
    def __init__(self, client, resource, max_age=CACHE_SECONDS, clock=time.time):
        self.client = client
        self.resource = resource
        self.max_age = max_age
        self.clock = clock
        self.items = []
        self.loading = False
        self.error = None
        self._fetched_at = None

    @property
    def fresh(self):
        return self._fetched_at is not None and self.clock() - self._fetched_at < self.max_age

    def fetch(self, force=False):
        """Return cached items, or fetch them when stale or ``force`` is set."""
        if self.fresh and not force:
            return self.items

        self.loading = True
        self.error = None
        try:
            self.items = self.client.list(self.resource) or []
            self._fetched_at = self.clock()
        except ApiError as e:
            logger.warning(f"Fetching {self.resource} failed: {e.message}")
            self.error = e.message
        finally:
            self.loading = False
        return self.items

    def refetch(self):
        return self.fetch(force=True)

    def invalidate(self):
        self._fetched_at = None

    def clear(self):
        self.items = []
        self.error = None
        self._fetched_at = None

    # ---------------- Mutations (raise ApiError) ----------------
    def create(self, data):
        record = self.client.create(self.resource, data)
        self.refetch()
        return record

    def update(self, record_id, data):
        record = self.client.update(self.resource, record_id, data)
        self.refetch()
        return record

    def delete(self, record_id):
        result = self.client.delete(self.resource, record_id)
        self.refetch()
        return result

    def frame(self):
        """The cached items as a DataFrame with parsed dates and numeric amounts."""
        columns = FRAME_COLUMNS.get(self.resource)
        df = pd.DataFrame(self.fetch(), columns=columns) if columns else pd.DataFrame(self.fetch())
        if 'date' in df.columns:
            df['date'] = pd.to_datetime(df['date'], errors='coerce')
        if 'amount' in df.columns:
            df['amount'] = pd.to_numeric(df['amount'], errors='coerce')
        return df


class TransactionsHook(ResourceHook):
    def bulk_add(self, rows):
        result = self.client.bulk_add_transactions(rows)
        self.refetch()
        return result


class PendingHook(ResourceHook):
    def approve(self, pending_id):
        result = self.client.approve_pending(pending_id)
        self.refetch()
        return result


HOOK_CLASSES = {
    "transactions": TransactionsHook,
    "pending": PendingHook,
}


def make_hooks(client, max_age=CACHE_SECONDS):
    return {name: HOOK_CLASSES.get(name, ResourceHook)(client, name, max_age=max_age) for name in RESOURCES}
