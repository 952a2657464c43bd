# finance_backend/pending.py
"""Forecast entries that become committed transactions once approved."""
import logging

from flask import g, jsonify

from . import db
from .errors import handle_errors
from .resources import resource_blueprint
from .transactions import TransactionRules, transactions

logger = logging.getLogger("finance-backend")

PROMOTED_FIELDS = ("type", "description", "amount", "currency", "category", "account_id", "date")


class PendingResource(TransactionRules):
    name = "pending"
    table = "pending_transactions"
    columns = PROMOTED_FIELDS

    def approve(self, user_id, pending_id):
        """
        Promote a pending entry to a transaction.

        Insert, balance adjustment and removal share one SQLite transaction:
        either the pending entry is gone and the transaction exists, or
        nothing changed.
        """
        with db.transaction() as conn:
            pending = self.find(user_id, pending_id)
            values = {field: pending[field] for field in PROMOTED_FIELDS}
            values["tags"] = []
            record = transactions.insert(conn, user_id, values)
            transactions.on_created(conn, user_id, record)
            self.remove(conn, user_id, pending_id)
        logger.info(f"Approved pending {pending_id} as transaction {record['id']} for user {user_id}")
        return record


pending = PendingResource()
bp = resource_blueprint(pending, "/api/pending")


@bp.route("/<pending_id>/approve", methods=["POST"])
@handle_errors
def approve(pending_id):
    record = pending.approve(g.user_id, pending_id)
    return jsonify({"success": True, "transaction": record})
