# finance_backend/transactions.py
import logging

from flask import g, jsonify, request

from . import db
from .accounts import accounts
from .errors import ValidationError, field_error, handle_errors
from .resources import Resource, resource_blueprint
from .validation import DEFAULT_CATEGORY

logger = logging.getLogger("finance-backend")

TRANSACTION_TYPES = ("income", "expense")
MAX_ROWS_PER_UPLOAD = 5000


def signed_amount(record):
    """Income adds to an account balance, expense subtracts from it."""
    if not record or not record.get("account_id"):
        return 0.0
    amount = float(record["amount"])
    return amount if record["type"] == "income" else -amount


class TransactionRules(Resource):
    """Fields shared by committed and pending transactions."""

    def rules(self, v, user_id):
        v.number("amount", required=True, positive=True, msg="Amount is required")
        v.string("description", required=True, msg="Description is required")
        v.choice("type", TRANSACTION_TYPES, msg="Type is required")
        v.currency("currency")
        v.string("category", default=DEFAULT_CATEGORY)
        v.string("account_id")
        v.date("date")
        account_id = v.cleaned.get("account_id")
        if account_id:
            v.check("account_id", accounts.owns(user_id, account_id), "Account not found")


class TransactionResource(TransactionRules):
    name = "transactions"
    table = "transactions"
    columns = ("type", "description", "amount", "currency", "category", "tags", "account_id", "date")
    json_columns = ("tags",)

    def rules(self, v, user_id):
        super().rules(v, user_id)
        v.tags("tags")

    # balance follows every committed transaction write
    def on_created(self, conn, user_id, record):
        accounts.adjust_balance(conn, user_id, record.get("account_id"), signed_amount(record))

    def on_updated(self, conn, user_id, old, new):
        accounts.adjust_balance(conn, user_id, old.get("account_id"), -signed_amount(old))
        accounts.adjust_balance(conn, user_id, new.get("account_id"), signed_amount(new))

    def on_deleted(self, conn, user_id, record):
        accounts.adjust_balance(conn, user_id, record.get("account_id"), -signed_amount(record))

    def bulk_create(self, user_id, rows):
        """
        Insert many transactions at once.

        Every row is validated before anything is written; one bad row rejects
        the whole batch with the errors of each failing row (numbered from 0).
        """
        if not isinstance(rows, list) or not rows:
            raise ValidationError([field_error("transactions", "A non-empty list of transactions is required")])
        if len(rows) > MAX_ROWS_PER_UPLOAD:
            raise ValidationError([field_error("transactions", f"At most {MAX_ROWS_PER_UPLOAD} transactions per request")])

        cleaned, row_errors = [], []
        for i, row in enumerate(rows):
            try:
                cleaned.append(self.clean(row if isinstance(row, dict) else {}, user_id))
            except ValidationError as e:
                row_errors.append({"row": i, "errors": e.errors})
        if row_errors:
            raise ValidationError(row_errors)

        created = []
        with db.transaction() as conn:
            for values in cleaned:
                record = self.insert(conn, user_id, values)
                self.on_created(conn, user_id, record)
                created.append(record)
        logger.info(f"Bulk created {len(created)} transactions for user {user_id}")
        return created


transactions = TransactionResource()
bp = resource_blueprint(transactions, "/api/transactions")


@bp.route("/bulk", methods=["POST"])
@handle_errors
def bulk_add():
    data = request.get_json(silent=True)
    rows = data.get("transactions") if isinstance(data, dict) else None
    created = transactions.bulk_create(g.user_id, rows)
    return jsonify({"inserted": len(created), "transactions": created})
