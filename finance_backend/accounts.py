# finance_backend/accounts.py
from . import db
from .resources import Resource, resource_blueprint

ACCOUNT_TYPES = ("bank", "credit", "cash", "savings", "investment", "other")


class AccountResource(Resource):
    name = "accounts"
    table = "accounts"
    columns = ("name", "type", "balance", "currency", "account_number", "institution", "description")

    def rules(self, v, user_id):
        v.string("name", required=True, msg="Name is required")
        v.choice("type", ACCOUNT_TYPES, msg="Type is required")
        v.number("balance", default=0.0)
        v.currency("currency", required=True)
        v.string("account_number")
        v.string("institution")
        v.string("description")

    def owns(self, user_id, account_id):
        row = db.query_db("SELECT id FROM accounts WHERE id=? AND user_id=?", (account_id, user_id), one=True)
        return row is not None

    def adjust_balance(self, conn, user_id, account_id, delta):
        """Add ``delta`` to an owned account's balance inside the caller's transaction."""
        if not account_id or not delta:
            return
        conn.execute(
            "UPDATE accounts SET balance = balance + ? WHERE id=? AND user_id=?",
            (delta, account_id, user_id)
        )


accounts = AccountResource()
bp = resource_blueprint(accounts, "/api/accounts")
