# finance_backend/app.py
import logging

from flask import Flask, jsonify
from flask_cors import CORS

from . import accounts, auth, budgets, data_transfer, db, notes, pending, reports, tokens, transactions
from .config import load_config

logger = logging.getLogger("finance-backend")

DEFAULT_CATEGORIES = [
    "Food & Dining", "Transportation", "Shopping", "Entertainment", "Healthcare",
    "Utilities", "Salary", "Freelance", "Investment", "Other"
]

SUPPORTED_CURRENCIES = [
    {"code": "AED", "label": "AED (UAE Dirham)"},
    {"code": "USD", "label": "USD (US Dollar)"},
    {"code": "EUR", "label": "EUR (Euro)"},
    {"code": "GBP", "label": "GBP (British Pound)"},
    {"code": "INR", "label": "INR (Indian Rupee)"},
    {"code": "PKR", "label": "PKR (Pakistani Rupee)"},
    {"code": "SAR", "label": "SAR (Saudi Riyal)"},
    {"code": "CNY", "label": "CNY (Chinese Yuan)"},
    {"code": "JPY", "label": "JPY (Japanese Yen)"},
]

BLUEPRINTS = (
    auth.bp,
    auth.profile_bp,
    accounts.bp,
    transactions.bp,
    budgets.bp,
    notes.bp,
    pending.bp,
    data_transfer.bp,
    reports.bp,
)


# ---------------- Flask App Factory ----------------
def create_app(test_config=None):
    app = Flask(__name__)

    # Configuration
    app.config.update(load_config())
    if test_config:
        app.config.update(test_config)
    logging.basicConfig(level=app.config["LOG_LEVEL"])

    tokens.jwt.init_app(app)

    # CORS
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})

    # Blueprints
    for bp in BLUEPRINTS:
        app.register_blueprint(bp)

    # Initialize DB
    db.init_db(app.config["DB_PATH"])
    logger.info(f"Database initialized at {app.config['DB_PATH']}")

    app.teardown_appcontext(db.close_db)

    # ---------------- Core Endpoints ----------------
    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    @app.route('/api/categories')
    def categories():
        return jsonify({"categories": DEFAULT_CATEGORIES})

    @app.route('/api/currencies')
    def currencies():
        return jsonify({"currencies": SUPPORTED_CURRENCIES})

    return app


def main():
    app = create_app()
    app.run(host='0.0.0.0', port=app.config["PORT"], debug=False)


# ---------------- Run ----------------
if __name__ == '__main__':
    main()
