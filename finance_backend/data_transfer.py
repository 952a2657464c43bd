# finance_backend/data_transfer.py
"""Full per-user JSON export and the matching import."""
import json
import logging

from flask import Blueprint, g, jsonify, request

from . import db, guard
from .accounts import accounts
from .auth import get_user, public_user
from .budgets import budgets
from .errors import ValidationError, field_error, handle_errors
from .notes import notes
from .pending import pending
from .transactions import transactions
from .validation import json_body, now_iso

logger = logging.getLogger("finance-backend")

# accounts first: the others may reference them
COLLECTIONS = (
    ("accounts", accounts),
    ("transactions", transactions),
    ("budgets", budgets),
    ("notes", notes),
    ("pending", pending),
)

bp = guard.protect(Blueprint("data_transfer", __name__, url_prefix="/api"))


def export_data(user_id):
    document = {"exported_at": now_iso(), "user": public_user(get_user(user_id))}
    for name, resource in COLLECTIONS:
        document[name] = resource.list(user_id)
    return document


def load_document():
    """Read the import document from a multipart ``file`` or from the JSON body."""
    upload = request.files.get("file")
    if upload is None:
        return json_body()
    try:
        document = json.loads(upload.read().decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ValidationError([field_error("file", "File must be a JSON export document")])
    if not isinstance(document, dict):
        raise ValidationError([field_error("file", "File must be a JSON export document")])
    return document


def import_data(user_id, document):
    """
    Insert every record of ``document`` as new records owned by ``user_id``.

    Ids are regenerated and account references remapped to the new account
    ids. Balances are taken as exported, so imported transactions do not move
    them again. Any invalid record rolls the whole import back.
    """
    errors = []
    counts = {}
    account_ids = {}

    with db.transaction() as conn:
        for name, resource in COLLECTIONS:
            rows = document.get(name) or []
            if not isinstance(rows, list):
                errors.append({"collection": name, "errors": [field_error(name, "Must be a list")]})
                continue
            counts[name] = 0
            for i, row in enumerate(rows):
                row = dict(row) if isinstance(row, dict) else {}
                if "account_id" in resource.columns:
                    row["account_id"] = account_ids.get(row.get("account_id"))
                try:
                    values = resource.clean(row, user_id)
                except ValidationError as e:
                    errors.append({"collection": name, "row": i, "errors": e.errors})
                    continue
                record = resource.insert(conn, user_id, values)
                if name == "accounts" and row.get("id"):
                    account_ids[row["id"]] = record["id"]
                counts[name] += 1
        if errors:
            raise ValidationError(errors)

    logger.info(f"Imported {counts} for user {user_id}")
    return counts


@bp.route("/export", methods=["GET"])
@handle_errors
def export_route():
    return jsonify(export_data(g.user_id))


@bp.route("/import", methods=["POST"])
@handle_errors
def import_route():
    counts = import_data(g.user_id, load_document())
    return jsonify({"imported": counts})
