# finance_backend/resources.py
"""
Ownership-scoped record stores and the CRUD blueprint shared by every resource.

Every query here filters on ``user_id`` together with the record id. A record
owned by somebody else is indistinguishable from a missing one: both raise
NotFound.
"""
import json
import logging
import uuid

from flask import Blueprint, g, jsonify

from . import db, guard
from .errors import NotFound, handle_errors
from .validation import Validator, json_body, now_iso

logger = logging.getLogger("finance-backend")

READ_ONLY_FIELDS = ("id", "user_id", "created_at")


class Resource:
    """
    One collection of user-owned records.

    Subclasses name the table, its writable ``columns`` and implement ``rules``
    to declare validation. The ``on_*`` hooks run inside the same SQLite
    transaction as the write they follow, so side effects commit or roll back
    with it.
    """
    name = None
    table = None
    columns = ()
    json_columns = ()

    # ---------------- Validation ----------------
    def rules(self, v, user_id):
        raise NotImplementedError

    def clean(self, data, user_id):
        v = Validator(data)
        self.rules(v, user_id)
        return v.validate()

    # ---------------- Serialization ----------------
    def to_dict(self, row):
        record = dict(row)
        for col in self.json_columns:
            record[col] = json.loads(record[col]) if record.get(col) else []
        return record

    def _db_value(self, col, value):
        if col in self.json_columns:
            return json.dumps(value or [])
        return value

    # ---------------- Reads ----------------
    def list(self, user_id):
        rows = db.query_db(f"SELECT * FROM {self.table} WHERE user_id=? ORDER BY rowid", (user_id,))
        return [self.to_dict(r) for r in rows]

    def find(self, user_id, record_id):
        row = db.query_db(
            f"SELECT * FROM {self.table} WHERE id=? AND user_id=?",
            (record_id, user_id),
            one=True
        )
        if row is None:
            raise NotFound()
        return self.to_dict(row)

    # ---------------- Writes (caller owns the transaction) ----------------
    def insert(self, conn, user_id, values, record_id=None):
        record_id = record_id or uuid.uuid4().hex
        cols = [c for c in self.columns if c in values]
        params = [record_id, user_id, now_iso()] + [self._db_value(c, values[c]) for c in cols]
        placeholders = ", ".join("?" for _ in params)
        conn.execute(
            f"INSERT INTO {self.table} (id, user_id, created_at, {', '.join(cols)}) VALUES ({placeholders})",
            params
        )
        return self.find(user_id, record_id)

    def write(self, conn, user_id, record_id, values):
        cols = [c for c in self.columns if c in values]
        assignments = ", ".join(f"{c}=?" for c in cols)
        params = [self._db_value(c, values[c]) for c in cols] + [record_id, user_id]
        conn.execute(f"UPDATE {self.table} SET {assignments} WHERE id=? AND user_id=?", params)
        return self.find(user_id, record_id)

    def remove(self, conn, user_id, record_id):
        cur = conn.execute(f"DELETE FROM {self.table} WHERE id=? AND user_id=?", (record_id, user_id))
        if cur.rowcount == 0:
            raise NotFound()

    # ---------------- Hooks ----------------
    def on_created(self, conn, user_id, record):
        pass

    def on_updated(self, conn, user_id, old, new):
        pass

    def on_deleted(self, conn, user_id, record):
        pass

    # ---------------- Operations ----------------
    def create(self, user_id, data):
        values = self.clean(data, user_id)
        with db.transaction() as conn:
            record = self.insert(conn, user_id, values)
            self.on_created(conn, user_id, record)
        logger.info(f"Created {self.name} {record['id']} for user {user_id}")
        return record

    def update(self, user_id, record_id, data):
        with db.transaction() as conn:
            existing = self.find(user_id, record_id)
            merged = dict(existing)
            merged.update({k: v for k, v in data.items() if k in self.columns and k not in READ_ONLY_FIELDS})
            values = self.clean(merged, user_id)
            record = self.write(conn, user_id, record_id, values)
            self.on_updated(conn, user_id, existing, record)
        logger.info(f"Updated {self.name} {record_id} for user {user_id}")
        return record

    def delete(self, user_id, record_id):
        with db.transaction() as conn:
            existing = self.find(user_id, record_id)
            self.remove(conn, user_id, record_id)
            self.on_deleted(conn, user_id, existing)
        logger.info(f"Deleted {self.name} {record_id} for user {user_id}")
        return existing


def resource_blueprint(resource, url_prefix):
    """Build the list/create/update/delete routes for ``resource`` behind the AuthGuard."""
    bp = guard.protect(Blueprint(resource.name, __name__, url_prefix=url_prefix))

    @bp.route("", methods=["GET"])
    @handle_errors
    def list_records():
        return jsonify(resource.list(g.user_id))

    @bp.route("", methods=["POST"])
    @handle_errors
    def create_record():
        return jsonify(resource.create(g.user_id, json_body()))

    @bp.route("/<record_id>", methods=["PUT"])
    @handle_errors
    def update_record(record_id):
        return jsonify(resource.update(g.user_id, record_id, json_body()))

    @bp.route("/<record_id>", methods=["DELETE"])
    @handle_errors
    def delete_record(record_id):
        resource.delete(g.user_id, record_id)
        return jsonify({"success": True})

    return bp
