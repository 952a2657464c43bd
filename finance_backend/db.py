# finance_backend/db.py
import logging
import os
import sqlite3
from contextlib import contextmanager

from flask import current_app, g

logger = logging.getLogger("finance-backend")

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schema.sql")


def connect(db_path):
    # ensure directory exists
    os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_db():
    db = getattr(g, '_database', None)
    if db is None:
        db = g._database = connect(current_app.config["DB_PATH"])
    return db


def close_db(exception=None):
    db = g.pop('_database', None)
    if db is not None:
        try:
            db.close()
        except sqlite3.Error:
            logger.exception("Error closing DB connection")


def query_db(query, args=(), one=False):
    cur = get_db().execute(query, args)
    rv = cur.fetchall()
    cur.close()
    return (rv[0] if rv else None) if one else rv


def execute_db(query, args=()):
    """Run a single write statement and commit it. Returns the affected row count."""
    conn = get_db()
    cur = conn.cursor()
    cur.execute(query, args)
    conn.commit()
    count = cur.rowcount
    cur.close()
    return count


@contextmanager
def transaction():
    """
    Group several writes into one SQLite transaction.

    Statements executed on the yielded connection are committed together when
    the block exits, or rolled back if it raises.
    """
    conn = get_db()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def init_db(db_path):
    """
    Create the tables from schema.sql next to this module.
    Idempotent (CREATE TABLE IF NOT EXISTS) so safe to call at app startup.
    """
    if not os.path.exists(SCHEMA_PATH):
        raise FileNotFoundError(f"schema.sql not found at expected path: {SCHEMA_PATH}")

    conn = connect(db_path)
    try:
        with open(SCHEMA_PATH, 'r', encoding='utf-8') as f:
            sql = f.read()
        conn.executescript(sql)
        conn.commit()
    finally:
        conn.close()
