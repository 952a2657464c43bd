# finance_backend/auth.py
import logging
import os
import sqlite3
import uuid

from flask import Blueprint, current_app, g, jsonify, request, send_from_directory
from werkzeug.security import check_password_hash, generate_password_hash
from werkzeug.utils import secure_filename

from . import db, guard
from .errors import NotFound, ValidationError, field_error, handle_errors
from .tokens import issue_token
from .validation import Validator, json_body, now_iso

logger = logging.getLogger("finance-backend")

ALLOWED_PHOTO_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}

bp = Blueprint("auth", __name__, url_prefix="/api/auth")
profile_bp = guard.protect(Blueprint("profile", __name__, url_prefix="/api/auth"))


# ---------------- Helpers ----------------
def public_user(row):
    user = dict(row)
    photo = user.pop("photo", None)
    user.pop("password_hash", None)
    user["photo_url"] = f"/api/auth/profile-photo/{photo}" if photo else None
    return user


def get_user(user_id):
    row = db.query_db("SELECT * FROM users WHERE id=?", (user_id,), one=True)
    if row is None:
        raise NotFound()
    return row


def email_taken(email, exclude_id=None):
    row = db.query_db("SELECT id FROM users WHERE email=?", (email,), one=True)
    return row is not None and row["id"] != exclude_id


# ---------------- Public routes ----------------
@bp.route("/register", methods=["POST"])
@handle_errors
def register():
    v = Validator(json_body())
    v.string("name", required=True, msg="Name is required", max_length=120)
    v.email("email")
    v.password("password")
    data = v.validate()

    if email_taken(data["email"]):
        raise ValidationError(message="User already exists")

    user_id = uuid.uuid4().hex
    try:
        db.execute_db(
            "INSERT INTO users (id, name, email, password_hash, created_at) VALUES (?, ?, ?, ?, ?)",
            (user_id, data["name"], data["email"], generate_password_hash(data["password"]), now_iso())
        )
    except sqlite3.IntegrityError:
        # lost a race with a concurrent registration of the same email
        raise ValidationError(message="User already exists")

    logger.info(f"Registered user {user_id}")
    return jsonify({"token": issue_token(user_id), "user": public_user(get_user(user_id))})


@bp.route("/login", methods=["POST"])
@handle_errors
def login():
    body = json_body()
    v = Validator(body)
    v.email("email")
    v.string("password", required=True, msg="Password is required")
    data = v.validate()

    row = db.query_db("SELECT * FROM users WHERE email=?", (data["email"],), one=True)
    if not row or not check_password_hash(row["password_hash"], str(body["password"])):
        logger.warning(f"Failed login for {data['email']}")
        raise ValidationError(message="Invalid credentials")

    return jsonify({"token": issue_token(row["id"]), "user": public_user(row)})


# ---------------- Profile (AuthGuard) ----------------
@profile_bp.route("/profile", methods=["GET"])
@handle_errors
def get_profile():
    return jsonify(public_user(get_user(g.user_id)))


@profile_bp.route("/profile", methods=["PUT"])
@handle_errors
def update_profile():
    user = dict(get_user(g.user_id))
    body = json_body()
    merged = {
        "name": body.get("name", user["name"]),
        "email": body.get("email", user["email"]),
        "currency": body.get("currency", user["currency"]),
    }
    v = Validator(merged)
    v.string("name", required=True, msg="Name is required", max_length=120)
    v.email("email")
    v.currency("currency", required=True)
    data = v.validate()

    if email_taken(data["email"], exclude_id=g.user_id):
        raise ValidationError(message="User already exists")

    db.execute_db(
        "UPDATE users SET name=?, email=?, currency=? WHERE id=?",
        (data["name"], data["email"], data["currency"], g.user_id)
    )
    logger.info(f"Updated profile for user {g.user_id}")
    return jsonify(public_user(get_user(g.user_id)))


@profile_bp.route("/profile-photo", methods=["POST"])
@handle_errors
def upload_profile_photo():
    photo = request.files.get("photo")
    if photo is None or not photo.filename:
        raise ValidationError([field_error("photo", "Photo file is required")])

    ext = photo.filename.rsplit(".", 1)[-1].lower() if "." in photo.filename else ""
    if ext not in ALLOWED_PHOTO_EXTENSIONS:
        raise ValidationError([field_error("photo", f"Allowed types: {', '.join(sorted(ALLOWED_PHOTO_EXTENSIONS))}")])

    folder = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    filename = secure_filename(f"{g.user_id}_{uuid.uuid4().hex[:8]}.{ext}")
    photo.save(os.path.join(folder, filename))

    previous = get_user(g.user_id)["photo"]
    db.execute_db("UPDATE users SET photo=? WHERE id=?", (filename, g.user_id))
    if previous and os.path.exists(os.path.join(folder, previous)):
        os.remove(os.path.join(folder, previous))

    logger.info(f"Stored profile photo {filename} for user {g.user_id}")
    return jsonify(public_user(get_user(g.user_id)))


@profile_bp.route("/profile-photo/<filename>", methods=["GET"])
@handle_errors
def get_profile_photo(filename):
    # only the owner's current photo is served
    if get_user(g.user_id)["photo"] != filename:
        raise NotFound()
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)


@profile_bp.route("/change-password", methods=["POST"])
@handle_errors
def change_password():
    body = json_body()
    v = Validator(body)
    v.string("current_password", required=True, msg="Current password is required")
    v.password("new_password")
    v.validate()

    user = get_user(g.user_id)
    if not check_password_hash(user["password_hash"], str(body["current_password"])):
        raise ValidationError(message="Current password is incorrect")

    db.execute_db(
        "UPDATE users SET password_hash=? WHERE id=?",
        (generate_password_hash(body["new_password"]), g.user_id)
    )
    logger.info(f"Password changed for user {g.user_id}")
    return jsonify({"success": True})
