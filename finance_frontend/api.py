# finance_frontend/api.py
import logging
import os

import requests

logger = logging.getLogger("finance-frontend")

API_BASE = os.environ.get("API_BASE", "http://localhost:5050/api")
DEFAULT_TIMEOUT = 10

RESOURCES = ("accounts", "transactions", "budgets", "notes", "pending")


class ApiError(Exception):
    """A failed API call. ``message`` is ready to show next to the form that caused it."""

    def __init__(self, message, status_code=None, errors=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []


def safe_json(resp):
    try:
        return resp.json()
    except ValueError:
        return None


def error_message(payload):
    """Flatten ``{"error": ...}`` or ``{"errors": [...]}`` into one line."""
    if not isinstance(payload, dict):
        return None
    if payload.get("error"):
        return str(payload["error"])
    messages = []
    for err in payload.get("errors") or []:
        if "msg" in err:
            messages.append(err["msg"])
        for nested in err.get("errors", []):
            prefix = f"row {err['row']}: " if err.get("row") is not None else ""
            messages.append(prefix + nested.get("msg", ""))
    return "; ".join(m for m in messages if m) or None


class ApiClient:
    def __init__(self, base_url=None, token=None, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = (base_url or API_BASE).rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def authenticated(self):
        return bool(self.token)

    def request(self, method, path, json=None, files=None):
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = self.base_url + path

        try:
            resp = self.session.request(method, url, headers=headers, json=json, files=files, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise ApiError("No response from server")

        payload = safe_json(resp)
        if resp.status_code >= 400:
            message = error_message(payload) or f"Request failed ({resp.status_code})"
            logger.warning(f"{method} {path} -> {resp.status_code}: {message}")
            errors = payload.get("errors") if isinstance(payload, dict) else None
            raise ApiError(message, status_code=resp.status_code, errors=errors)
        return payload

    # ---------------- Auth ----------------
    def register(self, name, email, password):
        payload = self.request("POST", "/auth/register", json={"name": name, "email": email, "password": password})
        self.token = payload["token"]
        return payload

    def login(self, email, password):
        payload = self.request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = payload["token"]
        return payload

    def logout(self):
        self.token = None

    def get_profile(self):
        return self.request("GET", "/auth/profile")

    def update_profile(self, data):
        return self.request("PUT", "/auth/profile", json=data)

    def upload_profile_photo(self, filename, content):
        return self.request("POST", "/auth/profile-photo", files={"photo": (filename, content)})

    def change_password(self, current_password, new_password):
        return self.request("POST", "/auth/change-password", json={
            "current_password": current_password,
            "new_password": new_password,
        })

    # ---------------- Resources ----------------
    def list(self, resource):
        return self.request("GET", f"/{resource}")

    def create(self, resource, data):
        return self.request("POST", f"/{resource}", json=data)

    def update(self, resource, record_id, data):
        return self.request("PUT", f"/{resource}/{record_id}", json=data)

    def delete(self, resource, record_id):
        return self.request("DELETE", f"/{resource}/{record_id}")

    def bulk_add_transactions(self, rows):
        return self.request("POST", "/transactions/bulk", json={"transactions": rows})

    def approve_pending(self, pending_id):
        return self.request("POST", f"/pending/{pending_id}/approve")

    # ---------------- Data & reports ----------------
    def export_data(self):
        return self.request("GET", "/export")

    def import_data(self, document):
        return self.request("POST", "/import", json=document)

    def dashboard(self):
        return self.request("GET", "/dashboard")

    def categories(self):
        return self.request("GET", "/categories")["categories"]

    def currencies(self):
        return self.request("GET", "/currencies")["currencies"]
