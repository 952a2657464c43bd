# finance_backend/validation.py
import math
import re
from datetime import datetime, timezone

from flask import request

from .errors import ValidationError, field_error

DATE_FORMATS = ["%Y-%m-%d", "%d-%m-%Y", "%Y/%m/%d", "%d/%m/%Y"]
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
CURRENCY_RE = re.compile(r"^[A-Z]{3}$")

DEFAULT_CURRENCY = "AED"
DEFAULT_CATEGORY = "Other"
MAX_TEXT_LENGTH = 1000


def now_iso():
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0).isoformat()


def parse_datetime(s):
    """Try multiple date formats, then ISO-8601. Returns a naive UTC datetime or None."""
    if not s:
        return None
    s = str(s).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_number(value):
    """Accept ints, floats and numeric strings; reject bools, NaN and infinities."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        else:
            number = float(str(value).strip())
    except (ValueError, OverflowError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError([field_error("body", "A JSON object body is required")])
    return data


class Validator:
    """
    Collects field errors for one incoming document.

    Each check reads a field from ``data``, records an error or stores the
    cleaned value in ``cleaned``. ``validate`` raises ValidationError with every
    error found, so the client gets the whole list in one response.
    """

    def __init__(self, data):
        self.data = data or {}
        self.errors = []
        self.cleaned = {}

    def error(self, field, msg):
        self.errors.append(field_error(field, msg))

    def _missing(self, value):
        return value is None or (isinstance(value, str) and not value.strip())

    def string(self, field, required=False, default=None, msg=None, max_length=MAX_TEXT_LENGTH):
        value = self.data.get(field)
        if self._missing(value):
            if required:
                self.error(field, msg or f"{field.replace('_', ' ').capitalize()} is required")
            else:
                self.cleaned[field] = default
            return
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            self.error(field, f"{field} must be a string")
            return
        text = str(value).strip()
        if len(text) > max_length:
            self.error(field, f"{field} must be at most {max_length} characters")
            return
        self.cleaned[field] = text

    def number(self, field, required=False, default=None, minimum=None, positive=False, msg=None):
        value = self.data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                self.error(field, msg or f"{field.replace('_', ' ').capitalize()} is required")
            else:
                self.cleaned[field] = default
            return
        number = parse_number(value)
        if number is None:
            self.error(field, msg or f"{field} must be numeric")
        elif positive and number <= 0:
            self.error(field, f"{field} must be greater than 0")
        elif minimum is not None and number < minimum:
            self.error(field, f"{field} must be at least {minimum}")
        else:
            self.cleaned[field] = number

    def choice(self, field, choices, default=None, msg=None):
        value = self.data.get(field)
        if self._missing(value) and default is not None:
            self.cleaned[field] = default
            return
        if isinstance(value, str):
            value = value.strip().lower()
        if value not in choices:
            self.error(field, msg or f"{field} must be one of: {', '.join(choices)}")
            return
        self.cleaned[field] = value

    def currency(self, field="currency", required=False, default=DEFAULT_CURRENCY):
        value = self.data.get(field)
        if self._missing(value):
            if required:
                self.error(field, "Currency is required")
            else:
                self.cleaned[field] = default
            return
        code = str(value).strip().upper()
        if not CURRENCY_RE.match(code):
            self.error(field, "Currency must be a 3-letter code")
            return
        self.cleaned[field] = code

    def tags(self, field="tags"):
        value = self.data.get(field)
        if value is None:
            self.cleaned[field] = []
            return
        if not isinstance(value, (list, tuple)) or not all(isinstance(t, str) for t in value):
            self.error(field, "Tags must be a list of strings")
            return
        seen = []
        for tag in value:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        self.cleaned[field] = seen

    def date(self, field="date", default_now=True):
        value = self.data.get(field)
        if self._missing(value):
            if default_now:
                self.cleaned[field] = now_iso()
            else:
                self.cleaned[field] = None
            return
        parsed = parse_datetime(value)
        if parsed is None:
            self.error(field, "Invalid date format")
            return
        self.cleaned[field] = parsed.replace(microsecond=0).isoformat()

    def email(self, field="email", required=True):
        value = self.data.get(field)
        if self._missing(value):
            if required:
                self.error(field, "Valid email is required")
            return
        email = str(value).strip().lower()
        if not EMAIL_RE.match(email):
            self.error(field, "Valid email is required")
            return
        self.cleaned[field] = email

    def password(self, field="password", min_length=6):
        value = self.data.get(field)
        if not isinstance(value, str) or len(value) < min_length:
            self.error(field, f"Password must be at least {min_length} characters")
            return
        self.cleaned[field] = value

    def check(self, field, ok, msg):
        """Record ``msg`` against ``field`` unless ``ok``. Used for cross-record rules."""
        if not ok:
            self.error(field, msg)

    def validate(self):
        if self.errors:
            raise ValidationError(self.errors)
        return self.cleaned
