# finance_backend/errors.py
"""
Error taxonomy shared by every route.

Handlers raise one of these and the ``handle_errors`` decorator turns it into
the JSON body and status code the client expects. Anything else is logged and
answered with a generic 500 so internals never reach the client.
"""
import functools
import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger("finance-backend")


class ApiError(Exception):
    status_code = 500
    message = "Server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def body(self):
        return {"error": self.message}

    def to_response(self):
        return jsonify(self.body()), self.status_code


class ValidationError(ApiError):
    """Malformed or missing input. Carries either field errors or a single message."""
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors=None, message=None):
        super().__init__(message)
        self.errors = errors or []

    def body(self):
        if self.errors:
            return {"errors": self.errors}
        return {"error": self.message}


class Unauthenticated(ApiError):
    status_code = 401
    message = "No token, authorization denied"


class InvalidToken(ApiError):
    status_code = 401
    message = "Token is not valid"


class NotFound(ApiError):
    # also raised for records owned by someone else
    status_code = 404
    message = "Not found"


class ServerError(ApiError):
    status_code = 500
    message = "Server error"


def field_error(field, msg):
    return {"field": field, "msg": msg}


def handle_errors(view):
    """Map ApiError subclasses to responses; log and hide everything else."""
    @functools.wraps(view)
    def wrapped(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ApiError as e:
            if isinstance(e, NotFound):
                logger.warning(f"{view.__name__}: not found {kwargs}")
            return e.to_response()
        except HTTPException:
            raise
        except Exception:
            logger.exception(f"Unhandled error in {view.__name__}")
            return ServerError().to_response()
    return wrapped
