# finance_backend/guard.py
"""
AuthGuard: the single access-control check used by every protected blueprint.

Token failures raised by ``verify_jwt_in_request`` are answered by the loader
callbacks in ``tokens`` (401 with an ``error`` body), so route code only runs
once ``g.user_id`` holds the caller's identity.
"""
from flask import g, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request


def require_user():
    # CORS preflight carries no Authorization header
    if request.method == "OPTIONS":
        return None
    verify_jwt_in_request()
    g.user_id = get_jwt_identity()
    return None


def protect(blueprint):
    blueprint.before_request(require_user)
    return blueprint
