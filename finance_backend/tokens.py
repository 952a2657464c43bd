# finance_backend/tokens.py
"""Signed identity tokens: issued at login/register, verified on every protected request."""
import logging

from flask_jwt_extended import JWTManager, create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from . import db
from .errors import InvalidToken, Unauthenticated

logger = logging.getLogger("finance-backend")

jwt = JWTManager()


def issue_token(user_id):
    # expiry comes from JWT_ACCESS_TOKEN_EXPIRES (7 days unless configured)
    return create_access_token(identity=str(user_id))


def user_exists(user_id):
    return db.query_db("SELECT id FROM users WHERE id=?", (user_id,), one=True) is not None


def verify_token(token):
    """Return the user id inside ``token`` or raise InvalidToken."""
    try:
        payload = decode_token(token)
    except (PyJWTError, JWTExtendedException) as e:
        logger.warning(f"Token verification failed: {e}")
        raise InvalidToken()
    user_id = payload.get("sub")
    if not user_id or not user_exists(user_id):
        raise InvalidToken()
    return user_id


@jwt.unauthorized_loader
def missing_token(reason):
    logger.warning(f"Rejected request without token: {reason}")
    return Unauthenticated().to_response()


@jwt.invalid_token_loader
def invalid_token(reason):
    logger.warning(f"Rejected invalid token: {reason}")
    return InvalidToken().to_response()


@jwt.expired_token_loader
def expired_token(jwt_header, jwt_payload):
    logger.warning(f"Rejected expired token for user {jwt_payload.get('sub')}")
    return InvalidToken().to_response()


@jwt.user_lookup_loader
def load_user(jwt_header, jwt_data):
    return db.query_db("SELECT id, email FROM users WHERE id=?", (jwt_data["sub"],), one=True)


@jwt.user_lookup_error_loader
def unknown_user(jwt_header, jwt_data):
    logger.warning(f"Rejected token for unknown user {jwt_data.get('sub')}")
    return InvalidToken().to_response()
