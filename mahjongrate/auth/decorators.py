"""Decorators for authenticated callable endpoints."""

from functools import wraps

from firebase_admin import auth
from flask import current_app, g, request

from mahjongrate.errors import UnauthenticatedError

BEARER_PREFIX = "Bearer "


def id_token_required(f):
    """Reject the request unless it carries a valid Firebase ID token.

    The verified uid is stored in ``g.uid``. Callers can only ever act on
    their own identity, so views read the uid from ``g`` and never from the
    request body.

    Usage:
    @id_token_required
    def protected_view():
        ...
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        header = request.headers.get("Authorization", "")
        if not header.startswith(BEARER_PREFIX):
            raise UnauthenticatedError("Sign-in is required.")
        id_token = header[len(BEARER_PREFIX) :].strip()
        if not id_token:
            raise UnauthenticatedError("Sign-in is required.")

        try:
            decoded_token = auth.verify_id_token(id_token)
        except Exception as e:
            current_app.logger.warning(f"Rejected ID token: {e}")
            raise UnauthenticatedError("Invalid or expired ID token.") from e

        uid = decoded_token.get("uid")
        if not uid:
            raise UnauthenticatedError("Invalid or expired ID token.")
        g.uid = uid
        return f(*args, **kwargs)

    return decorated_function
