"""Decorators for authenticating API requests."""

from functools import wraps

from firebase_admin import auth
from flask import current_app, g, request

from squadgo.errors import UnauthenticatedError

BEARER_PREFIX = "Bearer "


def _bearer_token():
    header = request.headers.get("Authorization", "")
    if not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX) :].strip() or None


def login_required(f):
    """Verify the Firebase ID token and expose the caller as ``g.user``.

    Usage:
    @login_required
    def protected_view():
        user_id = g.user["uid"]
    """

    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if token is None:
            raise UnauthenticatedError()
        try:
            decoded_token = auth.verify_id_token(token)
        except Exception as e:
            current_app.logger.warning(f"Rejected ID token: {e}")
            raise UnauthenticatedError("Invalid or expired ID token.") from e

        g.user = {"uid": decoded_token["uid"], "email": decoded_token.get("email")}
        return f(*args, **kwargs)

    return decorated_function
