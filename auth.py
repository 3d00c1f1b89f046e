# Token handling and the authorization policies used by the routes
from functools import wraps

from flask import current_app, g, request
from flask_jwt_extended import JWTManager, create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from errors import UnauthorizedError

jwt = JWTManager()


def create_token(user):
    """Sign a JWT for `user` ({username, isAdmin, ...})."""
    return create_access_token(
        identity=user["username"],
        additional_claims={"isAdmin": bool(user.get("isAdmin", False))},
    )


def authenticate_jwt():
    """Store the caller's identity on `g.user` if a valid token was sent.

    Runs before every request. A missing, malformed or expired token is not an
    error here; the caller is simply anonymous and the policies below reject.
    """
    g.user = None
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return

    try:
        claims = decode_token(token.strip())
    except (JWTExtendedException, PyJWTError) as e:
        current_app.logger.debug(f"Rejected bearer token: {e}")
        return

    g.user = {"username": claims["sub"], "isAdmin": bool(claims.get("isAdmin", False))}


def ensure_logged_in(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not g.get("user"):
            raise UnauthorizedError()
        return func(*args, **kwargs)
    return wrapper


def ensure_admin(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        user = g.get("user")
        if not user or not user["isAdmin"]:
            raise UnauthorizedError()
        return func(*args, **kwargs)
    return wrapper


def ensure_correct_user_or_admin(func):
    """Allow admins, or the user named by the route's `username` argument."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        user = g.get("user")
        if not user or not (user["isAdmin"] or user["username"] == kwargs.get("username")):
            raise UnauthorizedError()
        return func(*args, **kwargs)
    return wrapper
