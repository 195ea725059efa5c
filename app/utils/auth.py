from functools import wraps
from flask import request, g
from .responses import error
from .jwt import decode_token, TokenError


def auth_required(func):
    """Resolve the bearer token into ``g.owner_id`` for owner scoping."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        auth = request.headers.get("Authorization", "")
        if not auth:
            return error("Auth header missing", status=401)
        token = auth.split(" ", 1)[1] if auth.startswith("Bearer ") else auth
        try:
            payload = decode_token(token, expected_type="access")
        except TokenError as e:
            return error(str(e), status=401)

        g.owner_id = payload["sub"]
        return func(*args, **kwargs)

    return wrapper


def current_owner_id() -> str:
    return g.owner_id
