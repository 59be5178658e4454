import hashlib
import hmac
from functools import wraps

from flask import current_app, request

from ..errors import AuthError


def hash_key(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def verify_api_key(raw: str | None, config) -> bool:
    if not raw:
        return False
    presented = hash_key(raw)
    ok = False
    # compare against every stored hash, no early exit
    for stored in config.key_hashes():
        if hmac.compare_digest(presented, stored):
            ok = True
    return ok


def get_bearer_token(req) -> str | None:
    value = req.headers.get("Authorization")
    if not value:
        return None

    parts = value.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1].strip() or None


def require_api_key(view):
    """Reject with 401 before the view runs unless a configured key is presented."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        store = current_app.extensions["slogger"].config_store
        if not verify_api_key(get_bearer_token(request), store.read()):
            raise AuthError()
        return view(*args, **kwargs)
    return wrapper
