"""Signed auth cookie tokens. Users are issued by the account service; we only verify."""
import base64
import hashlib
import hmac
import time

from coursereel.core.config import get_settings


# Token: base64(user_id:timestamp).hmac
def _signature(payload: bytes) -> str:
    settings = get_settings()
    return hmac.new(settings.secret_key.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def create_session_token(user_id: str, *, issued_at: int | None = None) -> str:
    ts = int(time.time()) if issued_at is None else issued_at
    payload = f"{user_id}:{ts}".encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=") + "." + _signature(payload)


def verify_session_token(token: str | None) -> str | None:
    """Return the user id of a valid, unexpired token; None otherwise."""
    if not token or "." not in token:
        return None
    try:
        encoded, sig = token.rsplit(".", 1)
        encoded += "=" * (-len(encoded) % 4)
        payload = base64.urlsafe_b64decode(encoded)
        if not hmac.compare_digest(_signature(payload), sig):
            return None
        # user ids may contain ':'
        user_id, ts = payload.decode("utf-8").rsplit(":", 1)
        if abs(time.time() - int(ts)) > get_settings().auth_token_max_age:
            return None
        return user_id or None
    except (ValueError, UnicodeDecodeError):
        return None
