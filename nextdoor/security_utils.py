import json
import threading
import time
import uuid
from collections import deque
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import abort, current_app, request

from nextdoor.utils.logging_utils import get_logger


def _jsonable(value: Any) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(v) for v in value]
    return str(value)


def log_structured(event: str, **fields: Any) -> None:
    """Emit a single JSON access/activity line on the ``route`` logger."""
    payload = {"event": event, **{k: _jsonable(v) for k, v in fields.items()}}
    get_logger("route").info(json.dumps(payload, separators=(",", ":")))


def audit_log(event: str, user_id: Optional[Any] = None, detail: Optional[str] = None, **extra: Any) -> None:
    """Record an auditable action (membership, votes, auth events) on the ``audit`` logger."""
    payload = {
        "event": event,
        "user_id": _jsonable(user_id),
        "detail": detail,
    }
    try:
        payload["ip"] = request.remote_addr
    except RuntimeError:
        pass
    payload.update({k: _jsonable(v) for k, v in extra.items()})
    get_logger("audit").info(json.dumps(payload, separators=(",", ":")))


def coerce_uuid(value: Any) -> Optional[uuid.UUID]:
    """Return ``value`` as a UUID, or None when it is missing or malformed."""
    if value is None or value == "":
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def password_strong(raw_password: Optional[str]) -> bool:
    if not raw_password or not isinstance(raw_password, str):
        return False
    try:
        min_length = int(current_app.config.get("PASSWORD_MIN_LENGTH", 6))
    except RuntimeError:
        min_length = 6
    return len(raw_password) >= min_length


def ip_and_path_key() -> str:
    return f"{request.remote_addr}:{request.path}"


_hits: Dict[str, deque] = {}
_hits_lock = threading.Lock()


def _prune(key: str, now: float, window_sec: int) -> deque:
    """Drop hits older than the window; forget the key once none remain."""
    window = _hits.get(key)
    if window is None:
        return deque()
    while window and now - window[0] > window_sec:
        window.popleft()
    if not window:
        del _hits[key]
    return window


def rate_limit(key_func: Callable[[], str], limit: int = 10, window_sec: int = 60):
    """Sliding-window limiter kept in process memory. Disabled by RATELIMIT_ENABLED=False."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_app.config.get("RATELIMIT_ENABLED", True):
                return fn(*args, **kwargs)
            key = f"{fn.__name__}:{key_func()}"
            now = time.monotonic()
            with _hits_lock:
                prefix = f"{fn.__name__}:"
                for stale in [k for k in _hits if k.startswith(prefix) and k != key]:
                    _prune(stale, now, window_sec)
                window = _prune(key, now, window_sec)
                if len(window) >= limit:
                    get_logger("auth").warning("Rate limit exceeded key=%s", key)
                    abort(429)
                window.append(now)
                _hits[key] = window
            return fn(*args, **kwargs)

        return wrapper

    return decorator
