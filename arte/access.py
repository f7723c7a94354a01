from __future__ import annotations

import json
import logging
import os
import re
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis

log = logging.getLogger(__name__)

_REDIS_URL = (os.getenv("REDIS_URL") or os.getenv("KV_URL") or "").strip()
_REDIS_TIMEOUT = float(os.getenv("REDIS_ACCESS_TIMEOUT", "0.35") or 0.35)
KEY_PREFIX = os.getenv("ACCESS_KEY_PREFIX", "gif_access:")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: Any) -> bool:
    return isinstance(email, str) and bool(_EMAIL_RE.match(email.strip()))


def mask_email(email: str) -> str:
    """``jane@example.com`` -> ``j***@example.com`` for log lines."""
    local, _, domain = normalize_email(email).partition("@")
    if not domain:
        return "***"
    return f"{local[:1]}***@{domain}"


def _key(email: str) -> str:
    return f"{KEY_PREFIX}{normalize_email(email)}"


class MemoryBackend:
    """Process-local store used in tests and when no Redis URL is configured."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


def _make_backend():
    if _REDIS_URL and not os.getenv("PYTEST_CURRENT_TEST"):
        try:
            # Lazy connection: nothing hits the network until the first command
            return redis.from_url(
                _REDIS_URL,
                decode_responses=True,
                socket_timeout=_REDIS_TIMEOUT,
                socket_connect_timeout=_REDIS_TIMEOUT,
            )
        except ValueError as exc:
            log.warning("access: invalid REDIS_URL, using in-memory store: %s", exc)
    return MemoryBackend()


_backend = _make_backend()


def get_backend():
    return _backend


def set_backend(backend) -> None:
    """Swap the store (tests install a fresh :class:`MemoryBackend`)."""
    global _backend
    _backend = backend


def grant(email: str) -> Dict[str, Any]:
    record = {"granted": True, "grantedAt": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")}
    _backend.set(_key(email), json.dumps(record, separators=(",", ":")))
    log.info("access.grant: email=%s", mask_email(email))
    return record


def get_access_data(email: str) -> Optional[Dict[str, Any]]:
    raw = _backend.get(_key(email))
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        log.warning("access.get: unreadable record for email=%s", mask_email(email))
        return None
    return data if isinstance(data, dict) else None


def check(email: str) -> bool:
    return get_access_data(email) is not None


def get_grant_timestamp(email: str) -> Optional[str]:
    data = get_access_data(email)
    return data.get("grantedAt") if data else None


def revoke(email: str) -> None:
    _backend.delete(_key(email))
    log.info("access.revoke: email=%s", mask_email(email))
