import os
from typing import Optional, Set

from fastapi import Header, HTTPException


def _load_keys() -> Set[str]:
    raw = os.getenv("API_KEYS", "")
    return {k.strip() for k in raw.split(",") if k.strip()}


API_KEYS: Set[str] = _load_keys()


def check_api_key(key: Optional[str]) -> bool:
    """
    Returns True if:
      - API_KEYS is empty (dev mode), or
      - 'key' is provided and is in API_KEYS.
    """
    if not API_KEYS:
        return True
    return bool(key) and key in API_KEYS


def require_api_key(x_api_key: Optional[str] = Header(default=None)) -> Optional[str]:
    if not check_api_key(x_api_key):
        raise HTTPException(status_code=401, detail="invalid or missing API key")
    return x_api_key


def extract_client_key(api_key: Optional[str], fallback: str) -> str:
    """Rate-limit identity: the API key when present, else the client address."""
    return f"key:{api_key}" if api_key else f"ip:{fallback or 'anon'}"
