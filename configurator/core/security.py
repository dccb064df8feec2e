from __future__ import annotations

import hmac
from typing import Optional

from fastapi import HTTPException, status

from configurator.config import get_settings


def _load_api_keys() -> set[str]:
    settings = get_settings()
    keys = set()
    if settings.FOUNDER_API_KEY:
        keys.add(settings.FOUNDER_API_KEY.strip())
    if settings.API_KEYS:
        for value in settings.API_KEYS.split(","):
            value = value.strip()
            if value:
                keys.add(value)
    return keys


def _get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _matches(candidate: Optional[str], keys: set[str]) -> bool:
    if not candidate:
        return False
    return any(hmac.compare_digest(candidate, key) for key in keys)


def authenticate_request(
    api_key: Optional[str],
    authorization: Optional[str],
    *,
    require_auth: bool = False,
) -> Optional[dict]:
    """Accept a configured key from the API key header or a bearer token.

    With no keys configured every request passes, which is what local
    development runs with.
    """
    keys = _load_api_keys()
    if not keys:
        return None
    if _matches(api_key, keys) or _matches(_get_bearer_token(authorization), keys):
        return {"auth_type": "api_key"}
    if require_auth:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return None


__all__ = ["authenticate_request"]
