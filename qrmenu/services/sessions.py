from __future__ import annotations

import time
from typing import Any, Dict, Optional

from fastapi import Response
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from qrmenu.core.config import (
    SESSION_COOKIE_SAMESITE,
    SESSION_COOKIE_SECURE,
    SESSION_MAX_AGE_SECONDS,
    SESSION_SECRET,
)

SESSION_COOKIE_NAME = "session"
SESSION_SALT = "user-session"


def _serializer() -> URLSafeTimedSerializer:
    if not SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET is not configured.")
    return URLSafeTimedSerializer(SESSION_SECRET, salt=SESSION_SALT)


def create_session(user_id: int) -> str:
    payload = {"user_id": int(user_id), "exp": int(time.time()) + SESSION_MAX_AGE_SECONDS}
    return _serializer().dumps(payload)


def decode_session(token: str) -> Optional[Dict[str, Any]]:
    try:
        payload = _serializer().loads(token, max_age=SESSION_MAX_AGE_SECONDS)
    except (BadSignature, SignatureExpired, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    try:
        if int(payload.get("exp", 0)) < int(time.time()):
            return None
        int(payload["user_id"])
    except (KeyError, TypeError, ValueError):
        return None
    return payload


def session_user_id(payload: Optional[Dict[str, Any]]) -> Optional[int]:
    if not payload:
        return None
    return int(payload["user_id"])


def _cookie_options() -> dict[str, Any]:
    samesite = SESSION_COOKIE_SAMESITE
    # Browsers reject SameSite=None without Secure.
    if samesite == "none" and not SESSION_COOKIE_SECURE:
        samesite = "lax"
    return {
        "httponly": True,
        "samesite": samesite,
        "secure": SESSION_COOKIE_SECURE,
        "path": "/",
    }


def set_session_cookie(response: Response, user_id: int) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_session(user_id),
        max_age=SESSION_MAX_AGE_SECONDS,
        **_cookie_options(),
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=SESSION_COOKIE_NAME, **_cookie_options())
