from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from qrmenu.core.errors import (
    ProviderAuthError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderTimeoutError,
)

logger = logging.getLogger(__name__)
PROVIDER_PREFIX = "[PROVIDER]"


def _error_code(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        return error.get("code") or error.get("type")
    return None


def post_json(
    provider: str,
    url: str,
    *,
    headers: dict[str, str],
    payload: dict[str, Any],
    timeout: float,
    transport: Optional[httpx.BaseTransport] = None,
) -> dict[str, Any]:
    """POST a JSON request and classify every failure into a ProviderError subclass."""
    log_extra = {"provider": provider}
    try:
        with httpx.Client(timeout=timeout, transport=transport) as client:
            response = client.post(url, headers=headers, json=payload)
    except httpx.TimeoutException as exc:
        logger.warning("%s %s timed out after %ss", PROVIDER_PREFIX, provider, timeout, extra=log_extra)
        raise ProviderTimeoutError(f"{provider} timed out") from exc
    except httpx.HTTPError as exc:
        logger.warning("%s %s transport error: %s", PROVIDER_PREFIX, provider, type(exc).__name__, extra=log_extra)
        raise ProviderResponseError(f"{provider} transport error") from exc

    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        body = None

    status = response.status_code
    if status in (401, 403):
        logger.warning("%s %s rejected credentials status=%s", PROVIDER_PREFIX, provider, status, extra=log_extra)
        raise ProviderAuthError(f"{provider} rejected credentials")
    if status == 429 or _error_code(body) == "insufficient_quota":
        logger.warning("%s %s rate limited status=%s", PROVIDER_PREFIX, provider, status, extra=log_extra)
        raise ProviderRateLimitError(f"{provider} rate limited")
    if status >= 400:
        logger.warning(
            "%s %s unexpected status=%s code=%s", PROVIDER_PREFIX, provider, status, _error_code(body), extra=log_extra
        )
        raise ProviderResponseError(f"{provider} returned status {status}")
    if not isinstance(body, dict):
        logger.warning("%s %s returned a non-JSON body", PROVIDER_PREFIX, provider, extra=log_extra)
        raise ProviderResponseError(f"{provider} returned a non-JSON body")
    return body
