from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from qrmenu.core.request_context import clear_request_context, set_request_context

logger = logging.getLogger(__name__)

_RESTAURANT_PARAMS = ("restaurant_id", "slug")


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        set_request_context(request_id=request_id)

        status_code = 500
        response = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            restaurant_ref = _extract_restaurant_ref(request)
            user_id = getattr(request.state, "user_id", None)
            duration_ms = round((time.perf_counter() - start) * 1000, 2)

            logger.info(
                "request completed",
                extra={
                    "request_id": request_id,
                    "restaurant_id": restaurant_ref,
                    "user_id": str(user_id) if user_id is not None else None,
                    "endpoint": request.url.path,
                    "method": request.method,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                },
            )

            if response is not None:
                response.headers["X-Request-ID"] = request_id

            clear_request_context()


def _extract_restaurant_ref(request: Request) -> str | None:
    path_params = request.scope.get("path_params") or {}
    for key in _RESTAURANT_PARAMS:
        value = path_params.get(key)
        if value:
            return str(value)
    value = request.query_params.get("restaurantId")
    return value or None
