from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware

from qrmenu.core.request_context import set_request_context
from qrmenu.services.sessions import SESSION_COOKIE_NAME, decode_session, session_user_id


class SessionMiddleware(BaseHTTPMiddleware):
    """Decode the signed session cookie once per request."""

    async def dispatch(self, request, call_next):
        request.state.session_payload = None
        request.state.user_id = None

        token = request.cookies.get(SESSION_COOKIE_NAME)
        if token:
            payload = decode_session(token)
            request.state.session_payload = payload
            request.state.user_id = session_user_id(payload)
            if request.state.user_id is not None:
                set_request_context(user_id=str(request.state.user_id))

        return await call_next(request)
