"""
Correlation IDs for HTTP requests and WebSocket connections.

An HTTP request takes its ID from the X-Correlation-ID header, or gets a
fresh one, and the ID is echoed back on the response. A WebSocket
connection binds its own ID with ``set_correlation_id`` when it connects,
so all log lines of one connection share it.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_ID_HEADER = "X-Correlation-ID"
CORRELATION_ID_LENGTH = 8

correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def new_correlation_id() -> str:
    return uuid.uuid4().hex[:CORRELATION_ID_LENGTH]


def set_correlation_id(value: str) -> None:
    """Bind an ID to the current context, truncated to 8 characters."""
    correlation_id.set(value[:CORRELATION_ID_LENGTH])


def get_correlation_id() -> str:
    """The current context's ID, or an empty string outside a request."""
    return correlation_id.get()


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each HTTP request with a correlation ID.

    The ID is stored in ``request.state.request_id`` and in the context
    variable read by the log formatters.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        set_correlation_id(
            request.headers.get(CORRELATION_ID_HEADER) or new_correlation_id()
        )
        request.state.request_id = get_correlation_id()

        response = await call_next(request)
        response.headers[CORRELATION_ID_HEADER] = request.state.request_id
        return response
