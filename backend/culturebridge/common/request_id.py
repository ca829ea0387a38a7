"""Request correlation: X-Request-ID propagation and per-request access logs."""

import time
import uuid
from typing import Any, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from culturebridge.core.logging import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
USER_ID_HEADER = "X-User-Id"


def _request_fields(request: Request, request_id: str, started: float) -> dict[str, Any]:
    return {
        "request_id": request_id,
        "user_id": request.headers.get(USER_ID_HEADER),
        "method": request.method,
        "path": request.url.path,
        "latency_ms": round((time.perf_counter() - started) * 1000, 1),
    }


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with a correlation ID.

    An incoming X-Request-ID is reused so IDs from the upstream gateway carry
    through to error envelopes and logs; otherwise a UUID4 is minted.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={**_request_fields(request, request_id, started), "error": str(e)},
                exc_info=True,
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "Request completed",
            extra={
                **_request_fields(request, request_id, started),
                "status_code": response.status_code,
            },
        )
        return response
