"""
Request correlation middleware.

Accepts a client ``X-Request-ID`` (or mints one), exposes it on
``request.state`` and the response, and binds it into the logging context.
Write requests are logged on completion, slow requests at WARNING.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from forum_trust.logging_config import actor_id_var, get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64
SLOW_REQUEST_MS = 1000
WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def incoming_request_id(request: Request) -> str:
    supplied = (request.headers.get(REQUEST_ID_HEADER) or "").strip()
    if supplied and len(supplied) <= MAX_REQUEST_ID_LENGTH and supplied.isprintable():
        return supplied
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = incoming_request_id(request)
        request.state.request_id = request_id
        request_token = request_id_var.set(request_id)
        actor_token = actor_id_var.set(None)

        try:
            start = time.perf_counter()
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000, 1)
            response.headers[REQUEST_ID_HEADER] = request_id

            fields = {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            }
            if duration_ms > SLOW_REQUEST_MS:
                logger.warning("Slow request", extra=fields)
            elif request.method in WRITE_METHODS:
                logger.info("Write request completed", extra=fields)
            return response
        finally:
            actor_id_var.reset(actor_token)
            request_id_var.reset(request_token)
