"""Request id middleware.

Binds a request id (the caller's X-Request-ID, or a fresh one) for the whole
request, echoes it on the response and logs one line per finished request.
Probe and scrape endpoints are not logged.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import get_logger
from .request_id import request_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
UNLOGGED_PATHS = frozenset({"/health", "/ready", "/metrics"})


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        with request_context(request.headers.get(REQUEST_ID_HEADER)) as request_id:
            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    f"{request.method} {request.url.path} failed after "
                    f"{(time.perf_counter() - started) * 1000:.1f}ms"
                )
                raise

            if request.url.path not in UNLOGGED_PATHS:
                logger.info(
                    f"{request.method} {request.url.path} -> {response.status_code} "
                    f"in {(time.perf_counter() - started) * 1000:.1f}ms"
                )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
