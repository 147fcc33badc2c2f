# newsdesk/middleware/logging.py
from __future__ import annotations

import json
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# One JSON object per line; kept off the root logger so access lines stay machine-readable
json_logger = logging.getLogger("newsdesk.access")
json_logger.setLevel(logging.INFO)
json_logger.propagate = False
if not json_logger.handlers:
    json_logger.addHandler(logging.StreamHandler())

class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        t0 = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            json_logger.info(json.dumps({
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round((time.perf_counter() - t0) * 1000, 2),
            }))
