# newsdesk/middleware/api_key.py
from __future__ import annotations

import logging
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..settings import settings

log = logging.getLogger(__name__)

# Routes that change server state; everything else on the site is public
PROTECTED_PATH_PREFIXES: tuple[str, ...] = (
    "/revalidate",
)

def _is_protected(path: str) -> bool:
    return any(path.startswith(p) for p in PROTECTED_PATH_PREFIXES)

class APIKeyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        if not _is_protected(request.url.path):
            return await call_next(request)

        # read per request so tests and reloads can change it
        api_key = settings.api_key
        if not api_key:
            log.warning("API key not configured; allowing request to %s", request.url.path)
            return await call_next(request)

        provided = request.headers.get("x-api-key")
        if provided != api_key:
            return JSONResponse(status_code=401, content={"detail": "Invalid or missing API key"})

        return await call_next(request)
