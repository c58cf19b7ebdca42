import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response


class OriginGuardMiddleware(BaseHTTPMiddleware):
    """Reject browser requests from origins outside the allow-list before routing."""

    def __init__(self, app, allowed_origins=()):
        super().__init__(app)
        self.allowed_origins = set(allowed_origins)

    async def dispatch(self, request: Request, call_next) -> Response:
        origin = request.headers.get("origin")
        if origin and origin not in self.allowed_origins:
            logging.warning(f"Rejected request from origin {origin}")
            return JSONResponse({"error": "Not allowed by CORS"}, status_code=403)
        return await call_next(request)
