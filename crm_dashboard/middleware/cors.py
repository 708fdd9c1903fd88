"""
CORS Middleware - Cross-Origin Resource Sharing configuration.

The dashboard runs in the browser and calls the ghl-sync function and the
dashboard endpoints cross-origin, the same way the Supabase client invokes
edge functions.

Configuration:
- ["*"]: any origin, no credentials (the edge-function default)
- explicit list: only those origins, credentials allowed

Usage:
    from crm_dashboard.middleware.cors import CORSMiddleware

    app.add_middleware(
        CORSMiddleware,
        allowed_origins=["http://localhost:5173"],
    )
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from crm_dashboard.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

WILDCARD = "*"


class CORSMiddleware(BaseHTTPMiddleware):
    """
    CORS (Cross-Origin Resource Sharing) middleware.

    Handles preflight OPTIONS requests and adds CORS headers to responses.
    """

    def __init__(
        self,
        app,
        allowed_origins: list[str] | None = None,
        allow_methods: list[str] | None = None,
        allow_headers: list[str] | None = None,
        max_age: int = 600,
    ):
        """
        Initialize CORS middleware.

        Args:
            app: FastAPI application
            allowed_origins: Allowed origins, or ["*"] for any origin
            allow_methods: Allowed HTTP methods (default: GET, POST, OPTIONS)
            allow_headers: Allowed request headers (default: Supabase client headers)
            max_age: How long (seconds) to cache preflight responses
        """
        super().__init__(app)
        self.allowed_origins = allowed_origins or []
        self.allow_any = WILDCARD in self.allowed_origins
        self.allow_methods = allow_methods or ["GET", "POST", "OPTIONS"]
        self.allow_headers = allow_headers or [
            "authorization",
            "x-client-info",
            "apikey",
            "content-type",
        ]
        self.max_age = max_age

        logger.info(
            "CORS middleware initialized",
            allowed_origins=self.allowed_origins,
            allow_any=self.allow_any,
        )

    def _allowed_origin_header(self, origin: str | None) -> str | None:
        if self.allow_any:
            return WILDCARD
        if origin and origin in self.allowed_origins:
            return origin
        return None

    async def dispatch(self, request, call_next):
        origin = request.headers.get("origin")
        allow_origin = self._allowed_origin_header(origin)

        if request.method == "OPTIONS":
            if allow_origin:
                return self._preflight_response(allow_origin)
            logger.warning(
                "CORS preflight rejected - origin not allowed",
                origin=origin,
                allowed_origins=self.allowed_origins,
            )
            return Response(status_code=403, content="Origin not allowed")

        response = await call_next(request)

        if allow_origin:
            response.headers["Access-Control-Allow-Origin"] = allow_origin
            response.headers["Access-Control-Allow-Headers"] = ", ".join(self.allow_headers)
            if not self.allow_any:
                response.headers["Access-Control-Allow-Credentials"] = "true"
                response.headers["Vary"] = "Origin"
        elif origin:
            logger.warning(
                "CORS request from disallowed origin",
                origin=origin,
                path=request.url.path,
            )

        return response

    def _preflight_response(self, allow_origin: str) -> Response:
        headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": ", ".join(self.allow_methods),
            "Access-Control-Allow-Headers": ", ".join(self.allow_headers),
            "Access-Control-Max-Age": str(self.max_age),
        }
        if allow_origin != WILDCARD:
            headers["Access-Control-Allow-Credentials"] = "true"
            headers["Vary"] = "Origin"

        return Response(status_code=204, headers=headers)
