"""
CampusNotes Backend — OPTIONS Short-Circuit Middleware
=======================================================

What:  Answers every OPTIONS request with an empty 200 carrying CORS headers.
Why:   Starlette's CORSMiddleware rejects preflights for methods or headers
       outside its allow lists with a 400, and bare OPTIONS probes (no Origin)
       would otherwise hit the router and come back 405. Clients of this API
       expect any OPTIONS to succeed.
When:  Outside CORSMiddleware, so no OPTIONS request ever reaches it.

Headers on the reply:
    Access-Control-Allow-Origin   "*" when every origin is allowed, otherwise
                                  the request's Origin if it is in the list
    Access-Control-Allow-Methods  the configured methods
    Access-Control-Allow-Headers  the configured headers plus whatever the
                                  preflight asked for
"""

from typing import Sequence

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

PREFLIGHT_MAX_AGE = 600


class OptionsShortCircuitMiddleware(BaseHTTPMiddleware):
    """Returns 200 for any OPTIONS request without reaching CORS or the routes."""

    def __init__(
        self,
        app: ASGIApp,
        allow_origins: Sequence[str] = ("*",),
        allow_methods: Sequence[str] = (),
        allow_headers: Sequence[str] = (),
    ):
        super().__init__(app)
        self.allow_all_origins = "*" in allow_origins
        self.allow_origins = set(allow_origins)
        self.allow_methods = ", ".join(allow_methods)
        self.allow_headers = list(allow_headers)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "OPTIONS":
            return await call_next(request)

        response = Response(status_code=200)
        origin = request.headers.get("origin")
        if origin is None:
            return response

        if self.allow_all_origins:
            response.headers["Access-Control-Allow-Origin"] = "*"
        elif origin in self.allow_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
        else:
            # Unknown origin: still 200, but the browser will refuse the call
            return response

        headers = list(self.allow_headers)
        requested = request.headers.get("access-control-request-headers", "")
        for name in requested.split(","):
            name = name.strip()
            if name and name.lower() not in {h.lower() for h in headers}:
                headers.append(name)

        if self.allow_methods:
            response.headers["Access-Control-Allow-Methods"] = self.allow_methods
        if headers:
            response.headers["Access-Control-Allow-Headers"] = ", ".join(headers)
        response.headers["Access-Control-Max-Age"] = str(PREFLIGHT_MAX_AGE)
        return response
