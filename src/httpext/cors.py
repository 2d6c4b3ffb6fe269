"""Cross-Origin Resource Sharing response headers for httpext.

A ``CORSPolicy`` holds the allow-lists and writes deterministic
``Access-Control-*`` headers onto a response, based on the ``Origin`` header
of the request being answered.
"""

import logging
from datetime import timedelta

from fastapi import Request, Response

from httpext.config import CORSConfig
from httpext.errors import UnmatchedCORSOrigin
from httpext.middleware import Endpoint, Middleware

logger = logging.getLogger(__name__)

HEADER_CORS_ALLOW_ORIGIN = "Access-Control-Allow-Origin"
HEADER_CORS_EXPOSE_HEADERS = "Access-Control-Expose-Headers"
HEADER_CORS_MAX_AGE = "Access-Control-Max-Age"
HEADER_CORS_ALLOW_CREDENTIALS = "Access-Control-Allow-Credentials"
HEADER_CORS_ALLOW_METHODS = "Access-Control-Allow-Methods"
HEADER_CORS_ALLOW_HEADERS = "Access-Control-Allow-Headers"
HEADER_VARY = "Vary"


class CORSPolicy:
    """Allow-lists of origins, methods and headers for cross-origin requests.

    Attributes:
        max_age: How long preflight results may be cached.
        allow_credentials: Whether credentials may accompany requests.
    """

    def __init__(
        self, max_age: timedelta = timedelta(0), allow_credentials: bool = False
    ) -> None:
        self.max_age = max_age
        self.allow_credentials = allow_credentials

        self._allow_all_origins = False
        self._origins: list[str] = []
        self._allow_all_methods = False
        self._methods: list[str] = []
        self._allow_all_headers = False
        self._allow_headers: list[str] = []
        self._expose_headers: list[str] = []

    @classmethod
    def from_config(cls, config: CORSConfig) -> "CORSPolicy":
        """Build a policy from the ``cors`` configuration section.

        A ``"*"`` entry in any allow-list allows everything for that list.
        """
        policy = cls(
            max_age=timedelta(seconds=config.max_age),
            allow_credentials=config.allow_credentials,
        )
        if "*" in config.allow_origins:
            policy.allow_all_origins()
        elif config.allow_origins:
            policy.allow_origins(*config.allow_origins)
        if "*" in config.allow_methods:
            policy.allow_all_methods()
        elif config.allow_methods:
            policy.allow_methods(*config.allow_methods)
        if "*" in config.allow_headers:
            policy.allow_all_headers()
        elif config.allow_headers:
            policy.allow_headers(*config.allow_headers)
        if config.expose_headers:
            policy.expose_headers(*config.expose_headers)
        return policy

    # -- Allow-lists ------------------------------------------------------------

    def allow_origins(self, *origins: str) -> None:
        self._allow_all_origins = False
        self._origins.extend(origins)

    def allow_all_origins(self) -> None:
        self._allow_all_origins = True
        self._origins = []

    def allow_methods(self, *methods: str) -> None:
        self._allow_all_methods = False
        self._methods.extend(methods)

    def allow_all_methods(self) -> None:
        self._allow_all_methods = True
        self._methods = []

    def allow_headers(self, *headers: str) -> None:
        self._allow_all_headers = False
        self._allow_headers.extend(headers)

    def allow_all_headers(self) -> None:
        self._allow_all_headers = True
        self._allow_headers = []

    def expose_headers(self, *headers: str) -> None:
        self._expose_headers.extend(headers)

    def origin_allowed(self, origin: str) -> bool:
        return self._allow_all_origins or origin in self._origins

    def check_origin(self, origin: str) -> None:
        """Raise ``UnmatchedCORSOrigin`` if ``origin`` is not allowed."""
        if not self.origin_allowed(origin):
            raise UnmatchedCORSOrigin(origin)

    # -- Header rendering -------------------------------------------------------

    def write_headers(self, request: Request, response: Response) -> None:
        """Set the CORS response headers for ``request`` on ``response``.

        When origins are restricted, the request's ``Origin`` is echoed back if
        allowed and ``null`` is sent otherwise. ``Vary: Origin`` is added when
        more than one origin is configured, since the answer then depends on
        the request.
        """
        headers = response.headers

        if self._allow_all_origins:
            headers[HEADER_CORS_ALLOW_ORIGIN] = "*"
        else:
            if len(self._origins) > 1:
                headers[HEADER_VARY] = "Origin"
            origin = request.headers.get("origin", "")
            if self.origin_allowed(origin):
                headers[HEADER_CORS_ALLOW_ORIGIN] = origin
            else:
                logger.debug("Rejecting unmatched CORS origin %r", origin)
                headers[HEADER_CORS_ALLOW_ORIGIN] = "null"

        if self._expose_headers:
            headers[HEADER_CORS_EXPOSE_HEADERS] = ", ".join(self._expose_headers)

        headers[HEADER_CORS_MAX_AGE] = str(int(self.max_age.total_seconds()))
        headers[HEADER_CORS_ALLOW_CREDENTIALS] = "true" if self.allow_credentials else "false"

        if self._allow_all_methods:
            headers[HEADER_CORS_ALLOW_METHODS] = "*"
        elif self._methods:
            headers[HEADER_CORS_ALLOW_METHODS] = ", ".join(self._methods)

        if self._allow_all_headers:
            headers[HEADER_CORS_ALLOW_HEADERS] = "*"
        elif self._allow_headers:
            headers[HEADER_CORS_ALLOW_HEADERS] = ", ".join(self._allow_headers)

    def middleware(self) -> Middleware:
        """Return a middleware that writes this policy's headers on every response."""

        def wrap(next_endpoint: Endpoint) -> Endpoint:
            async def cors_endpoint(request: Request) -> Response:
                response = await next_endpoint(request)
                self.write_headers(request, response)
                return response

            return cors_endpoint

        return wrap
