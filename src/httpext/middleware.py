"""Ordered composition of request-handling middleware.

An endpoint is an async callable taking a request and returning a response.
A middleware takes the next endpoint in the chain and returns a new endpoint
wrapping it. Middleware run in the order they were registered: the first one
used is the outermost wrapper and sees each request first.
"""

import logging
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, Response

logger = logging.getLogger(__name__)

Endpoint = Callable[[Request], Awaitable[Response]]
Middleware = Callable[[Endpoint], Endpoint]
Hook = Callable[[Request], Awaitable[None]]


class MiddlewareSet:
    """An ordered list of middleware applied around an endpoint."""

    def __init__(self) -> None:
        self._middleware: list[Middleware] = []

    def __len__(self) -> int:
        return len(self._middleware)

    def empty(self) -> bool:
        """Report whether no middleware have been registered."""
        return not self._middleware

    def use(self, middleware: Middleware) -> None:
        """Register a middleware that is aware of the chain.

        The middleware decides whether, and when, to call the endpoint it
        wraps.
        """
        self._middleware.append(middleware)
        logger.debug("Registered middleware %s", getattr(middleware, "__name__", middleware))

    def use_handler(self, hook: Hook) -> None:
        """Register a hook that runs before the rest of the chain.

        The hook cannot stop the chain except by raising.
        """

        def wrap(next_endpoint: Endpoint) -> Endpoint:
            async def hooked(request: Request) -> Response:
                await hook(request)
                return await next_endpoint(request)

            return hooked

        self._middleware.append(wrap)
        logger.debug("Registered handler hook %s", getattr(hook, "__name__", hook))

    def apply(self, endpoint: Endpoint) -> Endpoint:
        """Wrap ``endpoint`` in every registered middleware."""
        wrapped = endpoint
        for middleware in reversed(self._middleware):
            wrapped = middleware(wrapped)
        return wrapped

    def install(self, app: FastAPI) -> None:
        """Run this set around every request served by ``app``.

        Registered as a single HTTP middleware so the order inside the set is
        preserved regardless of FastAPI's reverse registration order.
        """

        @app.middleware("http")
        async def middleware_set(request: Request, call_next) -> Response:
            return await self.apply(call_next)(request)
