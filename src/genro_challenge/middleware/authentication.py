# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Authentication middleware for ASGI applications.

Runs one scheme's ``authenticate()`` for every HTTP request and stores
the outcome in ``scope["auth"]`` for downstream handlers and actions.

scope["auth"] format:
    {"tags": [...], "identity": "...", "backend": "<scheme name>"}
    None if the scheme produced no identity.

The result is also cached in ``scope["_auth_results"]``, so a later
AUTOMATIC challenge on the same scheme does not authenticate twice.

Invalid credentials (a failed result, not an absent one) are challenged
right away with the UNAUTHORIZED behavior of the same scheme, e.g. a
401 with WWW-Authenticate for a bearer scheme. Set
``challenge_invalid: false`` to let the request through instead.

Config:
    scheme (str): Scheme to authenticate. Default: the registry's
        default scheme. Nothing is done when neither is set. An
        unregistered scheme fails when the chain is built.
    challenge_invalid (bool): Default: True.

Example:
    Enable in config.yaml::

        middleware:
          auth: on

        auth_middleware:
          scheme: tokens
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from . import BaseMiddleware, headers_dict
from ..behavior import ChallengeBehavior
from ..context import HttpContext
from ..exceptions import UnknownSchemeError
from ..request import HttpRequest

if TYPE_CHECKING:
    from ..schemes import SchemeRegistry
    from ..types import ASGIApp, Receive, Scope, Send

__all__ = ["AuthenticationMiddleware"]

logger = logging.getLogger("genro_challenge.handlers")


class AuthenticationMiddleware(BaseMiddleware):
    """Authenticates each request with a registry scheme.

    Attributes:
        registry: Scheme registry (shared by the application).
        scheme: Scheme name (the registry default when not configured).
        handler: Handler of scheme, None when there is no scheme.
        challenge_invalid: Challenge failed credentials immediately.

    Class Attributes:
        middleware_name: "auth" - identifier for config.
        middleware_order: 400 - runs after logging.
        middleware_default: False - disabled by default.
    """

    middleware_name = "auth"
    middleware_order = 400
    middleware_default = False

    __slots__ = ("registry", "scheme", "handler", "challenge_invalid")

    def __init__(
        self,
        app: ASGIApp,
        registry: SchemeRegistry | None = None,
        scheme: str | None = None,
        challenge_invalid: bool = True,
        **kwargs: Any,
    ) -> None:
        """Initialize authentication middleware.

        The scheme is resolved here, once: the registry is frozen by the
        application before the middleware chain is built.

        Raises:
            ValueError: If no registry is given.
            UnknownSchemeError: If the scheme has no registered handler.
        """
        super().__init__(app, **kwargs)
        if registry is None:
            raise ValueError("AuthenticationMiddleware requires a scheme registry")
        self.registry = registry
        self.scheme = scheme or registry.default_authenticate_scheme()
        self.handler = registry.get_handler(self.scheme) if self.scheme else None
        if self.scheme and self.handler is None:
            raise UnknownSchemeError(self.scheme)
        self.challenge_invalid = challenge_invalid

    @headers_dict
    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Authenticate HTTP requests; other scope types pass through."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        handler = self.handler
        if handler is None:
            scope["auth"] = None
            await self.app(scope, receive, send)
            return

        context = HttpContext(HttpRequest(scope, receive), registry=self.registry)
        result = await handler.authenticate_once(context)
        scope["auth"] = result.as_auth_dict()

        if result.failure is not None and self.challenge_invalid:
            logger.info("Scheme '%s' rejected credentials: %s", self.scheme, result.failure)
            await handler.challenge(context, None, ChallengeBehavior.UNAUTHORIZED)
            await context.response(scope, receive, send)
            return

        await self.app(scope, receive, send)


if __name__ == "__main__":
    pass
