# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ChallengeApplication - ASGI app whose actions can return challenges.

Actions are registered per exact path and receive the request's
HttpContext. They may be sync or async (called through smartasync) and
return:

    ChallengeResult  -> executed through the app's ChallengeDispatcher;
                        the response built by the handlers is sent
    Response         -> sent as is
    anything else    -> body of context.response (see Response.set_result)

Example::

    registry = SchemeRegistry(default_scheme="cookies")
    registry.add_scheme("cookies", "redirect",
                        login_path="/Home/Login",
                        access_denied_path="/Home/AccessDenied")

    app = ChallengeApplication(registry, middleware={"logging": True})

    @app.route("/Challenge/AutomaticBehavior")
    def automatic_behavior(context):
        return challenge()

    @app.route("/Challenge/ForbiddenBehavior")
    def forbidden_behavior(context):
        return challenge(behavior=ChallengeBehavior.FORBIDDEN)

The registry is frozen when the application is built.

Client disconnect:
    While a ChallengeResult is dispatched, the app listens on ``receive``
    for ``http.disconnect`` and cancels the HttpContext when it arrives.
    Remaining schemes are not challenged and no response is sent.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from smartasync import smartasync

from .context import HttpContext
from .dispatcher import ChallengeDispatcher
from .exceptions import HTTPNotFound
from .middleware import middleware_chain
from .request import HttpRequest
from .response import Response
from .result import ChallengeResult

if TYPE_CHECKING:
    from .schemes import SchemeRegistry
    from .types import ASGIApp, Receive, Scope, Send

__all__ = ["ChallengeApplication"]

Action = Callable[[HttpContext], Any]


class ChallengeApplication:
    """Action-layer ASGI application.

    Attributes:
        registry: Frozen scheme registry.
        dispatcher: ChallengeDispatcher over registry.
        routes: Dict mapping exact path to action.
        app: Middleware chain wrapping the endpoint.
    """

    __slots__ = ("registry", "dispatcher", "routes", "app")

    def __init__(
        self,
        registry: SchemeRegistry,
        routes: dict[str, Action] | None = None,
        middleware: str | list[str] | dict[str, Any] | None = None,
        middleware_options: dict[str, Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Build the application.

        Args:
            registry: Configured scheme registry (frozen here).
            routes: Initial {path: action} table.
            middleware: Middleware on/off config (see middleware_chain).
            middleware_options: {"<name>_middleware": {...}} sections.
            logger: Dispatcher logger (default "genro_challenge.dispatcher").
        """
        registry.freeze()
        self.registry = registry
        self.dispatcher = ChallengeDispatcher(registry, logger=logger)
        self.routes: dict[str, Action] = dict(routes or {})
        self.app: ASGIApp = middleware_chain(
            middleware, self.endpoint, full_config=middleware_options, registry=registry
        )

    def route(self, path: str) -> Callable[[Action], Action]:
        """Decorator registering an action for path."""

        def decorator(action: Action) -> Action:
            self.routes[path] = action
            return action

        return decorator

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI interface."""
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        await self.app(scope, receive, send)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _watch_disconnect(self, context: HttpContext, receive: Receive) -> None:
        """Cancel context when the client goes away."""
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                context.cancel()
                return

    async def endpoint(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Innermost ASGI app: run the action and send its response."""
        context = HttpContext(HttpRequest(scope, receive), registry=self.registry)
        action = self.routes.get(context.request.path)
        if action is None:
            raise HTTPNotFound(f"No action for {context.request.path}")

        result = await smartasync(action)(context)

        if isinstance(result, ChallengeResult):
            listener = asyncio.create_task(self._watch_disconnect(context, receive))
            try:
                await result.execute(context, self.dispatcher)
            except asyncio.CancelledError:
                if not context.cancelled:
                    raise
                self.dispatcher.logger.debug(
                    "Client disconnected on %s, challenge abandoned", context.request.path
                )
                return
            finally:
                listener.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await listener
        elif isinstance(result, Response):
            context.response = result
        else:
            context.response.set_result(result)

        await context.response(scope, receive, send)


if __name__ == "__main__":
    pass
