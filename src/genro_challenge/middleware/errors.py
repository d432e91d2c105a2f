# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Error handling middleware for challenge applications.

Turns exceptions escaping the application into plain-text responses:

    HTTPException       -> its status, detail as body, its headers
    UnknownSchemeError  -> 500, logged as a configuration error naming the
                           scheme (or the missing default kind)
    InvalidArgumentError, other ChallengeError
                        -> 500, logged with the offending argument / scheme
    any other Exception -> 500, logged with traceback

Challenge errors mean the application asked for a challenge it cannot
carry out (a scheme that was never registered, no default scheme, a
malformed scheme list). They are not the caller's fault, so the client
only sees 500; the log says what to fix.

If the response was already started when the error happened, nothing
more is sent: the error is logged and the connection is left to the
server.

Config:
    debug (bool): Include the traceback in 500 bodies. Default: False.

asyncio.CancelledError is not an Exception and is never converted.
"""

from __future__ import annotations

import logging
import traceback
from typing import TYPE_CHECKING, Any, MutableMapping

from . import BaseMiddleware
from ..exceptions import (
    ChallengeError,
    HandlerError,
    HTTPException,
    InvalidArgumentError,
    MissingDefaultSchemeError,
    UnknownSchemeError,
)
from ..response import Response

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send

logger = logging.getLogger("genro_challenge")


class ErrorMiddleware(BaseMiddleware):
    """Converts application errors into HTTP error responses.

    Attributes:
        debug: If True, include stack traces in 500 error responses.

    Class Attributes:
        middleware_name: "errors" - identifier for config.
        middleware_order: 100 - outermost, sees every error.
        middleware_default: True - enabled by default.
    """

    middleware_name = "errors"
    middleware_order = 100
    middleware_default = True

    __slots__ = ("debug",)

    def __init__(self, app: ASGIApp, debug: bool = False, **kwargs: Any) -> None:
        super().__init__(app, **kwargs)
        self.debug = debug

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the app; non-HTTP scopes (lifespan) pass through untouched."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def tracking_send(message: MutableMapping[str, Any]) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except HTTPException as e:
            if started:
                logger.error("%s raised after response start on %s", e, scope.get("path", "/"))
                return
            await self._http_error_response(e)(scope, receive, send)
        except ChallengeError as e:
            self.log_challenge_error(e, scope.get("path", "/"))
            if not started:
                await self._server_error_response()(scope, receive, send)
        except Exception as e:
            logger.exception("Unhandled error on %s: %s", scope.get("path", "/"), e)
            if not started:
                await self._server_error_response()(scope, receive, send)

    def log_challenge_error(self, error: ChallengeError, path: str) -> None:
        """Log a challenge error with the detail needed to fix the configuration."""
        if isinstance(error, MissingDefaultSchemeError):
            logger.error(
                "Authentication configuration error on %s: no default %s scheme configured",
                path,
                error.kind,
            )
        elif isinstance(error, UnknownSchemeError):
            logger.error(
                "Authentication configuration error on %s: scheme '%s' is not registered",
                path,
                error.scheme,
            )
        elif isinstance(error, InvalidArgumentError):
            logger.error("Invalid challenge on %s: %s (%s)", path, error.detail, error.argument)
        elif isinstance(error, HandlerError):
            logger.exception("Scheme '%s' failed on %s: %s", error.scheme, path, error)
        else:
            logger.exception("Challenge failed on %s: %s", path, error)

    def _http_error_response(self, exc: HTTPException) -> Response:
        response = Response(exc.detail or "", status_code=exc.status_code, media_type="text/plain")
        for name, value in exc.headers or []:
            response.set_header(name, value)
        return response

    def _server_error_response(self) -> Response:
        body = "Internal Server Error"
        if self.debug:
            body += f"\n\n{traceback.format_exc()}"
        return Response(body, status_code=500, media_type="text/plain")


if __name__ == "__main__":
    pass
