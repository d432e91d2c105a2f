# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Logging Middleware - HTTP request/response access logging.

Log format:
    Request:  "<- GET /Challenge/AutomaticBehavior from 127.0.0.1"
    Response: "-> GET /Challenge/AutomaticBehavior 302 (1.5ms) location=/Home/Login"
    Error:    "-> GET /Challenge/AutomaticBehavior ERROR: ... (1.5ms)"

The Location header of 3xx responses is logged, so login and
access-denied redirects are visible in the access log.

Config:
    logger_name (str): Logger name. Default: "genro_challenge.access".
    level (str): Log level (DEBUG, INFO, WARNING, ERROR). Default: "INFO".
    include_query (bool): Include query string in request log. Default: True.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, MutableMapping

from . import BaseMiddleware

if TYPE_CHECKING:
    from ..types import ASGIApp, Receive, Scope, Send


class LoggingMiddleware(BaseMiddleware):
    """Access logging middleware for HTTP requests.

    Attributes:
        logger: Python Logger instance for access logs.
        level: Numeric log level (from logging module).
        include_query: Whether to include query string in request path.

    Class Attributes:
        middleware_name: "logging" - identifier for config.
        middleware_order: 200 - runs early to capture full request timing.
        middleware_default: False - disabled by default.
    """

    middleware_name = "logging"
    middleware_order = 200
    middleware_default = False

    __slots__ = ("logger", "level", "include_query")

    def __init__(
        self,
        app: ASGIApp,
        logger_name: str = "genro_challenge.access",
        level: str = "INFO",
        include_query: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(app, **kwargs)
        self.logger = logging.getLogger(logger_name)
        self.level = getattr(logging, level.upper(), logging.INFO)
        self.include_query = include_query

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process request with access logging.

        Exceptions are logged with ERROR level before re-raising.
        """
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        request_info = f"{scope.get('method', '?')} {scope.get('path', '/')}"
        query = scope.get("query_string", b"").decode("latin-1")
        if self.include_query and query:
            request_info += f"?{query}"

        client = scope.get("client")
        client_ip = client[0] if client else "unknown"
        self.logger.log(self.level, f"<- {request_info} from {client_ip}")

        status_code: int = 0
        location: str | None = None

        async def send_with_logging(message: MutableMapping[str, Any]) -> None:
            nonlocal status_code, location
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
                for name, value in message.get("headers", []):
                    if name == b"location":
                        location = value.decode("latin-1")
            await send(message)

        try:
            await self.app(scope, receive, send_with_logging)
        except Exception as e:
            duration = (time.perf_counter() - start_time) * 1000
            self.logger.error(f"-> {request_info} ERROR: {e} ({duration:.1f}ms)")
            raise

        duration = (time.perf_counter() - start_time) * 1000
        line = f"-> {request_info} {status_code} ({duration:.1f}ms)"
        if location:
            line += f" location={location}"
        self.logger.log(self.level, line)


if __name__ == "__main__":
    pass
