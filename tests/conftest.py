# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Shared fixtures: ASGI capture helpers and a header-flag test handler."""

from __future__ import annotations

import asyncio
from typing import Any, Callable
from urllib.parse import urlsplit

import pytest

from genro_challenge.context import HttpContext
from genro_challenge.dispatcher import ChallengeDispatcher
from genro_challenge.handlers import AuthenticateResult, AuthenticationHandler
from genro_challenge.request import HttpRequest
from genro_challenge.schemes import SchemeRegistry


class HeaderFlagHandler(AuthenticationHandler):
    """Considers the caller authenticated if an "authenticated" header is present.

    Reacts like a cookie scheme: unauthorized -> login path,
    forbidden -> access denied path. Hooks are plain functions.
    """

    DEFAULTS: dict[str, Any] = {
        "login_path": "/Home/Login",
        "access_denied_path": "/Home/AccessDenied",
    }

    def authenticate(self, context: HttpContext) -> AuthenticateResult:
        if "authenticated" not in context.request.headers:
            return AuthenticateResult.no_result()
        return AuthenticateResult.success("test-user")

    def _absolute(self, context: HttpContext, path: str) -> str:
        request = context.request
        return f"{request.scheme}://{request.host}{request.root_path}{path}"

    def handle_unauthorized(self, context: HttpContext, properties: Any) -> None:
        context.response.redirect(self._absolute(context, self.options["login_path"]))

    def handle_forbidden(self, context: HttpContext, properties: Any) -> None:
        context.response.redirect(self._absolute(context, self.options["access_denied_path"]))


class MockSend:
    """Capture ASGI send messages for testing."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def start_message(self) -> dict[str, Any]:
        """Get the http.response.start message."""
        return next(m for m in self.messages if m["type"] == "http.response.start")

    @property
    def status(self) -> int:
        return self.start_message["status"]

    @property
    def headers(self) -> dict[bytes, bytes]:
        return dict(self.start_message["headers"])

    @property
    def location_path(self) -> str:
        """Path of the Location header (like Location.AbsolutePath)."""
        return urlsplit(self.headers[b"location"].decode()).path

    @property
    def body(self) -> bytes:
        return b"".join(m.get("body", b"") for m in self.messages if m["type"] == "http.response.body")


class MockReceive:
    """ASGI receive: an empty request body, then the queued messages.

    Once the queue is empty it waits forever, like a server whose client
    is still connected.
    """

    def __init__(self, *messages: dict[str, Any]) -> None:
        self.messages: list[dict[str, Any]] = [
            {"type": "http.request", "body": b"", "more_body": False},
            *messages,
        ]

    async def __call__(self) -> dict[str, Any]:
        if self.messages:
            return self.messages.pop(0)
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


def build_scope(
    path: str = "/",
    headers: dict[str, str] | None = None,
    query_string: bytes = b"",
    method: str = "GET",
    **extra: Any,
) -> dict[str, Any]:
    """Minimal HTTP scope for localhost:80."""
    scope: dict[str, Any] = {
        "type": "http",
        "method": method,
        "scheme": "http",
        "path": path,
        "root_path": "",
        "query_string": query_string,
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "server": ("localhost", 80),
        "client": ("127.0.0.1", 50000),
    }
    scope.update(extra)
    return scope


@pytest.fixture
def send() -> MockSend:
    return MockSend()


@pytest.fixture
def receive() -> MockReceive:
    return MockReceive()


@pytest.fixture
def make_receive() -> Callable[..., MockReceive]:
    """Factory: make_receive(*messages) queued after the request body."""
    return MockReceive


@pytest.fixture
def make_scope() -> Callable[..., dict[str, Any]]:
    return build_scope


@pytest.fixture
def registry() -> SchemeRegistry:
    """Registry with the header-flag handler as default scheme "Test"."""
    registry = SchemeRegistry(default_scheme="Test")
    registry.add_handler(HeaderFlagHandler("Test"))
    return registry


@pytest.fixture
def dispatcher(registry: SchemeRegistry) -> ChallengeDispatcher:
    return ChallengeDispatcher(registry)


@pytest.fixture
def make_context(registry: SchemeRegistry) -> Callable[..., HttpContext]:
    """Factory: make_context(path="/", headers=None, **scope_extra)."""

    def factory(path: str = "/", headers: dict[str, str] | None = None, **extra: Any) -> HttpContext:
        scope = build_scope(path, headers=headers, **extra)
        return HttpContext(HttpRequest(scope), registry=registry)

    return factory
