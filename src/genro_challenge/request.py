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

"""
HTTP request adapter over an ASGI scope.

HttpRequest exposes the parts of the scope that authentication handlers
need: headers, the request URL pieces used to build redirect locations,
and the ``auth`` entry set by the authentication middleware.

Headers are parsed once into ``scope["_headers"]`` (lowercase names),
shared with middleware decorated by ``headers_dict``.

Example:
    request = HttpRequest(scope, receive)
    request.headers.get("authorization")
    request.url            # "http://localhost/Challenge/AutomaticBehavior"
    request.path_and_query # "/Challenge/AutomaticBehavior?x=1"
"""

from __future__ import annotations

import uuid
from typing import Any

from .types import Receive, Scope

__all__ = ["HttpRequest", "parse_headers"]


def parse_headers(scope: Scope) -> dict[str, str]:
    """Return scope headers as a lowercase dict, caching it in scope["_headers"]."""
    if "_headers" not in scope:
        scope["_headers"] = {
            name.decode("latin-1").lower(): value.decode("latin-1")
            for name, value in scope.get("headers", [])
        }
    headers: dict[str, str] = scope["_headers"]
    return headers


class HttpRequest:
    """
    HTTP request wrapper.

    Attributes:
        scope: The ASGI scope (shared, not copied).
        receive: ASGI receive callable (may be None in tests).
        id: Server-generated correlation ID.
    """

    __slots__ = ("scope", "receive", "id")

    def __init__(self, scope: Scope, receive: Receive | None = None) -> None:
        self.scope = scope
        self.receive = receive
        self.id = str(uuid.uuid4())

    @property
    def method(self) -> str:
        """HTTP method, uppercase."""
        return str(self.scope.get("method", "GET")).upper()

    @property
    def path(self) -> str:
        """Request path without root_path."""
        return str(self.scope.get("path", "/"))

    @property
    def root_path(self) -> str:
        """Mount prefix of the application (ASGI root_path)."""
        return str(self.scope.get("root_path", ""))

    @property
    def query_string(self) -> str:
        raw = self.scope.get("query_string", b"")
        if isinstance(raw, bytes):
            return raw.decode("latin-1")
        return str(raw)

    @property
    def headers(self) -> dict[str, str]:
        """Request headers (lowercase keys)."""
        return parse_headers(self.scope)

    @property
    def scheme(self) -> str:
        return str(self.scope.get("scheme", "http"))

    @property
    def host(self) -> str:
        """Host header, falling back to the server address."""
        host = self.headers.get("host")
        if host:
            return host
        server = self.scope.get("server")
        if server:
            name, port = server[0], server[1]
            default_port = 443 if self.scheme == "https" else 80
            return name if port in (None, default_port) else f"{name}:{port}"
        return "localhost"

    @property
    def path_and_query(self) -> str:
        """root_path + path, plus ``?query`` when present."""
        value = self.root_path + self.path
        if self.query_string:
            value += f"?{self.query_string}"
        return value

    @property
    def url(self) -> str:
        """Absolute request URL."""
        return f"{self.scheme}://{self.host}{self.path_and_query}"

    @property
    def auth(self) -> dict[str, Any] | None:
        """Auth dict set by the authentication middleware, or None."""
        auth: dict[str, Any] | None = self.scope.get("auth")
        return auth

    def __repr__(self) -> str:
        return f"HttpRequest(method={self.method!r}, path={self.path!r})"


if __name__ == "__main__":
    pass
