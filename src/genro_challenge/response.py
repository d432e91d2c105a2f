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
HTTP Response builder for ASGI applications.

The response is created empty by HttpContext and shared by everything
that handles the request: the action sets a body, challenge handlers set
a status and redirect or challenge headers. Nothing is sent until the
application awaits ``response(scope, receive, send)``.

Reactions are applied in call order and later ones win: two redirects in
a row leave the second Location, two ``set_status`` calls leave the
second status.

Response Methods
================
set_status(status_code)
    Set the HTTP status code.

set_header(name, value)
    Append a header (duplicates allowed, e.g. Set-Cookie).

add_header_value(name, value)
    Append a header unless that exact value is already present.

replace_header(name, value)
    Drop every header with that name, then add it once.

redirect(location, status_code=302)
    Set status and replace the Location header.

set_result(result)
    Set body from an action result with content-type auto-detection:
    dict/list -> JSON, bytes -> octet-stream, str/other -> text/plain.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from .types import Receive, Scope, Send

__all__ = ["Response"]

# Type alias for headers input
HeadersInput = Mapping[str, str] | list[tuple[str, str]] | None


def _normalize_headers(headers: HeadersInput) -> list[tuple[str, str]]:
    """Normalize headers input to list of tuples."""
    if headers is None:
        return []
    if isinstance(headers, list):
        return list(headers)
    return list(headers.items())


class Response:
    """
    HTTP response class.

    Implements ``__call__`` to be usable as an ASGI application.

    Attributes:
        body: Encoded response body as bytes.
        status_code: HTTP status code.
        media_type: Content-Type media type (may include charset).

    Example:
        >>> response = Response(content="Hello", media_type="text/plain")
        >>> await response(scope, receive, send)

        # Or create empty and configure:
        >>> response = Response()
        >>> response.redirect("/Home/Login")
        >>> await response(scope, receive, send)
    """

    __slots__ = ("body", "status_code", "media_type", "_headers")

    charset: str = "utf-8"

    def __init__(
        self,
        content: bytes | str | None = None,
        status_code: int = 200,
        headers: HeadersInput = None,
        media_type: str | None = None,
    ) -> None:
        self.status_code = status_code
        self._headers: list[tuple[str, str]] = _normalize_headers(headers)
        self.media_type = media_type
        self.body = self._encode_content(content)

    def _encode_content(self, content: bytes | str | None) -> bytes:
        if content is None:
            return b""
        if isinstance(content, bytes):
            return content
        return content.encode(self.charset)

    @property
    def headers(self) -> list[tuple[str, str]]:
        """Copy of the response headers as (name, value) tuples."""
        return list(self._headers)

    def get_header(self, name: str) -> str | None:
        """Return the last value of header name (case-insensitive), or None."""
        lname = name.lower()
        value = None
        for hname, hvalue in self._headers:
            if hname.lower() == lname:
                value = hvalue
        return value

    def get_headers(self, name: str) -> list[str]:
        """Return every value of header name (case-insensitive), in order."""
        lname = name.lower()
        return [hvalue for hname, hvalue in self._headers if hname.lower() == lname]

    @property
    def location(self) -> str | None:
        """Current Location header value."""
        return self.get_header("location")

    def set_status(self, status_code: int) -> None:
        self.status_code = status_code

    def set_header(self, name: str, value: str) -> None:
        """Append a response header."""
        self._headers.append((name, value))

    def add_header_value(self, name: str, value: str) -> None:
        """Append a header value unless the same value is already set."""
        if value not in self.get_headers(name):
            self._headers.append((name, value))

    def replace_header(self, name: str, value: str) -> None:
        """Replace all headers named name with a single value."""
        lname = name.lower()
        self._headers = [(n, v) for n, v in self._headers if n.lower() != lname]
        self._headers.append((name, value))

    def redirect(self, location: str, status_code: int = 302) -> None:
        """Turn the response into a redirect to location."""
        self.status_code = status_code
        self.replace_header("location", location)

    def set_result(self, result: Any) -> None:
        """Set response body from an action result.

        Args:
            result: dict/list (JSON), bytes, str, None or any object (str()).
        """
        if isinstance(result, (dict, list)):
            self.body = json.dumps(result, ensure_ascii=False).encode("utf-8")
            self.media_type = self.media_type or "application/json"
        elif isinstance(result, bytes):
            self.body = result
            self.media_type = self.media_type or "application/octet-stream"
        elif result is None:
            self.body = b""
        else:
            self.body = str(result).encode(self.charset)
            self.media_type = self.media_type or "text/plain"

    def _content_type(self) -> str | None:
        if self.media_type is None:
            return None
        if self.media_type.startswith("text/") and "charset" not in self.media_type:
            return f"{self.media_type}; charset={self.charset}"
        return self.media_type

    def _build_headers(self) -> list[tuple[bytes, bytes]]:
        """Build ASGI headers list (lowercase latin-1 names).

        Content-Type and Content-Length are added when not set explicitly.
        """
        headers = list(self._headers)
        names = {name.lower() for name, _ in headers}
        content_type = self._content_type()
        if content_type and "content-type" not in names:
            headers.append(("content-type", content_type))
        if "content-length" not in names:
            headers.append(("content-length", str(len(self.body))))
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in headers
        ]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI application interface."""
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self._build_headers(),
            }
        )
        await send(
            {
                "type": "http.response.body",
                "body": self.body,
            }
        )

    def __repr__(self) -> str:
        return f"Response(status_code={self.status_code}, location={self.location!r})"


if __name__ == "__main__":
    pass
