# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exception classes for genro-challenge.

Two families live here:

1. Challenge errors - raised by the dispatcher and the scheme registry
   when a challenge cannot be carried out.
2. HTTP exceptions - raised by the application to produce an HTTP
   error response.

Challenge Errors
----------------
ChallengeError
    Base class. Never raised directly.

InvalidArgumentError
    The request context is missing, a scheme name is empty, or the
    behavior is not a ChallengeBehavior. Raised before any handler runs.

UnknownSchemeError
    A named scheme has no registered handler. Not transient: the
    dispatch is aborted and never retried.

MissingDefaultSchemeError
    No scheme was named and the registry has no default challenge scheme.

HandlerError
    Base class handlers may raise when a reaction fails. The dispatcher
    propagates any handler exception unchanged, HandlerError or not.

HTTP Exceptions
---------------
HTTPException carries status_code, detail and optional headers. The
error middleware converts it into a response. The application raises
HTTPNotFound for paths without an action.

Authentication reactions (login redirects, 401/403) are never raised:
actions return a ChallengeResult and the scheme handlers write them.

Example:
    >>> raise UnknownSchemeError("cookies")
    >>> raise HTTPNotFound("No action for /orders")
"""

from __future__ import annotations

__all__ = [
    "ChallengeError",
    "InvalidArgumentError",
    "UnknownSchemeError",
    "MissingDefaultSchemeError",
    "HandlerError",
    "HTTPException",
    "HTTPNotFound",
]


class ChallengeError(Exception):
    """Base class for challenge dispatch errors."""


class InvalidArgumentError(ChallengeError, ValueError):
    """Malformed dispatch input (context, scheme names, behavior).

    Attributes:
        argument: Name of the offending argument.
    """

    def __init__(self, argument: str, detail: str = "") -> None:
        self.argument = argument
        self.detail = detail or f"Invalid argument: {argument}"
        super().__init__(self.detail)

    def __repr__(self) -> str:
        return f"InvalidArgumentError(argument={self.argument!r}, detail={self.detail!r})"


class UnknownSchemeError(ChallengeError, LookupError):
    """No handler is registered for the requested scheme.

    Attributes:
        scheme: The scheme name that could not be resolved.
    """

    def __init__(self, scheme: str | None, detail: str = "") -> None:
        self.scheme = scheme
        self.detail = detail or f"No authentication handler is registered for the scheme '{scheme}'"
        super().__init__(self.detail)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(scheme={self.scheme!r})"


class MissingDefaultSchemeError(UnknownSchemeError):
    """No scheme was specified and no default scheme is configured.

    Attributes:
        kind: Which default was missing ("challenge" or "authenticate").
    """

    def __init__(self, kind: str = "challenge") -> None:
        self.kind = kind
        super().__init__(
            None,
            detail="No authentication scheme was specified, "
            f"and there was no default {kind} scheme found",
        )


class HandlerError(ChallengeError):
    """A scheme handler failed to produce its reaction.

    Attributes:
        scheme: Scheme name of the failing handler (may be None).
    """

    def __init__(self, detail: str = "", scheme: str | None = None) -> None:
        self.scheme = scheme
        self.detail = detail
        super().__init__(detail)


class HTTPException(Exception):
    """
    HTTP exception with status code and detail.

    Raise this in actions to return an HTTP error response.

    Attributes:
        status_code: HTTP status code (expected 4xx or 5xx, not validated)
        detail: Error detail message
        headers: Response headers as list of tuples (supports duplicate names)
    """

    def __init__(
        self,
        status_code: int,
        detail: str = "",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> None:
        self.status_code = status_code
        self.detail = detail
        # Normalize headers to list[tuple[str, str]] for consistent internal format
        if headers is None:
            self.headers: list[tuple[str, str]] | None = None
        elif isinstance(headers, dict):
            self.headers = list(headers.items())
        else:
            self.headers = list(headers)
        super().__init__(detail)

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return f"HTTPException(status_code={self.status_code}, detail={self.detail!r})"


class HTTPNotFound(HTTPException):
    """HTTP 404 Not Found exception."""

    def __init__(self, detail: str = "Not found") -> None:
        super().__init__(404, detail=detail)
