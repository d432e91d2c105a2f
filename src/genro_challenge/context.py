# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""HttpContext - per-request capabilities used by challenge handlers.

One context is created per HTTP request. It gives handlers:

- the request (headers, URL pieces, ``scope["auth"]``),
- the shared response builder they write their reaction to,
- per-scheme authentication with a per-request cache,
- a cancellation flag the dispatcher checks between handlers. The
  application sets it when the client disconnects mid-dispatch.

The authentication cache lives in ``scope["_auth_results"]`` so that the
authentication middleware and the action see the same results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import MissingDefaultSchemeError, UnknownSchemeError
from .response import Response

if TYPE_CHECKING:
    from .handlers import AuthenticateResult
    from .request import HttpRequest
    from .schemes import SchemeRegistry

__all__ = ["HttpContext"]


class HttpContext:
    """Request context handed to actions, the dispatcher and handlers.

    Attributes:
        request: Current HTTP request.
        response: Response builder shared by action and handlers.
        registry: Scheme registry used by ``authenticate()`` (optional).
        auth_results: Cached AuthenticateResult per scheme name.
    """

    __slots__ = ("request", "response", "registry", "auth_results", "_cancelled")

    def __init__(
        self,
        request: HttpRequest,
        registry: SchemeRegistry | None = None,
        response: Response | None = None,
    ) -> None:
        self.request = request
        self.response = response if response is not None else Response()
        self.registry = registry
        self.auth_results: dict[str, AuthenticateResult] = request.scope.setdefault(
            "_auth_results", {}
        )
        self._cancelled = False

    @property
    def scope(self) -> Any:
        return self.request.scope

    @property
    def cancelled(self) -> bool:
        """True once the request was torn down; no further handler must run."""
        return self._cancelled

    def cancel(self) -> None:
        """Mark the request as cancelled (client gone, server shutting down)."""
        self._cancelled = True

    async def authenticate(self, scheme: str | None = None) -> AuthenticateResult:
        """Authenticate the caller under scheme (default authenticate scheme).

        Results are cached per scheme for the lifetime of the request.

        Raises:
            RuntimeError: If the context has no registry.
            UnknownSchemeError: If scheme has no handler.
            MissingDefaultSchemeError: If no scheme is given and none is default.
        """
        if self.registry is None:
            raise RuntimeError("HttpContext has no scheme registry")
        name = scheme or self.registry.default_authenticate_scheme()
        if not name:
            raise MissingDefaultSchemeError("authenticate")
        handler = self.registry.get_handler(name)
        if handler is None:
            raise UnknownSchemeError(name)
        return await handler.authenticate_once(self)

    def __repr__(self) -> str:
        return f"HttpContext(request={self.request!r}, cancelled={self._cancelled})"


if __name__ == "__main__":
    pass
