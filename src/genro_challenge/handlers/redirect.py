# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Redirect handler - login and access-denied redirects.

Reactions:
    unauthorized: 302 to ``login_path``
    forbidden:    302 to ``access_denied_path``

Both locations are absolute URLs built from the current request
(scheme, host, root_path) and carry a return-url query parameter. Its
value is ``properties.redirect_uri`` when the caller set one, otherwise
the current path and query. Set ``return_url_parameter`` to "" to omit it.

Identity:
    The handler does not parse credentials. A caller counts as
    authenticated when ``scope["auth"]`` (set by the authentication
    middleware) holds an identity. ``accepted_backends`` restricts which
    backends count; empty means any.

Config:
    cookies:
      type: redirect
      login_path: /Home/Login
      access_denied_path: /Home/AccessDenied
      return_url_parameter: ReturnUrl
      accepted_backends: "tokens, users"
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from ..utils import split_and_strip
from .base import AuthenticateResult, AuthenticationHandler

if TYPE_CHECKING:
    from ..context import HttpContext
    from ..properties import AuthenticationProperties

__all__ = ["RedirectHandler"]


class RedirectHandler(AuthenticationHandler):
    """Redirects unauthenticated callers to login, denied callers to access-denied."""

    scheme_type = "redirect"
    DEFAULTS: dict[str, Any] = {
        "login_path": "/account/login",
        "access_denied_path": "/account/access-denied",
        "return_url_parameter": "ReturnUrl",
        "accepted_backends": None,
        "status_code": 302,
    }

    def configure(self) -> None:
        for key in ("login_path", "access_denied_path"):
            path = self.options[key]
            if not path or not str(path).startswith("/"):
                raise ValueError(f"Redirect scheme '{self.scheme}': {key} must start with '/'")

    @property
    def accepted_backends(self) -> list[str]:
        return split_and_strip(self.options["accepted_backends"])

    def authenticate(self, context: HttpContext) -> AuthenticateResult:
        auth = context.request.auth
        if not auth or auth.get("identity") is None:
            return AuthenticateResult.no_result(self.scheme)
        accepted = self.accepted_backends
        if accepted and auth.get("backend") not in accepted:
            return AuthenticateResult.no_result(self.scheme)
        return AuthenticateResult.success(auth["identity"], auth.get("tags"), scheme=self.scheme)

    def build_redirect_uri(
        self, context: HttpContext, path: str, properties: AuthenticationProperties | None
    ) -> str:
        """Absolute URL for path, with the return-url parameter appended."""
        request = context.request
        location = f"{request.scheme}://{request.host}{request.root_path}{path}"
        parameter = self.options["return_url_parameter"]
        if parameter:
            return_url = properties.redirect_uri if properties is not None else None
            query = urlencode({parameter: return_url or request.path_and_query})
            location += ("&" if "?" in location else "?") + query
        return location

    async def handle_unauthorized(
        self, context: HttpContext, properties: AuthenticationProperties | None
    ) -> None:
        location = self.build_redirect_uri(context, self.options["login_path"], properties)
        context.response.redirect(location, status_code=int(self.options["status_code"]))

    async def handle_forbidden(
        self, context: HttpContext, properties: AuthenticationProperties | None
    ) -> None:
        location = self.build_redirect_uri(context, self.options["access_denied_path"], properties)
        context.response.redirect(location, status_code=int(self.options["status_code"]))


if __name__ == "__main__":
    pass
