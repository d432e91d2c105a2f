# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Header challenge handlers: Bearer tokens and Basic auth.

Both read ``Authorization: <Type> <credentials>`` and look credentials up
in a dict built once at configuration time (O(1) at request time).

Reactions:
    unauthorized: 401 + ``WWW-Authenticate: <Type> realm="<realm>"``
                  (Bearer adds ``error="invalid_token"`` when a token was
                  presented and rejected)
    forbidden:    403

WWW-Authenticate values are appended, not replaced, so challenging
several header schemes in one dispatch advertises all of them. A value
already present is not added twice (repeated dispatch on one request).

Config:
    tokens:
      type: bearer
      realm: api
      tokens:
        reader_token:
          token: "tk_abc123"
          tags: "read"

    users:
      type: basic
      realm: admin
      users:
        mrossi:
          password: "secret123"
          tags: "read,write"
"""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

from ..utils import as_plain_dict, split_and_strip
from .base import AuthenticateResult, AuthenticationHandler

if TYPE_CHECKING:
    from ..context import HttpContext
    from ..properties import AuthenticationProperties

__all__ = ["HeaderChallengeHandler", "BearerHandler", "BasicHandler"]


class HeaderChallengeHandler(AuthenticationHandler):
    """Shared logic for Authorization-header schemes.

    Subclasses set ``auth_type`` and fill ``_lookup`` in configure().

    Attributes:
        _lookup: Dict mapping credentials to {"identity", "tags"}.
    """

    auth_type: str = ""

    __slots__ = ("_lookup",)

    def configure(self) -> None:
        self._lookup: dict[str, dict[str, Any]] = {}

    def _get_credentials(self, context: HttpContext) -> str | None:
        """Return credentials if the Authorization header uses auth_type."""
        auth_header = context.request.headers.get("authorization")
        if auth_header and " " in auth_header:
            auth_type, credentials = auth_header.split(" ", 1)
            if auth_type.lower() == self.auth_type:
                return credentials.strip()
        return None

    def authenticate(self, context: HttpContext) -> AuthenticateResult:
        credentials = self._get_credentials(context)
        if not credentials:
            return AuthenticateResult.no_result(self.scheme)
        entry = self._lookup.get(credentials)
        if entry is None:
            return AuthenticateResult.fail("Invalid or expired credentials", scheme=self.scheme)
        return AuthenticateResult.success(entry["identity"], entry["tags"], scheme=self.scheme)

    def challenge_header(self, context: HttpContext) -> str:
        return f'{self.auth_type.title()} realm="{self.options["realm"]}"'

    async def handle_unauthorized(
        self, context: HttpContext, properties: AuthenticationProperties | None
    ) -> None:
        context.response.set_status(401)
        context.response.add_header_value("WWW-Authenticate", self.challenge_header(context))

    async def handle_forbidden(
        self, context: HttpContext, properties: AuthenticationProperties | None
    ) -> None:
        context.response.set_status(403)


class BearerHandler(HeaderChallengeHandler):
    """Static bearer tokens: ``Authorization: Bearer <token>``."""

    scheme_type = "bearer"
    auth_type = "bearer"
    DEFAULTS: dict[str, Any] = {"realm": "api", "tokens": None}

    def configure(self) -> None:
        """Index tokens by value.

        Raises:
            ValueError: If a token entry is missing 'token' value.
        """
        super().configure()
        for name, config in as_plain_dict(self.options["tokens"]).items():
            config = as_plain_dict(config)
            token_value = config.get("token")
            if not token_value:
                raise ValueError(f"Bearer token '{name}' missing 'token' value")
            self._lookup[token_value] = {
                "identity": name,
                "tags": split_and_strip(config.get("tags", [])),
            }

    def challenge_header(self, context: HttpContext) -> str:
        header = super().challenge_header(context)
        result = context.auth_results.get(self.scheme)
        if result is not None and result.failure is not None:
            header += ', error="invalid_token"'
        return header


class BasicHandler(HeaderChallengeHandler):
    """Username/password: ``Authorization: Basic <base64(user:pass)>``."""

    scheme_type = "basic"
    auth_type = "basic"
    DEFAULTS: dict[str, Any] = {"realm": "api", "users": None}

    def configure(self) -> None:
        """Index users by base64(username:password).

        Raises:
            ValueError: If a user entry is missing 'password' value.
        """
        super().configure()
        for username, config in as_plain_dict(self.options["users"]).items():
            config = as_plain_dict(config)
            password = config.get("password")
            if not password:
                raise ValueError(f"Basic auth user '{username}' missing 'password'")
            b64_key = base64.b64encode(f"{username}:{password}".encode()).decode()
            self._lookup[b64_key] = {
                "identity": username,
                "tags": split_and_strip(config.get("tags", [])),
            }

    def verify_credentials(self, username: str, password: str) -> AuthenticateResult:
        """Check username/password directly (e.g. from a login form)."""
        b64_key = base64.b64encode(f"{username}:{password}".encode()).decode()
        entry = self._lookup.get(b64_key)
        if entry is None:
            return AuthenticateResult.fail("Invalid username or password", scheme=self.scheme)
        return AuthenticateResult.success(entry["identity"], entry["tags"], scheme=self.scheme)


if __name__ == "__main__":
    pass
