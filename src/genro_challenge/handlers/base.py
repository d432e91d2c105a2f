# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Authentication handler base class and authenticate result.

A handler owns one scheme: its options (paths, realm, credentials) and
its reactions. The dispatcher only ever calls ``challenge()``; the base
class turns the requested behavior into one of two hooks:

    ============ ============================== =====================
    Behavior     Caller authenticated?          Hook
    ============ ============================== =====================
    AUTOMATIC    no (none or failed)            handle_unauthorized
    AUTOMATIC    yes                            handle_forbidden
    UNAUTHORIZED any                            handle_unauthorized
    FORBIDDEN    any                            handle_forbidden
    ============ ============================== =====================

Subclasses implement ``authenticate()`` and override the two hooks.
Hooks may be plain functions or coroutines: they are called through
smartasync, the same way the framework calls route handlers.

Subclasses that set ``scheme_type`` are registered in HANDLER_REGISTRY
so that configuration can refer to them by name::

    class CookieLikeHandler(AuthenticationHandler):
        scheme_type = "cookielike"
        DEFAULTS = {"login_path": "/login"}

Options:
    Each handler declares DEFAULTS. Keyword options given at construction
    are merged on top (None values ignored) into a SmartOptions instance,
    read with ``self.options["login_path"]``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any

from genro_toolbox import SmartOptions  # type: ignore[import-untyped]
from smartasync import smartasync

from ..behavior import ChallengeBehavior

if TYPE_CHECKING:
    from ..context import HttpContext
    from ..properties import AuthenticationProperties

__all__ = ["AuthenticateResult", "AuthenticationHandler", "HANDLER_REGISTRY"]

HANDLER_REGISTRY: dict[str, type["AuthenticationHandler"]] = {}


class AuthenticateResult:
    """Outcome of ``authenticate()`` for one scheme.

    Exactly one of three shapes:
        success: identity present, ``succeeded`` True.
        none: no credentials for this scheme (``none`` True).
        fail: credentials present but rejected (``failure`` set).

    Attributes:
        identity: Authenticated identity (user name, token name).
        tags: Capability tags of the identity.
        failure: Failure reason, None unless failed.
        scheme: Scheme that produced the result.
    """

    __slots__ = ("identity", "tags", "failure", "scheme")

    def __init__(
        self,
        identity: str | None = None,
        tags: list[str] | None = None,
        failure: str | None = None,
        scheme: str | None = None,
    ) -> None:
        self.identity = identity
        self.tags = list(tags) if tags else []
        self.failure = failure
        self.scheme = scheme

    @classmethod
    def success(
        cls, identity: str, tags: list[str] | None = None, scheme: str | None = None
    ) -> AuthenticateResult:
        return cls(identity=identity, tags=tags, scheme=scheme)

    @classmethod
    def no_result(cls, scheme: str | None = None) -> AuthenticateResult:
        return cls(scheme=scheme)

    @classmethod
    def fail(cls, failure: str, scheme: str | None = None) -> AuthenticateResult:
        return cls(failure=failure, scheme=scheme)

    @property
    def succeeded(self) -> bool:
        return self.identity is not None and self.failure is None

    @property
    def none(self) -> bool:
        return self.identity is None and self.failure is None

    def as_auth_dict(self) -> dict[str, Any] | None:
        """Return the ``scope["auth"]`` dict, or None if not authenticated."""
        if not self.succeeded:
            return None
        return {"tags": list(self.tags), "identity": self.identity, "backend": self.scheme}

    def __repr__(self) -> str:
        if self.succeeded:
            return f"AuthenticateResult.success(identity={self.identity!r}, scheme={self.scheme!r})"
        if self.failure is not None:
            return f"AuthenticateResult.fail({self.failure!r}, scheme={self.scheme!r})"
        return f"AuthenticateResult.no_result(scheme={self.scheme!r})"


class AuthenticationHandler(ABC):
    """Base class for scheme handlers.

    One instance per registered scheme, created at configuration time and
    shared by all requests. Per-request state goes on the HttpContext.

    Attributes:
        scheme: Scheme name this instance is registered under.
        options: SmartOptions built from DEFAULTS and constructor options.
        logger: Logger "genro_challenge.handlers".

    Class Attributes:
        scheme_type: Registry key for configuration ("" = not registered).
        DEFAULTS: Default option values.
    """

    scheme_type: str = ""
    DEFAULTS: dict[str, Any] = {}

    __slots__ = ("scheme", "options", "logger")

    def __init__(self, scheme: str, **options: Any) -> None:
        """Initialize handler.

        Args:
            scheme: Scheme name (registry key).
            **options: Handler options, merged over DEFAULTS.

        Raises:
            ValueError: If scheme is empty or options are invalid.
        """
        if not scheme or not isinstance(scheme, str):
            raise ValueError("Handler scheme name must be a non-empty string")
        self.scheme = scheme
        self.options = SmartOptions(dict(self.DEFAULTS)) + SmartOptions(options, ignore_none=True)
        self.logger = logging.getLogger("genro_challenge.handlers")
        self.configure()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        scheme_type = cls.__dict__.get("scheme_type")
        if not scheme_type:
            return
        if scheme_type in HANDLER_REGISTRY:
            raise ValueError(f"Handler type '{scheme_type}' already registered")
        HANDLER_REGISTRY[scheme_type] = cls

    def configure(self) -> None:
        """Validate and precompute options. Called once by __init__."""

    async def authenticate_once(self, context: HttpContext) -> AuthenticateResult:
        """Authenticate at most once per request, caching on the context."""
        cached = context.auth_results.get(self.scheme)
        if cached is not None:
            return cached
        result = await smartasync(self.authenticate)(context)
        if result is None:
            result = AuthenticateResult.no_result()
        if result.scheme is None:
            result.scheme = self.scheme
        context.auth_results[self.scheme] = result
        return result

    async def challenge(
        self,
        context: HttpContext,
        properties: AuthenticationProperties | None,
        behavior: ChallengeBehavior = ChallengeBehavior.AUTOMATIC,
    ) -> None:
        """React to a challenge according to behavior.

        Args:
            context: Current request context.
            properties: Caller's property bag (read-only for handlers).
            behavior: AUTOMATIC, UNAUTHORIZED or FORBIDDEN.
        """
        behavior = ChallengeBehavior.coerce(behavior)
        if behavior is ChallengeBehavior.AUTOMATIC:
            result = await self.authenticate_once(context)
            behavior = (
                ChallengeBehavior.FORBIDDEN if result.succeeded else ChallengeBehavior.UNAUTHORIZED
            )
        self.logger.debug("Scheme '%s' challenged: %s reaction", self.scheme, behavior.value)
        if behavior is ChallengeBehavior.FORBIDDEN:
            await smartasync(self.handle_forbidden)(context, properties)
        else:
            await smartasync(self.handle_unauthorized)(context, properties)

    @abstractmethod
    def authenticate(
        self, context: HttpContext
    ) -> AuthenticateResult | None | Awaitable[AuthenticateResult | None]:
        """Authenticate the caller under this scheme. None means no result."""
        ...

    def handle_unauthorized(
        self, context: HttpContext, properties: AuthenticationProperties | None
    ) -> Any:
        """Unauthorized reaction. Default: 401."""
        context.response.set_status(401)

    def handle_forbidden(
        self, context: HttpContext, properties: AuthenticationProperties | None
    ) -> Any:
        """Forbidden reaction. Default: 403."""
        context.response.set_status(403)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(scheme={self.scheme!r})"


if __name__ == "__main__":
    pass
