# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Scheme registry - maps scheme names to handler instances.

The registry is filled at configuration time and frozen when the
application is built. After ``freeze()`` it is read-only, so request
handling can share it across concurrent requests.

Defaults:
    default_scheme: Used for authenticate and, unless overridden, challenge.
    default_challenge_scheme: Used when a challenge names no scheme.

Example:
    registry = SchemeRegistry(default_scheme="cookies")
    registry.add_scheme(
        "cookies", "redirect",
        login_path="/Home/Login",
        access_denied_path="/Home/AccessDenied",
    )
    registry.add_scheme("tokens", BearerHandler, tokens={...})
    registry.freeze()

    registry.get_handler("cookies")        # RedirectHandler instance
    registry.default_challenge_scheme()    # "cookies"
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from .exceptions import MissingDefaultSchemeError
from .handlers import HANDLER_REGISTRY, AuthenticationHandler

__all__ = ["AuthenticationScheme", "SchemeRegistry"]


class AuthenticationScheme:
    """A registered scheme: name, handler type and display name."""

    __slots__ = ("name", "handler_type", "display_name")

    def __init__(
        self,
        name: str,
        handler_type: type[AuthenticationHandler],
        display_name: str | None = None,
    ) -> None:
        self.name = name
        self.handler_type = handler_type
        self.display_name = display_name or name

    def __repr__(self) -> str:
        return f"AuthenticationScheme(name={self.name!r}, handler_type={self.handler_type.__name__})"


class SchemeRegistry:
    """Name -> handler lookup with configurable default schemes."""

    __slots__ = ("_schemes", "_handlers", "_default_scheme", "_default_challenge_scheme", "_frozen")

    def __init__(
        self,
        default_scheme: str | None = None,
        default_challenge_scheme: str | None = None,
    ) -> None:
        self._schemes: dict[str, AuthenticationScheme] = {}
        self._handlers: dict[str, AuthenticationHandler] = {}
        self._default_scheme = default_scheme
        self._default_challenge_scheme = default_challenge_scheme
        self._frozen = False

    def _check_writable(self) -> None:
        if self._frozen:
            raise RuntimeError("SchemeRegistry is frozen; schemes are configured at startup only")

    def add_scheme(
        self,
        name: str,
        handler_type: type[AuthenticationHandler] | str,
        display_name: str | None = None,
        **options: Any,
    ) -> AuthenticationHandler:
        """Create the handler for a scheme and register it.

        Args:
            name: Scheme name.
            handler_type: Handler class, or its ``scheme_type`` string.
            display_name: Human-readable name (default: name).
            **options: Handler options.

        Returns:
            The created handler.

        Raises:
            ValueError: Unknown handler type, duplicate or empty name.
            RuntimeError: If the registry is frozen.
        """
        if isinstance(handler_type, str):
            handler_cls = HANDLER_REGISTRY.get(handler_type)
            if handler_cls is None:
                known = ", ".join(sorted(HANDLER_REGISTRY))
                raise ValueError(f"Unknown handler type '{handler_type}' (known: {known})")
        else:
            handler_cls = handler_type
        return self.add_handler(handler_cls(name, **options), display_name=display_name)

    def add_handler(
        self, handler: AuthenticationHandler, display_name: str | None = None
    ) -> AuthenticationHandler:
        """Register an already built handler under ``handler.scheme``."""
        self._check_writable()
        name = handler.scheme
        if not name:
            raise ValueError("Scheme name must be a non-empty string")
        if name in self._schemes:
            raise ValueError(f"Scheme '{name}' already registered")
        self._schemes[name] = AuthenticationScheme(name, type(handler), display_name)
        self._handlers[name] = handler
        return handler

    def get_scheme(self, name: str) -> AuthenticationScheme | None:
        return self._schemes.get(name)

    def get_handler(self, name: str) -> AuthenticationHandler | None:
        """Return the handler for name, or None if not registered."""
        return self._handlers.get(name)

    @property
    def scheme_names(self) -> list[str]:
        """Scheme names in registration order."""
        return list(self._schemes)

    def set_default_scheme(self, name: str | None) -> None:
        self._check_writable()
        self._default_scheme = name

    def set_default_challenge_scheme(self, name: str | None) -> None:
        self._check_writable()
        self._default_challenge_scheme = name

    def default_authenticate_scheme(self) -> str | None:
        return self._default_scheme

    def default_challenge_scheme(self) -> str:
        """Scheme to challenge when none is named.

        Raises:
            MissingDefaultSchemeError: If neither default is configured.
        """
        name = self._default_challenge_scheme or self._default_scheme
        if not name:
            raise MissingDefaultSchemeError()
        return name

    def freeze(self) -> None:
        """Make the registry read-only. Idempotent."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._schemes

    def __len__(self) -> int:
        return len(self._schemes)

    def __iter__(self) -> Iterator[AuthenticationScheme]:
        return iter(list(self._schemes.values()))

    def __repr__(self) -> str:
        return f"SchemeRegistry(schemes={self.scheme_names!r}, default={self._default_scheme!r})"


if __name__ == "__main__":
    pass
