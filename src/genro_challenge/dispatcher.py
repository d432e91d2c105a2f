# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ChallengeDispatcher - invokes scheme handlers for a challenge.

Given zero or more scheme names, a property bag and a behavior, the
dispatcher resolves each scheme's handler and awaits its ``challenge()``
one at a time, in the order given. Handlers write to the shared response
(status, Location, WWW-Authenticate), so order matters and there is no
parallelism: with two redirect schemes, the second Location wins.

Rules:
    - ``context`` is required (InvalidArgumentError otherwise).
    - No schemes: the registry's default challenge scheme, invoked once.
    - All names are resolved before the first handler runs; an unknown
      name raises UnknownSchemeError and no handler is invoked.
    - A cancelled context stops the dispatch before the next handler
      (asyncio.CancelledError).
    - Handler exceptions propagate unchanged. No retries.

The dispatcher holds no per-request state and can be shared by all
requests of an application.

Example:
    dispatcher = ChallengeDispatcher(registry)
    await dispatcher.dispatch(context)                       # default scheme
    await dispatcher.dispatch(context, ["cookies"], behavior=ChallengeBehavior.FORBIDDEN)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from .behavior import ChallengeBehavior
from .exceptions import InvalidArgumentError, UnknownSchemeError

if TYPE_CHECKING:
    from .context import HttpContext
    from .handlers import AuthenticationHandler
    from .properties import AuthenticationProperties
    from .schemes import SchemeRegistry

__all__ = ["ChallengeDispatcher", "normalize_schemes"]


def normalize_schemes(schemes: str | Iterable[str] | None) -> tuple[str, ...]:
    """Return schemes as a tuple of non-empty strings.

    A single string is one scheme. None is no schemes.

    Raises:
        InvalidArgumentError: If an entry is None, empty or not a string.
    """
    if schemes is None:
        return ()
    if isinstance(schemes, str):
        schemes = (schemes,)
    result = tuple(schemes)
    for name in result:
        if not isinstance(name, str) or not name.strip():
            raise InvalidArgumentError("schemes", f"Invalid authentication scheme name: {name!r}")
    return result


class ChallengeDispatcher:
    """Sequential challenge dispatch over a SchemeRegistry.

    Attributes:
        registry: Scheme registry used to resolve handlers.
        logger: Logger (default "genro_challenge.dispatcher").
    """

    __slots__ = ("registry", "logger")

    def __init__(self, registry: SchemeRegistry, logger: logging.Logger | None = None) -> None:
        if registry is None:
            raise InvalidArgumentError("registry", "ChallengeDispatcher requires a SchemeRegistry")
        self.registry = registry
        self.logger = logger or logging.getLogger("genro_challenge.dispatcher")

    def resolve(self, schemes: Sequence[str]) -> list[AuthenticationHandler]:
        """Resolve scheme names to handlers, default scheme if empty.

        Raises:
            UnknownSchemeError: First name without a registered handler.
            MissingDefaultSchemeError: Empty schemes and no default.
        """
        names = list(schemes) or [self.registry.default_challenge_scheme()]
        handlers = []
        for name in names:
            handler = self.registry.get_handler(name)
            if handler is None:
                raise UnknownSchemeError(name)
            handlers.append(handler)
        return handlers

    async def dispatch(
        self,
        context: HttpContext,
        schemes: str | Iterable[str] | None = (),
        properties: AuthenticationProperties | None = None,
        behavior: ChallengeBehavior | str = ChallengeBehavior.AUTOMATIC,
    ) -> None:
        """Challenge each scheme (or the default one) with behavior.

        Args:
            context: Request context; must not be None.
            schemes: Scheme names, in order. Empty means the default scheme.
            properties: Caller's property bag, passed through by reference.
            behavior: How handlers react (see ChallengeBehavior).

        Raises:
            InvalidArgumentError: context is None, bad scheme names or behavior.
            UnknownSchemeError: A scheme has no handler (nothing invoked).
            asyncio.CancelledError: The context was cancelled mid-dispatch.
            Exception: Any handler failure, unchanged.
        """
        if context is None:
            raise InvalidArgumentError("context", "A request context is required to dispatch a challenge")
        names = normalize_schemes(schemes)
        behavior = ChallengeBehavior.coerce(behavior)

        self.logger.info(
            "Executing ChallengeResult with authentication schemes (%s).", ", ".join(names)
        )
        handlers = self.resolve(names)

        for handler in handlers:
            if context.cancelled:
                self.logger.debug("Challenge dispatch cancelled before scheme '%s'", handler.scheme)
                raise asyncio.CancelledError(f"Request cancelled before challenging '{handler.scheme}'")
            self.logger.debug("Challenging scheme '%s' (%s)", handler.scheme, behavior.value)
            await handler.challenge(context, properties, behavior)

    def __repr__(self) -> str:
        return f"ChallengeDispatcher(registry={self.registry!r})"


if __name__ == "__main__":
    pass
