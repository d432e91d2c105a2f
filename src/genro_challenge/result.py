# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ChallengeResult - action result that challenges authentication schemes.

An action returns a ChallengeResult when the request needs authentication
it does not have. The application executes it through its dispatcher and
sends the response the handlers built.

All three fields are optional keyword arguments:

    ChallengeResult()                                   # default scheme, automatic
    ChallengeResult(behavior=ChallengeBehavior.FORBIDDEN)
    ChallengeResult(schemes="cookies")
    ChallengeResult(schemes=["tokens", "users"], properties=props)

``challenge()`` is the controller-style shortcut with schemes as
positional arguments::

    return challenge()
    return challenge(behavior="unauthorized")
    return challenge("cookies", properties=AuthenticationProperties(redirect_uri="/cart"))

The result is immutable. Executing it twice with the same request state
produces the same reaction.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from .behavior import ChallengeBehavior
from .dispatcher import normalize_schemes

if TYPE_CHECKING:
    from .context import HttpContext
    from .dispatcher import ChallengeDispatcher
    from .properties import AuthenticationProperties

__all__ = ["ChallengeResult", "challenge"]


class ChallengeResult:
    """Immutable challenge request: schemes, properties, behavior."""

    __slots__ = ("_schemes", "_properties", "_behavior")

    def __init__(
        self,
        schemes: str | Iterable[str] | None = None,
        properties: AuthenticationProperties | None = None,
        behavior: ChallengeBehavior | str = ChallengeBehavior.AUTOMATIC,
    ) -> None:
        """Build a challenge request.

        Args:
            schemes: One scheme name or a sequence of names. Empty/None
                means the default challenge scheme.
            properties: Property bag passed to every handler.
            behavior: ChallengeBehavior member or its string value.

        Raises:
            InvalidArgumentError: Empty scheme names or unknown behavior.
        """
        self._schemes = normalize_schemes(schemes)
        self._properties = properties
        self._behavior = ChallengeBehavior.coerce(behavior)

    @property
    def schemes(self) -> tuple[str, ...]:
        return self._schemes

    @property
    def properties(self) -> AuthenticationProperties | None:
        return self._properties

    @property
    def behavior(self) -> ChallengeBehavior:
        return self._behavior

    async def execute(self, context: HttpContext, dispatcher: ChallengeDispatcher) -> None:
        """Dispatch this challenge for the current request."""
        await dispatcher.dispatch(context, self._schemes, self._properties, self._behavior)

    def __repr__(self) -> str:
        return (
            f"ChallengeResult(schemes={list(self._schemes)!r}, "
            f"behavior={self._behavior.value!r})"
        )


def challenge(
    *schemes: str,
    properties: AuthenticationProperties | None = None,
    behavior: ChallengeBehavior | str = ChallengeBehavior.AUTOMATIC,
) -> ChallengeResult:
    """Return a ChallengeResult for schemes (none = default scheme)."""
    return ChallengeResult(schemes, properties=properties, behavior=behavior)


if __name__ == "__main__":
    pass
