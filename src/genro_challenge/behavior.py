# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ChallengeBehavior - how a handler reacts to a challenge.

Values:
    AUTOMATIC: The handler authenticates the caller under its own scheme.
        Unauthenticated callers get the unauthorized reaction (e.g. login
        redirect), authenticated callers get the forbidden reaction
        (e.g. access-denied redirect).
    UNAUTHORIZED: Always the unauthorized reaction.
    FORBIDDEN: Always the forbidden reaction.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .exceptions import InvalidArgumentError

__all__ = ["ChallengeBehavior"]


class ChallengeBehavior(str, Enum):
    """Closed set of challenge behaviors."""

    AUTOMATIC = "automatic"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"

    @classmethod
    def coerce(cls, value: Any) -> ChallengeBehavior:
        """Return value as a ChallengeBehavior.

        Accepts members and their string values (case-insensitive).

        Raises:
            InvalidArgumentError: If value is not a known behavior.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise InvalidArgumentError("behavior", f"Unknown challenge behavior: {value!r}")


if __name__ == "__main__":
    pass
