# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""AuthenticationProperties - caller-owned property bag for challenges.

The bag travels by reference from the caller through the dispatcher to
every handler. The dispatcher never touches it; handlers only read it.

State is kept in a flat ``items`` dict of strings so that it can be
serialized as is. Well-known entries have typed accessors:

    ============== ============= ==========================
    Property       Item key      Stored as
    ============== ============= ==========================
    redirect_uri   .redirect     str
    is_persistent  .persistent   "True" (absent when False)
    issued_utc     .issued       RFC 1123 date
    expires_utc    .expires      RFC 1123 date
    allow_refresh  .refresh      "True" / "False"
    ============== ============= ==========================

Setting a typed property to None removes its item.

Example:
    >>> props = AuthenticationProperties(redirect_uri="/orders/42")
    >>> props.items
    {'.redirect': '/orders/42'}
    >>> props.set_item("tenant", "acme")
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Any

__all__ = ["AuthenticationProperties"]

REDIRECT_URI_KEY = ".redirect"
IS_PERSISTENT_KEY = ".persistent"
ISSUED_UTC_KEY = ".issued"
EXPIRES_UTC_KEY = ".expires"
ALLOW_REFRESH_KEY = ".refresh"


class AuthenticationProperties:
    """Mutable property bag for authentication operations.

    Attributes:
        items: String state, including the well-known entries.
        parameters: Non-string values for handlers (not serialized).
    """

    __slots__ = ("items", "parameters")

    def __init__(
        self,
        items: dict[str, str | None] | None = None,
        parameters: dict[str, Any] | None = None,
        *,
        redirect_uri: str | None = None,
    ) -> None:
        self.items: dict[str, str | None] = dict(items) if items else {}
        self.parameters: dict[str, Any] = dict(parameters) if parameters else {}
        if redirect_uri is not None:
            self.redirect_uri = redirect_uri

    def get_item(self, key: str) -> str | None:
        """Return item value or None if missing."""
        return self.items.get(key)

    def set_item(self, key: str, value: str | None) -> None:
        """Set item value. None removes the key."""
        if value is None:
            self.items.pop(key, None)
        else:
            self.items[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.items

    @property
    def redirect_uri(self) -> str | None:
        """Where the caller should end up once the challenge is satisfied."""
        return self.get_item(REDIRECT_URI_KEY)

    @redirect_uri.setter
    def redirect_uri(self, value: str | None) -> None:
        self.set_item(REDIRECT_URI_KEY, value)

    @property
    def is_persistent(self) -> bool:
        return IS_PERSISTENT_KEY in self.items

    @is_persistent.setter
    def is_persistent(self, value: bool) -> None:
        self.set_item(IS_PERSISTENT_KEY, "True" if value else None)

    @property
    def issued_utc(self) -> datetime | None:
        return self._get_date(ISSUED_UTC_KEY)

    @issued_utc.setter
    def issued_utc(self, value: datetime | None) -> None:
        self._set_date(ISSUED_UTC_KEY, value)

    @property
    def expires_utc(self) -> datetime | None:
        return self._get_date(EXPIRES_UTC_KEY)

    @expires_utc.setter
    def expires_utc(self, value: datetime | None) -> None:
        self._set_date(EXPIRES_UTC_KEY, value)

    @property
    def allow_refresh(self) -> bool | None:
        value = self.get_item(ALLOW_REFRESH_KEY)
        if value is None:
            return None
        return value.lower() == "true"

    @allow_refresh.setter
    def allow_refresh(self, value: bool | None) -> None:
        self.set_item(ALLOW_REFRESH_KEY, None if value is None else str(bool(value)))

    def _get_date(self, key: str) -> datetime | None:
        """Parse an RFC 1123 item. Unparsable values read as None."""
        value = self.get_item(key)
        if not value:
            return None
        try:
            return parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None

    def _set_date(self, key: str, value: datetime | None) -> None:
        if value is None:
            self.set_item(key, None)
            return
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        self.set_item(key, format_datetime(value.astimezone(timezone.utc), usegmt=True))

    def __repr__(self) -> str:
        return f"AuthenticationProperties(items={self.items!r})"


if __name__ == "__main__":
    pass
