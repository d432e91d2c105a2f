# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Utility functions for genro-challenge.

Exports:
    split_and_strip: Split comma-separated string and strip whitespace.
    as_plain_dict: Turn a SmartOptions / mapping config node into a dict.
"""

from __future__ import annotations

from typing import Any

__all__ = ["split_and_strip", "as_plain_dict"]


def split_and_strip(
    value: str | list[str] | None, default: list[str] | None = None
) -> list[str]:
    """Split comma-separated string and strip whitespace from each item.

    If value is already a list, returns a copy. If None, returns default.
    Empty items are dropped.

    Examples:
        split_and_strip("a, b, c")  # ["a", "b", "c"]
        split_and_strip(["x", "y"])  # ["x", "y"]
        split_and_strip(None, ["default"])  # ["default"]
    """
    if value is None:
        return default if default is not None else []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return list(value)


def as_plain_dict(value: Any) -> dict[str, Any]:
    """Return value as a dict. None becomes {}."""
    if value is None:
        return {}
    if hasattr(value, "as_dict"):
        value = value.as_dict()
    return dict(value)
