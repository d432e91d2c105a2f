# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Scheme registry configuration for genro-challenge.

Schemes are declared in an ``authentication`` section, read through
genro-toolbox SmartOptions from a dict, a SmartOptions instance, or a
YAML file path::

    authentication:
      default: cookies          # default scheme (authenticate + challenge)
      challenge: cookies        # default challenge scheme, optional
      schemes:
        cookies:
          type: redirect
          login_path: /Home/Login
          access_denied_path: /Home/AccessDenied
        tokens:
          type: bearer
          realm: api
          tokens:
            reader:
              token: "tk_abc123"
              tags: "read"

``type`` is a handler ``scheme_type`` (see HANDLER_REGISTRY). Every other
key of a scheme entry is passed to the handler as an option, except
``display_name``.

A mapping without an ``authentication`` key is read as the section
itself.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from genro_toolbox import SmartOptions  # type: ignore[import-untyped]

from .schemes import SchemeRegistry
from .utils import as_plain_dict

__all__ = ["ConfigError", "load_options", "registry_from_config"]


class ConfigError(Exception):
    """Configuration error."""


def load_options(source: str | Path | dict[str, Any] | SmartOptions) -> SmartOptions:
    """Return source as SmartOptions.

    Raises:
        ConfigError: If a file path does not exist.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        return SmartOptions(str(path))
    if isinstance(source, dict):
        return SmartOptions(source)
    return source


def registry_from_config(
    source: str | Path | dict[str, Any] | SmartOptions,
) -> SchemeRegistry:
    """Build a SchemeRegistry from configuration.

    Args:
        source: Dict, SmartOptions or YAML file path.

    Returns:
        Unfrozen registry (the application freezes it).

    Raises:
        ConfigError: Missing/unknown scheme type, invalid options, or a
            default that names an undeclared scheme.
    """
    config = as_plain_dict(load_options(source))
    section = as_plain_dict(config.get("authentication", config))
    schemes = as_plain_dict(section.get("schemes"))

    registry = SchemeRegistry()
    for name, entry in schemes.items():
        options = as_plain_dict(entry)
        handler_type = options.pop("type", None)
        if not handler_type:
            raise ConfigError(f"Scheme '{name}' has no 'type'")
        display_name = options.pop("display_name", None)
        try:
            registry.add_scheme(name, handler_type, display_name=display_name, **options)
        except ValueError as e:
            raise ConfigError(f"Scheme '{name}': {e}") from e

    for key, setter in (
        ("default", registry.set_default_scheme),
        ("challenge", registry.set_default_challenge_scheme),
    ):
        value = section.get(key)
        if value is None:
            continue
        if value not in registry:
            raise ConfigError(f"Default {key} scheme '{value}' is not declared")
        setter(value)

    return registry


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Load and validate authentication config")
    parser.add_argument("config", help="Config file path (YAML)")
    args = parser.parse_args()

    try:
        registry = registry_from_config(args.config)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    for scheme in registry:
        print(f"{scheme.name}: {scheme.handler_type.__name__} ({scheme.display_name})")
    print(f"Default authenticate scheme: {registry.default_authenticate_scheme()}")
