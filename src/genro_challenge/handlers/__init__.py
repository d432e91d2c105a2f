# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Authentication scheme handlers.

Each handler owns one scheme and decides the concrete reaction to a
challenge (redirect, challenge header, status code).

Exports:
    AuthenticationHandler: ABC for custom handlers
    AuthenticateResult: Outcome of a handler's authenticate()
    RedirectHandler: Login / access-denied redirects
    BearerHandler: "Authorization: Bearer <token>" + WWW-Authenticate
    BasicHandler: "Authorization: Basic <base64>" + WWW-Authenticate
    HANDLER_REGISTRY: Dict mapping scheme_type to handler class
"""

from .base import HANDLER_REGISTRY, AuthenticateResult, AuthenticationHandler
from .credentials import BasicHandler, BearerHandler, HeaderChallengeHandler
from .redirect import RedirectHandler

__all__ = [
    "AuthenticateResult",
    "AuthenticationHandler",
    "BasicHandler",
    "BearerHandler",
    "HeaderChallengeHandler",
    "RedirectHandler",
    "HANDLER_REGISTRY",
]
