# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ASGI type definitions for genro-challenge.

Type Definitions
================

Scope : MutableMapping[str, Any]
    Connection metadata dictionary. For HTTP: type="http", method, path,
    headers, query_string. Middleware adds ``_headers`` (parsed headers)
    and ``auth`` (authentication result).

Message : MutableMapping[str, Any]
    Message exchanged with the server ("http.request",
    "http.response.start", "http.response.body", "http.disconnect").

Receive : Callable[[], Awaitable[Message]]
Send : Callable[[Message], Awaitable[None]]
ASGIApp : Callable[[Scope, Receive, Send], Awaitable[None]]

MutableMapping is used instead of TypedDict: ASGI servers add their own
keys, and validation happens in HttpRequest / Response.
"""

from typing import Any, Awaitable, Callable, MutableMapping

__all__ = ["Scope", "Message", "Receive", "Send", "ASGIApp"]

# ASGI Scope - connection metadata
Scope = MutableMapping[str, Any]

# ASGI Message - sent/received data
Message = MutableMapping[str, Any]

# ASGI Receive - callable to receive messages
Receive = Callable[[], Awaitable[Message]]

# ASGI Send - callable to send messages
Send = Callable[[Message], Awaitable[None]]

# ASGI Application - the main callable
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]
