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

"""genro-challenge - Authentication challenge dispatch for ASGI applications.

Main components:
    ChallengeDispatcher: Invokes scheme handlers for a challenge, in order
    ChallengeResult: Action result carrying schemes, properties, behavior
    ChallengeBehavior: AUTOMATIC, UNAUTHORIZED, FORBIDDEN
    AuthenticationProperties: Caller-owned property bag
    SchemeRegistry: Scheme name -> handler lookup with defaults
    ChallengeApplication: ASGI app whose actions return challenges

Handlers:
    RedirectHandler: Login / access-denied redirects
    BearerHandler: Bearer tokens with WWW-Authenticate challenge
    BasicHandler: Basic auth with WWW-Authenticate challenge

Middleware:
    AuthenticationMiddleware: Sets scope["auth"] from a scheme
    ErrorMiddleware: Exception handling and error responses
    LoggingMiddleware: Access log

Usage:
    from genro_challenge import ChallengeApplication, SchemeRegistry, challenge

    registry = SchemeRegistry(default_scheme="cookies")
    registry.add_scheme("cookies", "redirect", login_path="/Home/Login",
                        access_denied_path="/Home/AccessDenied")
    app = ChallengeApplication(registry)

    @app.route("/orders")
    def orders(context):
        return challenge()
"""

__version__ = "0.1.0"

from .application import ChallengeApplication
from .behavior import ChallengeBehavior
from .config import ConfigError, registry_from_config
from .context import HttpContext
from .dispatcher import ChallengeDispatcher
from .exceptions import (
    ChallengeError,
    HandlerError,
    HTTPException,
    HTTPNotFound,
    InvalidArgumentError,
    MissingDefaultSchemeError,
    UnknownSchemeError,
)
from .handlers import (
    HANDLER_REGISTRY,
    AuthenticateResult,
    AuthenticationHandler,
    BasicHandler,
    BearerHandler,
    RedirectHandler,
)
from .middleware import (
    AuthenticationMiddleware,
    ErrorMiddleware,
    LoggingMiddleware,
    middleware_chain,
)
from .properties import AuthenticationProperties
from .request import HttpRequest
from .response import Response
from .result import ChallengeResult, challenge
from .schemes import AuthenticationScheme, SchemeRegistry
from .types import ASGIApp, Message, Receive, Scope, Send

__all__ = [
    # Core
    "ChallengeDispatcher",
    "ChallengeResult",
    "ChallengeBehavior",
    "AuthenticationProperties",
    "challenge",
    # Schemes
    "AuthenticationScheme",
    "SchemeRegistry",
    "registry_from_config",
    "ConfigError",
    # Handlers
    "AuthenticateResult",
    "AuthenticationHandler",
    "BasicHandler",
    "BearerHandler",
    "RedirectHandler",
    "HANDLER_REGISTRY",
    # Transport
    "ChallengeApplication",
    "HttpContext",
    "HttpRequest",
    "Response",
    # Middleware
    "AuthenticationMiddleware",
    "ErrorMiddleware",
    "LoggingMiddleware",
    "middleware_chain",
    # Exceptions
    "ChallengeError",
    "HandlerError",
    "InvalidArgumentError",
    "MissingDefaultSchemeError",
    "UnknownSchemeError",
    "HTTPException",
    "HTTPNotFound",
    # ASGI types
    "ASGIApp",
    "Message",
    "Receive",
    "Scope",
    "Send",
]
