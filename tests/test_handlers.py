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

"""Tests for authentication handlers: base dispatch, redirect, bearer, basic."""

from __future__ import annotations

import base64
from typing import Any
from urllib.parse import parse_qs, urlsplit

import pytest

from genro_challenge.behavior import ChallengeBehavior
from genro_challenge.context import HttpContext
from genro_challenge.exceptions import InvalidArgumentError
from genro_challenge.handlers import (
    HANDLER_REGISTRY,
    AuthenticateResult,
    AuthenticationHandler,
    BasicHandler,
    BearerHandler,
    RedirectHandler,
)
from genro_challenge.properties import AuthenticationProperties
from genro_challenge.request import HttpRequest


def build_scope(path: str = "/", headers: dict[str, str] | None = None, **extra: Any) -> dict[str, Any]:
    scope: dict[str, Any] = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": [(k.encode(), v.encode()) for k, v in (headers or {}).items()],
        "server": ("localhost", 80),
    }
    scope.update(extra)
    return scope


def _context(path: str = "/", headers: dict[str, str] | None = None, **extra: Any) -> HttpContext:
    return HttpContext(HttpRequest(build_scope(path, headers=headers, **extra)))


def _basic(username: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


class CountingHandler(AuthenticationHandler):
    """Authenticates from a flag, counts authenticate() calls."""

    def __init__(self, scheme: str, identity: str | None = None) -> None:
        super().__init__(scheme)
        self.identity = identity
        self.count = 0

    def authenticate(self, context: HttpContext) -> AuthenticateResult | None:
        self.count += 1
        if self.identity is None:
            return None
        return AuthenticateResult.success(self.identity)


# =============================================================================
# AuthenticateResult
# =============================================================================


class TestAuthenticateResult:
    """Tests for AuthenticateResult shapes."""

    def test_success(self) -> None:
        """Test a success result carries identity, tags and backend."""
        result = AuthenticateResult.success("mrossi", ["read"], scheme="users")
        assert result.succeeded
        assert not result.none
        assert result.as_auth_dict() == {"tags": ["read"], "identity": "mrossi", "backend": "users"}

    def test_no_result(self) -> None:
        """Test no_result is neither success nor failure."""
        result = AuthenticateResult.no_result("users")
        assert result.none
        assert not result.succeeded
        assert result.as_auth_dict() is None

    def test_fail(self) -> None:
        """Test a failure keeps its message."""
        result = AuthenticateResult.fail("bad password")
        assert not result.succeeded
        assert not result.none
        assert result.failure == "bad password"
        assert result.as_auth_dict() is None


# =============================================================================
# AuthenticationHandler base
# =============================================================================


class TestHandlerBase:
    """Tests for the behavior -> hook mapping and options."""

    def test_empty_scheme_rejected(self) -> None:
        """Test a handler needs a scheme name."""
        with pytest.raises(ValueError):
            CountingHandler("")

    def test_builtin_types_registered(self) -> None:
        """Test built-in handlers register their scheme_type."""
        assert HANDLER_REGISTRY["redirect"] is RedirectHandler
        assert HANDLER_REGISTRY["bearer"] is BearerHandler
        assert HANDLER_REGISTRY["basic"] is BasicHandler

    def test_unnamed_subclass_not_registered(self) -> None:
        """Test subclasses without scheme_type are not registered."""
        assert CountingHandler not in HANDLER_REGISTRY.values()

    def test_duplicate_scheme_type_rejected(self) -> None:
        """Test two classes cannot claim one scheme_type."""
        with pytest.raises(ValueError, match="already registered"):

            class OtherRedirect(AuthenticationHandler):
                scheme_type = "redirect"

                def authenticate(self, context: HttpContext) -> None:
                    return None

    @pytest.mark.asyncio
    async def test_automatic_unauthenticated_is_401(self) -> None:
        """Test AUTOMATIC without identity calls handle_unauthorized."""
        handler = CountingHandler("s")
        context = _context()
        await handler.challenge(context, None, ChallengeBehavior.AUTOMATIC)
        assert context.response.status_code == 401

    @pytest.mark.asyncio
    async def test_automatic_authenticated_is_403(self) -> None:
        """Test AUTOMATIC with identity calls handle_forbidden."""
        handler = CountingHandler("s", identity="mrossi")
        context = _context()
        await handler.challenge(context, None, ChallengeBehavior.AUTOMATIC)
        assert context.response.status_code == 403

    @pytest.mark.asyncio
    async def test_explicit_behaviors_skip_authentication(self) -> None:
        """Test UNAUTHORIZED and FORBIDDEN never authenticate."""
        handler = CountingHandler("s", identity="mrossi")
        context = _context()

        await handler.challenge(context, None, ChallengeBehavior.UNAUTHORIZED)
        assert context.response.status_code == 401
        await handler.challenge(context, None, ChallengeBehavior.FORBIDDEN)
        assert context.response.status_code == 403
        assert handler.count == 0

    @pytest.mark.asyncio
    async def test_authenticate_once_per_request(self) -> None:
        """Test the result is computed once per request."""
        handler = CountingHandler("s", identity="mrossi")
        context = _context()

        await handler.challenge(context, None)
        await handler.challenge(context, None)
        assert handler.count == 1
        assert context.auth_results["s"].scheme == "s"

    @pytest.mark.asyncio
    async def test_cache_shared_through_scope(self) -> None:
        """Test contexts over one scope share the cached result."""
        handler = CountingHandler("s")
        scope = build_scope()
        await handler.authenticate_once(HttpContext(HttpRequest(scope)))
        await handler.authenticate_once(HttpContext(HttpRequest(scope)))
        assert handler.count == 1

    @pytest.mark.asyncio
    async def test_none_result_becomes_no_result(self) -> None:
        """Test authenticate returning None reads as no result."""
        result = await CountingHandler("s").authenticate_once(_context())
        assert result.none
        assert result.scheme == "s"

    @pytest.mark.asyncio
    async def test_invalid_behavior(self) -> None:
        """Test an unknown behavior string is rejected."""
        with pytest.raises(InvalidArgumentError):
            await CountingHandler("s").challenge(_context(), None, "maybe")  # type: ignore[arg-type]


# =============================================================================
# RedirectHandler
# =============================================================================


class TestRedirectHandler:
    """Tests for login / access-denied redirects."""

    @pytest.fixture
    def handler(self) -> RedirectHandler:
        return RedirectHandler(
            "cookies", login_path="/Home/Login", access_denied_path="/Home/AccessDenied"
        )

    def test_defaults(self) -> None:
        """Test unset options take the class defaults."""
        handler = RedirectHandler("cookies")
        assert handler.options["login_path"] == "/account/login"
        assert handler.options["return_url_parameter"] == "ReturnUrl"

    def test_none_option_keeps_default(self) -> None:
        """Test None options fall back to the default."""
        handler = RedirectHandler("cookies", login_path=None)
        assert handler.options["login_path"] == "/account/login"

    def test_relative_path_rejected(self) -> None:
        """Test redirect paths must start with a slash."""
        with pytest.raises(ValueError, match="login_path"):
            RedirectHandler("cookies", login_path="Home/Login")

    @pytest.mark.asyncio
    async def test_unauthorized_redirects_to_login(self, handler: RedirectHandler) -> None:
        """Test UNAUTHORIZED redirects to login with ReturnUrl."""
        context = _context("/Challenge/AutomaticBehavior")
        await handler.challenge(context, None, ChallengeBehavior.UNAUTHORIZED)

        location = urlsplit(context.response.location)
        assert context.response.status_code == 302
        assert location.scheme == "http"
        assert location.netloc == "localhost"
        assert location.path == "/Home/Login"
        assert parse_qs(location.query) == {"ReturnUrl": ["/Challenge/AutomaticBehavior"]}

    @pytest.mark.asyncio
    async def test_forbidden_redirects_to_access_denied(self, handler: RedirectHandler) -> None:
        """Test FORBIDDEN redirects to the access denied path."""
        context = _context("/orders")
        await handler.challenge(context, None, ChallengeBehavior.FORBIDDEN)
        assert urlsplit(context.response.location).path == "/Home/AccessDenied"

    @pytest.mark.asyncio
    async def test_return_url_keeps_query(self, handler: RedirectHandler) -> None:
        """Test ReturnUrl keeps the original query string."""
        context = _context("/orders", query_string=b"page=2")
        await handler.challenge(context, None, ChallengeBehavior.UNAUTHORIZED)
        query = parse_qs(urlsplit(context.response.location).query)
        assert query["ReturnUrl"] == ["/orders?page=2"]

    @pytest.mark.asyncio
    async def test_return_url_from_properties(self, handler: RedirectHandler) -> None:
        """Test properties.redirect_uri overrides the current URL."""
        props = AuthenticationProperties(redirect_uri="/cart")
        context = _context("/orders")
        await handler.challenge(context, props, ChallengeBehavior.UNAUTHORIZED)

        query = parse_qs(urlsplit(context.response.location).query)
        assert query["ReturnUrl"] == ["/cart"]
        assert props.items == {".redirect": "/cart"}

    @pytest.mark.asyncio
    async def test_return_url_disabled(self) -> None:
        """Test an empty return_url_parameter drops ReturnUrl."""
        handler = RedirectHandler("cookies", return_url_parameter="")
        context = _context("/orders")
        await handler.challenge(context, None, ChallengeBehavior.UNAUTHORIZED)
        assert context.response.location == "http://localhost/account/login"

    @pytest.mark.asyncio
    async def test_host_header_and_root_path(self, handler: RedirectHandler) -> None:
        """Test Location uses the Host header and root_path."""
        context = _context("/orders", headers={"host": "shop.example.com"}, root_path="/app")
        await handler.challenge(context, None, ChallengeBehavior.UNAUTHORIZED)
        location = urlsplit(context.response.location)
        assert location.netloc == "shop.example.com"
        assert location.path == "/app/Home/Login"

    @pytest.mark.asyncio
    async def test_custom_status_code(self) -> None:
        """Test the redirect status code is configurable."""
        handler = RedirectHandler("cookies", status_code=303)
        context = _context()
        await handler.challenge(context, None, ChallengeBehavior.UNAUTHORIZED)
        assert context.response.status_code == 303

    @pytest.mark.asyncio
    async def test_automatic_uses_scope_auth(self, handler: RedirectHandler) -> None:
        """Test a scope["auth"] identity counts as signed in."""
        auth = {"identity": "mrossi", "tags": ["read"], "backend": "users"}
        context = _context("/orders", auth=auth)
        await handler.challenge(context, None)
        assert urlsplit(context.response.location).path == "/Home/AccessDenied"

    @pytest.mark.asyncio
    async def test_accepted_backends_filter(self) -> None:
        """Test identities from other backends are ignored."""
        handler = RedirectHandler("cookies", accepted_backends="tokens")
        auth = {"identity": "mrossi", "tags": [], "backend": "users"}
        context = _context("/orders", auth=auth)
        result = await handler.authenticate_once(context)
        assert result.none


# =============================================================================
# BearerHandler
# =============================================================================


class TestBearerHandler:
    """Tests for bearer token authentication and 401 challenge."""

    @pytest.fixture
    def handler(self) -> BearerHandler:
        return BearerHandler(
            "tokens",
            realm="api",
            tokens={"reader": {"token": "tk_abc123", "tags": "read, list"}},
        )

    def test_missing_token_value(self) -> None:
        """Test a token entry without value is rejected."""
        with pytest.raises(ValueError, match="missing 'token'"):
            BearerHandler("tokens", tokens={"reader": {"tags": "read"}})

    @pytest.mark.asyncio
    async def test_valid_token(self, handler: BearerHandler) -> None:
        """Test a known token authenticates its identity."""
        context = _context(headers={"authorization": "Bearer tk_abc123"})
        result = await handler.authenticate_once(context)
        assert result.succeeded
        assert result.identity == "reader"
        assert result.tags == ["read", "list"]

    @pytest.mark.asyncio
    async def test_no_header(self, handler: BearerHandler) -> None:
        """Test no Authorization header is no result."""
        assert (await handler.authenticate_once(_context())).none

    @pytest.mark.asyncio
    async def test_other_scheme_header_ignored(self, handler: BearerHandler) -> None:
        """Test a Basic header is not read as a bearer token."""
        context = _context(headers={"authorization": _basic("mrossi", "x")})
        assert (await handler.authenticate_once(context)).none

    @pytest.mark.asyncio
    async def test_unknown_token_fails(self, handler: BearerHandler) -> None:
        """Test an unknown token is a failure."""
        context = _context(headers={"authorization": "Bearer nope"})
        result = await handler.authenticate_once(context)
        assert result.failure is not None

    @pytest.mark.asyncio
    async def test_unauthorized_sets_www_authenticate(self, handler: BearerHandler) -> None:
        """Test the 401 advertises the bearer realm."""
        context = _context()
        await handler.challenge(context, None)
        assert context.response.status_code == 401
        assert context.response.get_header("WWW-Authenticate") == 'Bearer realm="api"'

    @pytest.mark.asyncio
    async def test_invalid_token_error(self, handler: BearerHandler) -> None:
        """Test a rejected token adds error="invalid_token"."""
        context = _context(headers={"authorization": "Bearer nope"})
        await handler.challenge(context, None)
        assert context.response.get_header("www-authenticate") == (
            'Bearer realm="api", error="invalid_token"'
        )

    @pytest.mark.asyncio
    async def test_authenticated_is_forbidden(self, handler: BearerHandler) -> None:
        """Test a valid token gets 403 without WWW-Authenticate."""
        context = _context(headers={"authorization": "Bearer tk_abc123"})
        await handler.challenge(context, None)
        assert context.response.status_code == 403
        assert context.response.get_header("WWW-Authenticate") is None


# =============================================================================
# BasicHandler
# =============================================================================


class TestBasicHandler:
    """Tests for basic authentication and 401 challenge."""

    @pytest.fixture
    def handler(self) -> BasicHandler:
        return BasicHandler(
            "users",
            realm="admin",
            users={"mrossi": {"password": "secret123", "tags": "read,write"}},
        )

    def test_missing_password(self) -> None:
        """Test a user entry without password is rejected."""
        with pytest.raises(ValueError, match="missing 'password'"):
            BasicHandler("users", users={"mrossi": {"tags": "read"}})

    @pytest.mark.asyncio
    async def test_valid_credentials(self, handler: BasicHandler) -> None:
        """Test correct credentials authenticate with tags."""
        context = _context(headers={"authorization": _basic("mrossi", "secret123")})
        result = await handler.authenticate_once(context)
        assert result.identity == "mrossi"
        assert result.tags == ["read", "write"]

    @pytest.mark.asyncio
    async def test_wrong_password(self, handler: BasicHandler) -> None:
        """Test a wrong password is a failure."""
        context = _context(headers={"authorization": _basic("mrossi", "wrong")})
        assert (await handler.authenticate_once(context)).failure is not None

    def test_verify_credentials(self, handler: BasicHandler) -> None:
        """Test direct username/password checks."""
        assert handler.verify_credentials("mrossi", "secret123").succeeded
        assert not handler.verify_credentials("mrossi", "nope").succeeded

    @pytest.mark.asyncio
    async def test_unauthorized_challenge(self, handler: BasicHandler) -> None:
        """Test the 401 advertises the basic realm."""
        context = _context()
        await handler.challenge(context, None)
        assert context.response.status_code == 401
        assert context.response.get_header("WWW-Authenticate") == 'Basic realm="admin"'

    @pytest.mark.asyncio
    async def test_challenge_twice_one_header(self, handler: BasicHandler) -> None:
        """Test a repeated challenge on one request keeps a single WWW-Authenticate."""
        context = _context()
        await handler.challenge(context, None)
        await handler.challenge(context, None)
        assert context.response.get_headers("WWW-Authenticate") == ['Basic realm="admin"']
