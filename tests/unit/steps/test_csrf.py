"""Tests for the CSRF step."""

from __future__ import annotations

from typing import Any

import pytest
from starlette.requests import Request

from meadowlark.context import RequestContext
from meadowlark.exceptions import CSRFError
from meadowlark.steps.csrf import CSRFProtect, create_token, verify_token


def _form_ctx(body: bytes) -> RequestContext:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/notify-me-when-in-season",
        "query_string": b"",
        "headers": [(b"content-type", b"application/x-www-form-urlencoded")],
    }

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": body, "more_body": False}

    return RequestContext(request=Request(scope, receive))


class TestTokens:
    def test_token_verifies_against_its_secret(self) -> None:
        token = create_token("s3cret")
        assert verify_token("s3cret", token)
        assert not verify_token("other", token)

    def test_tokens_are_salted(self) -> None:
        assert create_token("s3cret") != create_token("s3cret")

    @pytest.mark.parametrize("token", ["", "nosalt", "-digest", "salt-"])
    def test_malformed_tokens_fail(self, token: str) -> None:
        assert not verify_token("s3cret", token)


class TestCSRFProtect:
    async def test_safe_method_issues_token_and_secret(self, make_ctx: Any) -> None:
        ctx = make_ctx()
        await CSRFProtect().resolve(ctx)
        secret = ctx.session["csrf_secret"]
        assert verify_token(secret, ctx.locals["csrf_token"])

    async def test_secret_is_kept_across_requests(self, make_ctx: Any) -> None:
        ctx = make_ctx()
        ctx.session["csrf_secret"] = "existing"
        await CSRFProtect().resolve(ctx)
        assert ctx.session["csrf_secret"] == "existing"

    async def test_post_without_token_is_rejected(self, make_ctx: Any) -> None:
        with pytest.raises(CSRFError) as exc_info:
            await CSRFProtect().resolve(make_ctx(method="POST"))
        assert exc_info.value.status_code == 403

    async def test_post_with_wrong_token_is_rejected(self, make_ctx: Any) -> None:
        ctx = make_ctx(method="POST", headers={"X-CSRF-Token": create_token("other")})
        ctx.session["csrf_secret"] = "mine"
        with pytest.raises(CSRFError):
            await CSRFProtect().resolve(ctx)

    @pytest.mark.parametrize("header", ["X-CSRF-Token", "CSRF-Token", "X-XSRF-Token"])
    async def test_token_from_header(self, make_ctx: Any, header: str) -> None:
        ctx = make_ctx(method="POST", headers={header: create_token("mine")})
        ctx.session["csrf_secret"] = "mine"
        await CSRFProtect().resolve(ctx)
        assert "csrf_token" in ctx.locals

    async def test_token_from_query(self, make_ctx: Any) -> None:
        ctx = make_ctx(method="DELETE", query_string=f"_csrf={create_token('mine')}")
        ctx.session["csrf_secret"] = "mine"
        await CSRFProtect().resolve(ctx)

    async def test_token_from_urlencoded_body(self) -> None:
        token = create_token("mine")
        ctx = _form_ctx(f"email=a%40b.c&_csrf={token}".encode())
        ctx.session["csrf_secret"] = "mine"
        await CSRFProtect().resolve(ctx)
        assert await ctx.request.body() == f"email=a%40b.c&_csrf={token}".encode()
