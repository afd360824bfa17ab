"""CSRF step — per-session secret, per-request token, validation on writes."""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from urllib.parse import parse_qs

from starlette.requests import Request

from meadowlark.context import RequestContext
from meadowlark.exceptions import CSRFError
from meadowlark.step import ChainStep, StepCategory

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})
TOKEN_HEADERS = ("csrf-token", "xsrf-token", "x-csrf-token", "x-xsrf-token")


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _digest(secret: str, salt: str) -> str:
    mac = hmac.new(secret.encode("utf-8"), salt.encode("utf-8"), hashlib.sha256)
    return _b64_url_encode(mac.digest())


def create_token(secret: str) -> str:
    """Return a fresh salted token for ``secret``."""
    salt = secrets.token_hex(4)
    return f"{salt}-{_digest(secret, salt)}"


def verify_token(secret: str, token: str) -> bool:
    salt, sep, digest = token.partition("-")
    if not sep or not salt or not digest:
        return False
    return hmac.compare_digest(digest, _digest(secret, salt))


class CSRFProtect(ChainStep):
    """Issues ``locals["csrf_token"]`` and rejects forged state-changing requests.

    The token is looked up in the ``csrf-token``-style headers, the
    ``_csrf`` query parameter, then the ``_csrf`` field of an urlencoded
    body. Multipart bodies are not inspected; send the header instead.
    """

    category = StepCategory.CSRF

    def __init__(
        self, *, session_key: str = "csrf_secret", field: str = "_csrf"
    ) -> None:
        self._session_key = session_key
        self._field = field

    async def resolve(self, ctx: RequestContext) -> None:
        secret = ctx.session.get(self._session_key)
        if secret is None:
            secret = secrets.token_urlsafe(18)
            ctx.session[self._session_key] = secret

        if ctx.request.method not in SAFE_METHODS:
            supplied = await self._supplied_token(ctx.request)
            if not supplied or not verify_token(secret, supplied):
                raise CSRFError()

        ctx.locals["csrf_token"] = create_token(secret)

    async def _supplied_token(self, request: Request) -> str | None:
        for header in TOKEN_HEADERS:
            value = request.headers.get(header)
            if value:
                return value

        value = request.query_params.get(self._field)
        if value:
            return value

        content_type = request.headers.get("content-type", "")
        if content_type.startswith("application/x-www-form-urlencoded"):
            body = await request.body()
            fields = parse_qs(body.decode("utf-8", errors="replace"))
            values = fields.get(self._field)
            if values:
                return values[0]
        return None
