"""Session step — signed session-id cookie backed by the document store."""

from __future__ import annotations

import copy
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from itsdangerous import BadSignature, TimestampSigner
from starlette.responses import Response

from meadowlark.context import RequestContext
from meadowlark.step import ChainStep, StepCategory
from meadowlark.store import DocumentStore


class Session(ChainStep):
    """Loads the session document named by the cookie into ``ctx.session``.

    The same dict is exposed as ``request.session``. On the way out the
    document is written back only when it changed; an untouched new session
    is never persisted and sets no cookie.
    """

    category = StepCategory.SESSION

    def __init__(
        self,
        store: DocumentStore,
        secret: str,
        *,
        cookie_name: str = "meadowlark.sid",
        max_age: int = 14 * 24 * 60 * 60,
        https_only: bool = False,
        collection: str = "sessions",
    ) -> None:
        self._sessions = store.collection(collection)
        self._signer = TimestampSigner(secret)
        self._cookie_name = cookie_name
        self._max_age = max_age
        self._https_only = https_only

    async def resolve(self, ctx: RequestContext) -> None:
        session_id = self._unsign(ctx.request.cookies.get(self._cookie_name))
        data: dict[str, Any] = {}

        if session_id is not None:
            document = await self._sessions.find_by_id(session_id)
            if document is not None and _expired(document):
                await self._sessions.delete(session_id)
                document = None
            if document is None:
                session_id = None
            else:
                data = dict(document.get("data") or {})

        ctx.session = data
        ctx.state["session_id"] = session_id
        ctx.state["session_snapshot"] = copy.deepcopy(data)
        ctx.request.scope["session"] = data

    async def finalize(self, ctx: RequestContext, response: Response) -> None:
        snapshot = ctx.state.get("session_snapshot")
        if snapshot is None or ctx.session == snapshot:
            return

        session_id = ctx.state.get("session_id")
        if session_id is None:
            session_id = secrets.token_urlsafe(32)
            ctx.state["session_id"] = session_id

        expires = datetime.now(UTC) + timedelta(seconds=self._max_age)
        await self._sessions.replace(
            session_id, {"data": ctx.session, "expires": expires}, upsert=True
        )
        response.set_cookie(
            self._cookie_name,
            self._signer.sign(session_id).decode("utf-8"),
            max_age=self._max_age,
            httponly=True,
            secure=self._https_only,
            samesite="lax",
        )

    def _unsign(self, value: str | None) -> str | None:
        if not value:
            return None
        try:
            return self._signer.unsign(value, max_age=self._max_age).decode("utf-8")
        except BadSignature:
            return None


def _expired(document: dict[str, Any]) -> bool:
    expires = document.get("expires")
    if expires is None:
        return False
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=UTC)
    return bool(expires <= datetime.now(UTC))
