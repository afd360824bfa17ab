"""Identity provider integration — session-backed login through external providers.

``IdentityProvider.init`` adds the authentication step that turns the
user id kept in the session into ``ctx.user`` (also ``request.user``).
``register_routes`` adds the login redirect, the provider callback and
logout. Talking to the provider itself is delegated to a ``verify``
callback that turns the callback request into a profile
``{"id": ..., "name": ..., "email": ...}``, or ``None`` on failure.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from urllib.parse import urlencode

from fastapi import APIRouter, HTTPException
from starlette.requests import Request
from starlette.responses import RedirectResponse

from meadowlark._types import VerifyCallback
from meadowlark.chain import Chain
from meadowlark.context import RequestContext
from meadowlark.models import User
from meadowlark.step import ChainStep, StepCategory
from meadowlark.store import DocumentStore

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


class UserRepository:
    def __init__(self, store: DocumentStore) -> None:
        self._collection = store.collection("users")

    async def get(self, user_id: str) -> User | None:
        document = await self._collection.find_by_id(user_id)
        if document is None:
            return None
        return User.model_validate({**document, "id": document["_id"]})

    async def find_or_create(
        self, *, auth_id: str, name: str, email: str | None = None
    ) -> User:
        document = await self._collection.find_one({"auth_id": auth_id})
        if document is not None:
            return User.model_validate({**document, "id": document["_id"]})

        user = User(auth_id=auth_id, name=name, email=email, role="customer")
        user.id = await self._collection.insert(user.model_dump(exclude={"id"}))
        logger.info("Created user %s for %s", user.id, auth_id)
        return user


class SessionAuthentication(ChainStep):
    """Loads the logged-in user named by the session."""

    category = StepCategory.AUTHENTICATION

    def __init__(
        self, users: UserRepository, *, session_key: str = SESSION_USER_KEY
    ) -> None:
        self._users = users
        self._session_key = session_key

    async def resolve(self, ctx: RequestContext) -> None:
        user_id = ctx.session.get(self._session_key)
        user = await self._users.get(user_id) if user_id else None
        if user is None and user_id:
            del ctx.session[self._session_key]
        ctx.user = user
        ctx.request.scope["user"] = user


class IdentityProvider:
    def __init__(
        self,
        users: UserRepository,
        *,
        base_url: str,
        providers: Mapping[str, Mapping[str, str]],
        verify: VerifyCallback | None = None,
        success_redirect: str = "/account",
        failure_redirect: str = "/unauthorized",
        session_key: str = SESSION_USER_KEY,
    ) -> None:
        self._users = users
        self._base_url = base_url.rstrip("/")
        self._providers = providers
        self._verify = verify
        self._success_redirect = success_redirect
        self._failure_redirect = failure_redirect
        self._session_key = session_key

    def callback_url(self, provider: str) -> str:
        return f"{self._base_url}/auth/{provider}/callback"

    def init(self, chain: Chain) -> None:
        chain.add(SessionAuthentication(self._users, session_key=self._session_key))

    def register_routes(self, router: APIRouter) -> None:
        @router.get("/auth/{provider}")
        async def login(provider: str) -> RedirectResponse:
            config = self._providers.get(provider)
            if config is None:
                raise HTTPException(status_code=404)
            query = urlencode(
                {
                    "client_id": config.get("client_id", ""),
                    "redirect_uri": self.callback_url(provider),
                    "response_type": "code",
                }
            )
            return RedirectResponse(
                f"{config['authorize_url']}?{query}", status_code=303
            )

        @router.get("/auth/{provider}/callback")
        async def callback(provider: str, request: Request) -> RedirectResponse:
            if provider not in self._providers:
                raise HTTPException(status_code=404)

            profile = None
            if self._verify is not None:
                try:
                    profile = await self._verify(provider, request)
                except Exception:
                    logger.exception("Identity provider %s failed", provider)
            if not profile:
                return RedirectResponse(self._failure_redirect, status_code=303)

            user = await self._users.find_or_create(
                auth_id=f"{provider}:{profile['id']}",
                name=profile.get("name") or "",
                email=profile.get("email"),
            )
            request.session[self._session_key] = user.id
            return RedirectResponse(self._success_redirect, status_code=303)

        @router.get("/logout")
        async def logout(request: Request) -> RedirectResponse:
            request.session.pop(self._session_key, None)
            return RedirectResponse("/", status_code=303)
