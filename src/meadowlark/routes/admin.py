"""Routes of the ``admin.*`` virtual host."""

from __future__ import annotations

from fastapi import APIRouter
from starlette.requests import Request
from starlette.responses import Response

from meadowlark.views import ViewRenderer


def build_admin_router(views: ViewRenderer) -> APIRouter:
    admin = APIRouter()

    @admin.get("/")
    async def home(request: Request) -> Response:
        return views.render(request, "admin/home")

    @admin.get("/users")
    async def users(request: Request) -> Response:
        return views.render(request, "admin/users")

    return admin
