"""Account and sales pages, each behind an authorization gate."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.requests import Request
from starlette.responses import Response

from meadowlark.context import RequestContext
from meadowlark.gates import allow, customer_only, employee_only
from meadowlark.views import ViewRenderer


def build_account_router(views: ViewRenderer) -> APIRouter:
    router = APIRouter()

    @router.get("/account")
    async def account(
        request: Request,
        ctx: RequestContext = Depends(allow("customer,employee")),  # noqa: B008
    ) -> Response:
        return views.render(request, "account", {"username": ctx.user.name})

    @router.get("/account/order-history", dependencies=[Depends(customer_only)])
    async def order_history(request: Request) -> Response:
        return views.render(request, "account/order-history")

    @router.get("/account/email-prefs", dependencies=[Depends(customer_only)])
    async def email_prefs(request: Request) -> Response:
        return views.render(request, "account/email-prefs")

    @router.get("/sales", dependencies=[Depends(employee_only)])
    async def sales(request: Request) -> Response:
        return views.render(request, "sales")

    return router
