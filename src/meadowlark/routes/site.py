"""Public storefront pages."""

from __future__ import annotations

import random

from fastapi import APIRouter, Form
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from meadowlark.catalog import ListenerRepository, VacationRepository
from meadowlark.steps.flash import set_flash
from meadowlark.views import ViewRenderer

FORTUNES = (
    "Conquer your fears or they will conquer you.",
    "Rivers need springs.",
    "Do not fear what you don't know.",
    "You will have a pleasant surprise.",
    "Whenever possible, keep it simple.",
)


def get_fortune() -> str:
    return random.choice(FORTUNES)


def build_site_router(
    views: ViewRenderer,
    vacations: VacationRepository,
    listeners: ListenerRepository,
) -> APIRouter:
    router = APIRouter()

    @router.get("/")
    async def home(request: Request) -> Response:
        return views.render(request, "home")

    @router.get("/about")
    async def about(request: Request) -> Response:
        return views.render(
            request,
            "about",
            {"fortune": get_fortune(), "page_test_script": "/qa/tests-about.js"},
        )

    @router.get("/vacations")
    async def list_vacations(request: Request) -> Response:
        available = await vacations.list_available()
        return views.render(request, "vacations", {"vacations": available})

    @router.get("/notify-me-when-in-season")
    async def notify_form(request: Request, sku: str = "") -> Response:
        return views.render(request, "notify-me-when-in-season", {"sku": sku})

    @router.post("/notify-me-when-in-season")
    async def notify_subscribe(
        request: Request,
        email: str = Form(...),  # noqa: B008
        sku: str = Form(...),  # noqa: B008
    ) -> Response:
        if await vacations.get_by_sku(sku) is None:
            set_flash(request, "danger", "Sorry!", "We don't know that vacation.")
        else:
            await listeners.subscribe(email, sku)
            set_flash(
                request,
                "success",
                "Thank you!",
                "You will be notified when this vacation is in season.",
            )
        return RedirectResponse("/vacations", status_code=303)

    @router.get("/unauthorized")
    async def unauthorized(request: Request) -> Response:
        return views.render(request, "unauthorized", status_code=403)

    return router
