"""build_app() — assembles the storefront in its fixed registration order."""

from __future__ import annotations

import logging
import re
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager
from typing import cast

from fastapi import APIRouter, FastAPI
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response
from starlette.routing import BaseRoute, Host, Route

from meadowlark._types import VerifyCallback
from meadowlark.auth import IdentityProvider, UserRepository
from meadowlark.autoview import AutoViewResolver
from meadowlark.catalog import (
    AttractionRepository,
    ListenerRepository,
    VacationRepository,
    seed_vacations,
)
from meadowlark.chain import Chain
from meadowlark.config import Settings, get_settings
from meadowlark.exceptions import (
    CSRFError,
    PipelineAbort,
    RouteConcealed,
    StoreError,
    Unauthorized,
)
from meadowlark.isolation import FaultIsolation
from meadowlark.logging_config import configure_access_log
from meadowlark.middleware import ChainMiddleware
from meadowlark.routes import (
    build_account_router,
    build_admin_router,
    build_attraction_router,
    build_fallback_router,
    build_site_router,
    build_upload_router,
)
from meadowlark.steps import (
    AccessLog,
    CSRFProtect,
    FlashTransfer,
    LogoWidget,
    Session,
    StaticAssets,
    TestMode,
    WeatherWidget,
)
from meadowlark.store import DocumentStore, MongoDocumentStore, select_connection_string
from meadowlark.views import StaticMapper, ViewRenderer

logger = logging.getLogger(__name__)


def _abort_handler(
    views: ViewRenderer,
) -> Callable[[Request, PipelineAbort], Response]:
    def handle(request: Request, exc: PipelineAbort) -> Response:
        if isinstance(exc, Unauthorized):
            return RedirectResponse(exc.location, status_code=exc.status_code)
        if isinstance(exc, RouteConcealed):
            return views.render(request, "404", status_code=404)
        if isinstance(exc, CSRFError):
            return views.render(request, "403", status_code=403)
        return PlainTextResponse(exc.detail, status_code=exc.status_code)

    return handle


def _store_error_handler(
    views: ViewRenderer,
) -> Callable[[Request, StoreError], Response]:
    """Answer a failed store call with the 500 page.

    The failure stays with the request; the worker keeps serving.
    """

    def handle(request: Request, exc: StoreError) -> Response:
        logger.error(
            "Store failure in %s %s", request.method, request.url.path, exc_info=exc
        )
        if "application/json" in request.headers.get("accept", ""):
            return JSONResponse({"error": "Internal error."}, status_code=500)
        try:
            return views.render(request, "500", status_code=500)
        except Exception:
            logger.exception("Error page rendering failed.")
            return PlainTextResponse("Server error.", status_code=500)

    return handle


def _ignore_case(routes: Iterable[BaseRoute]) -> None:
    """Match route paths case-insensitively; path params keep their spelling."""
    for route in routes:
        if isinstance(route, Host):
            _ignore_case(route.routes)
        elif isinstance(route, Route):
            route.path_regex = re.compile(route.path_regex.pattern, re.IGNORECASE)


def build_app(
    settings: Settings | None = None,
    *,
    store: DocumentStore | None = None,
    verify: VerifyCallback | None = None,
    isolation: FaultIsolation | None = None,
) -> FastAPI:
    """Build the application.

    Raises ``UnknownEnvironment`` when ``settings.env`` names neither
    development nor production; nothing is built in that case.
    """
    settings = settings or get_settings()

    connection_string = select_connection_string(settings)
    if store is None:
        store = MongoDocumentStore(connection_string)

    static = StaticMapper(settings.static_base_url)
    views = ViewRenderer(settings.views_dir, static)
    isolation = isolation or FaultIsolation()

    def render_server_error(request: Request, exc: Exception) -> Response:
        return views.render(request, "500", status_code=500)

    isolation.render_error = render_server_error

    vacations = VacationRepository(store)
    attractions = AttractionRepository(store)
    listeners = ListenerRepository(store)
    users = UserRepository(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await seed_vacations(vacations)
        yield
        await store.close()

    app = FastAPI(
        title="Meadowlark Travel",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.views = views
    app.state.isolation = isolation

    configure_access_log(settings.env, settings.log_dir)
    chain = Chain(
        AccessLog("combined" if settings.is_production else "dev"),
        Session(store, settings.cookie_secret, https_only=settings.is_production),
        CSRFProtect(),
        StaticAssets(settings.public_dir),
        FlashTransfer(),
        TestMode(settings.env),
        WeatherWidget(),
        LogoWidget(static),
    )

    app.host("admin.{domain}", build_admin_router(views), name="admin")
    app.include_router(build_upload_router(settings.public_dir))
    app.include_router(build_site_router(views, vacations, listeners))
    app.include_router(build_attraction_router(attractions))

    identity = IdentityProvider(
        users,
        base_url=settings.base_url,
        providers=settings.auth_providers,
        verify=verify,
    )
    identity.init(chain)
    auth_router = APIRouter()
    identity.register_routes(auth_router)
    app.include_router(auth_router)

    app.include_router(build_account_router(views))

    _ignore_case(app.router.routes)
    explicit_routes = list(app.router.routes)

    auto_views = AutoViewResolver(settings.views_dir, views)
    app.state.auto_views = auto_views
    app.include_router(build_fallback_router(auto_views, explicit_routes))

    handle_abort = _abort_handler(views)
    handle_store_error = _store_error_handler(views)

    async def abort_handler(request: Request, exc: Exception) -> Response:
        return handle_abort(request, cast(PipelineAbort, exc))

    async def store_error_handler(request: Request, exc: Exception) -> Response:
        return handle_store_error(request, cast(StoreError, exc))

    async def not_found_handler(request: Request, exc: Exception) -> Response:
        http_exc = cast(StarletteHTTPException, exc)
        if http_exc.status_code == 404:
            return views.render(request, "404", status_code=404)
        return await http_exception_handler(request, http_exc)

    async def validation_handler(request: Request, exc: Exception) -> Response:
        return JSONResponse({"error": "Invalid request."}, status_code=422)

    app.add_exception_handler(PipelineAbort, abort_handler)
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.add_exception_handler(RequestValidationError, validation_handler)

    app.add_middleware(
        ChainMiddleware,
        chain=chain,
        isolation=isolation,
        on_abort=handle_abort,
        on_store_error=handle_store_error,
    )

    logger.debug("Application built for %s", settings.env)
    return app
