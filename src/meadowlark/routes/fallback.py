"""Catch-all route: auto views, then 404. Must be registered last."""

from __future__ import annotations

from collections.abc import Sequence

from fastapi import APIRouter, HTTPException
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import BaseRoute, Match

from meadowlark.autoview import AutoViewResolver
from meadowlark.context import get_context

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _explicitly_routed(routes: Sequence[BaseRoute], request: Request) -> bool:
    return any(route.matches(request.scope)[0] != Match.NONE for route in routes)


def build_fallback_router(
    resolver: AutoViewResolver, routes: Sequence[BaseRoute] = ()
) -> APIRouter:
    """Paths matched by any of ``routes`` (by any method) never auto-resolve,
    so a view behind a gated route is only reachable through that route.
    """
    router = APIRouter()

    @router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def auto_view(request: Request, path: str) -> Response:
        readable = request.method in ("GET", "HEAD")
        if readable and not _explicitly_routed(routes, request):
            response = await resolver.resolve(get_context(request))
            if response is not None:
                return response
        raise HTTPException(status_code=404)

    return router
