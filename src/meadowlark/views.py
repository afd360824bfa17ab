"""View layer — Jinja2 templates fed with the request's ``locals``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from starlette.requests import Request
from starlette.responses import Response
from starlette.templating import Jinja2Templates

from meadowlark.context import get_context

TEMPLATE_SUFFIX = ".html"


class StaticMapper:
    """Maps a logical asset name to the URL it is served from."""

    def __init__(self, base_url: str = "") -> None:
        self._base_url = base_url.rstrip("/")

    def map(self, name: str) -> str:
        return self._base_url + name


class ViewRenderer:
    def __init__(self, directory: str | Path, static: StaticMapper) -> None:
        self.templates = Jinja2Templates(directory=str(directory))
        self.templates.env.globals["static"] = static.map

    def render(
        self,
        request: Request,
        view: str,
        context: dict[str, Any] | None = None,
        *,
        status_code: int = 200,
    ) -> Response:
        """Render ``view`` with the request's locals underneath ``context``."""
        ctx = get_context(request)
        merged: dict[str, Any] = {**ctx.locals, "user": ctx.user}
        merged.update(context or {})
        return self.templates.TemplateResponse(
            request, view + TEMPLATE_SUFFIX, merged, status_code=status_code
        )

    __call__ = render
