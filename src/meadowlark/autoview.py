"""AutoViewResolver — renders ``views/<path>.html`` for unrouted paths."""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Any

from starlette.responses import Response

from meadowlark._types import RenderCallback
from meadowlark.context import RequestContext
from meadowlark.views import TEMPLATE_SUFFIX


class AutoViewResolver:
    """Memoizing path -> view lookup.

    Keys are lower-cased request paths. Once a path resolves, the mapping
    is trusted for the life of the process and the filesystem is not
    consulted again. Misses are not cached. Segments starting with ``_``
    (layouts, partials) and ``..`` never resolve.
    """

    def __init__(self, views_dir: str | Path, render: RenderCallback) -> None:
        self._views_dir = Path(views_dir)
        self._render = render
        self._cache: dict[str, str] = {}

    @property
    def cache(self) -> MappingProxyType[str, str]:
        return MappingProxyType(self._cache)

    def lookup(self, path: str) -> str | None:
        key = path.lower()
        view = self._cache.get(key)
        if view is not None:
            return view

        name = key.removeprefix("/")
        segments = name.split("/")
        if not name or any(s in ("", "..") or s.startswith("_") for s in segments):
            return None

        if (self._views_dir / (name + TEMPLATE_SUFFIX)).is_file():
            return self._cache.setdefault(key, name)
        return None

    async def resolve(self, ctx: RequestContext, **context: Any) -> Response | None:
        view = self.lookup(ctx.request.url.path)
        if view is None:
            return None
        return self._render(ctx.request, view, context or None)
