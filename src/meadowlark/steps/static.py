"""Static asset step — serves files from the public directory."""

from __future__ import annotations

import os
from pathlib import Path

from starlette.exceptions import HTTPException
from starlette.responses import Response
from starlette.staticfiles import StaticFiles

from meadowlark.context import RequestContext
from meadowlark.step import ChainStep, StepCategory


class StaticAssets(ChainStep):
    """Answers GET/HEAD requests that name an existing file under ``directory``."""

    category = StepCategory.STATIC

    def __init__(self, directory: str | Path) -> None:
        self._files = StaticFiles(directory=directory, check_dir=False)

    async def resolve(self, ctx: RequestContext) -> Response | None:
        request = ctx.request
        if request.method not in ("GET", "HEAD"):
            return None

        parts = [p for p in request.url.path.split("/") if p]
        if not parts:
            return None
        path = os.path.normpath(os.path.join(*parts))

        try:
            return await self._files.get_response(path, request.scope)
        except HTTPException:
            return None
