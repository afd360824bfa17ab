"""Flash message step — one-time notifications carried over a redirect."""

from __future__ import annotations

from typing import Any

from starlette.requests import Request

from meadowlark.context import RequestContext
from meadowlark.step import ChainStep, StepCategory

FLASH_KEY = "flash"


def set_flash(request: Request, kind: str, intro: str, message: str) -> None:
    """Store a flash message to be shown on the next request."""
    request.session[FLASH_KEY] = {"type": kind, "intro": intro, "message": message}


class FlashTransfer(ChainStep):
    """Moves a pending flash message from the session into ``locals``."""

    category = StepCategory.FLASH

    async def resolve(self, ctx: RequestContext) -> None:
        flash: dict[str, Any] | None = ctx.session.pop(FLASH_KEY, None)
        ctx.locals["flash"] = flash
