"""Access logging step — one line per request on the ``meadowlark.access`` logger."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Literal

from starlette.responses import Response

from meadowlark.context import RequestContext
from meadowlark.step import ChainStep, StepCategory

access_logger = logging.getLogger("meadowlark.access")


class AccessLog(ChainStep):
    """Records the request start and logs method, path, status and timing.

    ``dev`` produces a compact line for the console; ``combined`` adds the
    client address and user agent for the durable production log.
    """

    category = StepCategory.ACCESS_LOG

    def __init__(
        self,
        fmt: Literal["dev", "combined"] = "dev",
        *,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._fmt = fmt
        self._logger = logger or access_logger
        self._clock = clock

    async def resolve(self, ctx: RequestContext) -> None:
        ctx.state["started_at"] = self._clock()

    async def finalize(self, ctx: RequestContext, response: Response) -> None:
        started = ctx.state.get("started_at", self._clock())
        elapsed_ms = (self._clock() - started) * 1000
        request = ctx.request
        length = response.headers.get("content-length", "-")

        if self._fmt == "dev":
            self._logger.info(
                "%s %s %d %.3f ms - %s",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
                length,
            )
            return

        client = request.client.host if request.client is not None else "-"
        self._logger.info(
            '%s "%s %s HTTP/%s" %d %s "%s" "%s" %.3f ms',
            client,
            request.method,
            request.url.path,
            request.scope.get("http_version", "1.1"),
            response.status_code,
            length,
            request.headers.get("referer", "-"),
            request.headers.get("user-agent", "-"),
            elapsed_ms,
        )
