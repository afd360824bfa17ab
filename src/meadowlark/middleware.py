"""ChainMiddleware — executes a resolved Chain in front of the router."""

from __future__ import annotations

from collections.abc import Callable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from meadowlark.chain import Chain
from meadowlark.context import RequestContext
from meadowlark.exceptions import PipelineAbort, StoreError
from meadowlark.isolation import FaultIsolation
from meadowlark.step import ChainStep


class ChainMiddleware(BaseHTTPMiddleware):
    """Runs every chain step in order, then hands the request to the router.

    The whole run, router included, happens inside the fault-isolation
    boundary. A step that raises ``PipelineAbort`` is answered through
    ``on_abort``, a failed store call in a step through ``on_store_error``;
    finalizers still run for the steps that resolved. Neither reaches the
    boundary.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        chain: Chain,
        isolation: FaultIsolation,
        on_abort: Callable[[Request, PipelineAbort], Response],
        on_store_error: Callable[[Request, StoreError], Response],
    ) -> None:
        super().__init__(app)
        self._chain = chain
        self._isolation = isolation
        self._on_abort = on_abort
        self._on_store_error = on_store_error

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        ctx = RequestContext(request=request)
        request.state.ctx = ctx
        return await self._isolation.run(ctx, lambda: self._run(ctx, call_next))

    async def _run(
        self, ctx: RequestContext, call_next: RequestResponseEndpoint
    ) -> Response:
        resolved = self._chain.resolve()
        ran: list[ChainStep] = []
        response: Response | None = None

        try:
            for step in resolved.steps:
                ran.append(step)
                response = await step.resolve(ctx)
                if response is not None:
                    break
        except PipelineAbort as exc:
            response = self._on_abort(ctx.request, exc)
        except StoreError as exc:
            response = self._on_store_error(ctx.request, exc)

        if response is None:
            response = await call_next(ctx.request)

        for step in reversed(ran):
            try:
                await step.finalize(ctx, response)
            except StoreError as exc:
                response = self._on_store_error(ctx.request, exc)

        return response
