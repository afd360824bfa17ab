"""FaultIsolation — per-request error boundary with graceful drain."""

from __future__ import annotations

import asyncio
import logging
import os
import threading
from collections.abc import Awaitable, Callable, Coroutine
from contextvars import ContextVar
from functools import partial
from typing import Any

from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from meadowlark._types import Timer, TimerFactory
from meadowlark.context import RequestContext

logger = logging.getLogger(__name__)

_current: ContextVar[tuple[FaultIsolation, RequestContext] | None] = ContextVar(
    "meadowlark_fault_boundary", default=None
)


class FaultIsolation:
    """Catches every error escaping a request and drives the shutdown sequence.

    On the first error the worker schedules a failsafe exit after
    ``grace_period`` seconds, tells its supervisor to stop routing work to
    it and stops accepting connections. The failing client still gets an
    error page, or a plain-text 500 when the page itself cannot be
    rendered.
    """

    def __init__(
        self,
        *,
        grace_period: float = 5.0,
        timer_factory: TimerFactory = threading.Timer,
        exit_process: Callable[[int], Any] = os._exit,
        disconnect_worker: Callable[[], None] | None = None,
        close_listener: Callable[[], None] | None = None,
        render_error: Callable[[Request, Exception], Response] | None = None,
    ) -> None:
        self.grace_period = grace_period
        self.disconnect_worker = disconnect_worker
        self.close_listener = close_listener
        self.render_error = render_error
        self._timer_factory = timer_factory
        self._exit_process = exit_process
        self._failsafe: Timer | None = None

    @property
    def shutting_down(self) -> bool:
        return self._failsafe is not None

    async def run(
        self, ctx: RequestContext, call: Callable[[], Awaitable[Response]]
    ) -> Response:
        """Run ``call`` inside this boundary on behalf of ``ctx``."""
        token = _current.set((self, ctx))
        try:
            return await call()
        except Exception as exc:
            return self.handle(ctx, exc)
        finally:
            _current.reset(token)

    def handle(self, ctx: RequestContext, exc: Exception) -> Response:
        request = ctx.request
        logger.error(
            "Unhandled error in %s %s", request.method, request.url.path, exc_info=exc
        )
        try:
            self.shutdown()
            try:
                if self.render_error is None:
                    raise RuntimeError("No error renderer configured")
                return self.render_error(request, exc)
            except Exception:
                logger.exception("Error page rendering failed.")
                return PlainTextResponse("Server error.", status_code=500)
        except Exception:
            logger.exception("Unable to send 500 response.")
            raise

    def shutdown(self) -> None:
        if self._failsafe is None:
            self._failsafe = self._timer_factory(self.grace_period, self._failsafe_exit)
            self._failsafe.daemon = True
            self._failsafe.start()

        if self.disconnect_worker is not None:
            self.disconnect_worker()

        if self.close_listener is not None:
            self.close_listener()

    def _failsafe_exit(self) -> None:
        logger.critical("Failsafe shutdown.")
        self._exit_process(1)

    def _task_done(self, ctx: RequestContext, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            return
        request = ctx.request
        logger.error(
            "Unhandled error in background task of %s %s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        self.shutdown()


def spawn(coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
    """Start ``coro`` as a task owned by the current request's boundary.

    A failure of the task is reported to the boundary of the request that
    spawned it, even after that request has been answered.
    """
    task = asyncio.create_task(coro)
    current = _current.get()
    if current is not None:
        isolation, ctx = current
        task.add_done_callback(partial(isolation._task_done, ctx))
    return task
