"""Shared type aliases and protocols."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from starlette.requests import Request
from starlette.responses import Response

# Identity provider callback: (provider, callback request) -> profile dict
VerifyCallback = Callable[[str, Request], Awaitable[dict[str, Any] | None]]

# View renderer: (request, view name, context, status code) -> response
RenderCallback = Callable[..., Response]


class Timer(Protocol):
    daemon: bool

    def start(self) -> None: ...
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]
