"""RequestContext — per-request state container."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from starlette.requests import Request


@dataclass
class RequestContext:
    """Lightweight per-request state container mutated by chain steps.

    ``locals`` holds response-local values read by the view layer
    (flash message, CSRF token, widget data, logo variant, test flag).
    """

    request: Request
    user: Any | None = None
    session: dict[str, Any] = field(default_factory=dict)
    locals: dict[str, Any] = field(default_factory=dict)
    state: dict[str, Any] = field(default_factory=dict)


def get_context(request: Request) -> RequestContext:
    """Return the context the chain attached to ``request``.

    Requests that bypassed the chain (e.g. direct sub-app calls in tests)
    get a fresh, empty context.
    """
    ctx = getattr(request.state, "ctx", None)
    if ctx is None:
        ctx = RequestContext(request=request)
        request.state.ctx = ctx
    return ctx
