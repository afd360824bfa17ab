"""Authorization gates — role checks run as FastAPI dependencies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from starlette.requests import Request

from meadowlark.context import RequestContext, get_context
from meadowlark.exceptions import RouteConcealed, Unauthorized


def _get_role(user: object) -> str | None:
    """Extract the role from user by dict key or attribute."""
    if user is None:
        return None
    if isinstance(user, dict):
        role: str | None = user.get("role")
        return role
    return getattr(user, "role", None)


class AccessPolicy(ABC):
    @abstractmethod
    async def check(self, ctx: RequestContext) -> None: ...


class AllowRoles(AccessPolicy):
    """Allows any of a comma-separated set of roles; others are redirected."""

    def __init__(self, roles: str) -> None:
        self.roles = frozenset(r.strip() for r in roles.split(",") if r.strip())

    async def check(self, ctx: RequestContext) -> None:
        if _get_role(ctx.user) not in self.roles:
            raise Unauthorized()


class CustomerOnly(AccessPolicy):
    """Customer pages tell everyone else to log on."""

    async def check(self, ctx: RequestContext) -> None:
        if _get_role(ctx.user) != "customer":
            raise Unauthorized()


class EmployeeOnly(AccessPolicy):
    """Employee pages do not reveal that they exist."""

    async def check(self, ctx: RequestContext) -> None:
        if _get_role(ctx.user) != "employee":
            raise RouteConcealed()


def gate(policy: AccessPolicy) -> Callable[[Request], Awaitable[RequestContext]]:
    """Return a FastAPI-compatible dependency enforcing ``policy``."""

    async def dependency(request: Request) -> RequestContext:
        ctx = get_context(request)
        await policy.check(ctx)
        return ctx

    return dependency


def allow(roles: str) -> Callable[[Request], Awaitable[RequestContext]]:
    return gate(AllowRoles(roles))


customer_only = gate(CustomerOnly())
employee_only = gate(EmployeeOnly())
