"""ChainStep abstract base class and StepCategory enum."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from starlette.responses import Response

from meadowlark.context import RequestContext


class StepCategory(Enum):
    """Per-request step categories, defining strict execution order."""

    ACCESS_LOG = "access_log"
    SESSION = "session"
    CSRF = "csrf"
    STATIC = "static"
    AUTHENTICATION = "authentication"
    FLASH = "flash"
    TEST_MODE = "test_mode"
    WIDGETS = "widgets"

    @property
    def order(self) -> int:
        _ORDER = {
            "access_log": 1,
            "session": 2,
            "csrf": 3,
            "static": 4,
            "authentication": 5,
            "flash": 6,
            "test_mode": 7,
            "widgets": 8,
        }
        return _ORDER[self.value]


class ChainStep(ABC):
    """Base abstraction for all request-processing steps in a chain.

    ``resolve`` returns ``None`` to call through to the next step, or a
    response to terminate the chain early. ``finalize`` runs on the way
    out, in reverse order, for every step whose ``resolve`` ran.
    """

    category: ClassVar[StepCategory]

    @abstractmethod
    async def resolve(self, ctx: RequestContext) -> Response | None: ...

    async def finalize(self, ctx: RequestContext, response: Response) -> None:
        return None
