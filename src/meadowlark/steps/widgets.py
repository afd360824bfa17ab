"""Context steps — test-mode flag, weather partial and logo variant."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import Any

from meadowlark.context import RequestContext
from meadowlark.step import ChainStep, StepCategory
from meadowlark.views import StaticMapper


class TestMode(ChainStep):
    """Sets ``locals["show_tests"]`` from ``?test=1`` outside production."""

    __test__ = False  # not a pytest class

    category = StepCategory.TEST_MODE

    def __init__(self, env: str) -> None:
        self._available = env != "production"

    async def resolve(self, ctx: RequestContext) -> None:
        ctx.locals["show_tests"] = (
            self._available and ctx.request.query_params.get("test") == "1"
        )


def get_weather_data() -> dict[str, Any]:
    return {
        "locations": [
            {
                "name": "Portland",
                "forecast_url": "http://www.wunderground.com/US/OR/Portland.html",
                "icon_url": "http://icons-ak.wxug.com/i/c/k/cloudy.gif",
                "weather": "Overcast",
                "temp": "54.1 F (12.3 C)",
            },
            {
                "name": "Bend",
                "forecast_url": "http://www.wunderground.com/US/OR/Bend.html",
                "icon_url": "http://icons-ak.wxug.com/i/c/k/partlycloudy.gif",
                "weather": "Partly Cloudy",
                "temp": "55.0 F (12.8 C)",
            },
            {
                "name": "Manzanita",
                "forecast_url": "http://www.wunderground.com/US/OR/Manzanita.html",
                "icon_url": "http://icons-ak.wxug.com/i/c/k/rain.gif",
                "weather": "Light Rain",
                "temp": "55.0 F (12.8 C)",
            },
        ],
    }


class WeatherWidget(ChainStep):
    category = StepCategory.WIDGETS

    def __init__(
        self, source: Callable[[], dict[str, Any]] = get_weather_data
    ) -> None:
        self._source = source

    async def resolve(self, ctx: RequestContext) -> None:
        partials = ctx.locals.setdefault("partials", {})
        partials["weather_context"] = self._source()


class LogoWidget(ChainStep):
    """Picks the seasonal logo: Bud Clark's on March 26, the regular one otherwise."""

    category = StepCategory.WIDGETS

    def __init__(
        self, mapper: StaticMapper, *, today: Callable[[], date] = date.today
    ) -> None:
        self._mapper = mapper
        self._today = today

    async def resolve(self, ctx: RequestContext) -> None:
        now = self._today()
        if now.month == 3 and now.day == 26:
            ctx.locals["logo_image"] = self._mapper.map("/img/logo_bud_clark.png")
        else:
            ctx.locals["logo_image"] = self._mapper.map("/img/logo.png")
