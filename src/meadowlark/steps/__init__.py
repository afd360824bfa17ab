"""Built-in chain steps."""

from meadowlark.steps.access_log import AccessLog
from meadowlark.steps.csrf import CSRFProtect
from meadowlark.steps.flash import FlashTransfer, set_flash
from meadowlark.steps.session import Session
from meadowlark.steps.static import StaticAssets
from meadowlark.steps.widgets import LogoWidget, TestMode, WeatherWidget

__all__ = [
    "AccessLog",
    "CSRFProtect",
    "FlashTransfer",
    "LogoWidget",
    "Session",
    "StaticAssets",
    "TestMode",
    "WeatherWidget",
    "set_flash",
]
