"""Route sets, registered by ``build_app`` in a fixed order."""

from meadowlark.routes.account import build_account_router
from meadowlark.routes.admin import build_admin_router
from meadowlark.routes.attractions import build_attraction_router
from meadowlark.routes.fallback import build_fallback_router
from meadowlark.routes.site import build_site_router
from meadowlark.routes.uploads import build_upload_router

__all__ = [
    "build_account_router",
    "build_admin_router",
    "build_attraction_router",
    "build_fallback_router",
    "build_site_router",
    "build_upload_router",
]
