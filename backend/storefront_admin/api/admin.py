import platform
from typing import Annotated, Any

from fastapi import APIRouter, Depends

from storefront_admin.config import Settings, get_settings
from storefront_admin.utils.auth import CurrentAdmin, get_current_admin

# Every route here sits behind the admin authenticator
router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("/health")
async def admin_health(admin: CurrentAdmin) -> dict[str, str]:
    return {"status": "ok", "auth": admin.method}


@router.get("/system/info")
async def system_info(
    settings: Annotated[Settings, Depends(get_settings)],
) -> dict[str, Any]:
    return {
        "python": platform.python_version(),
        "env": settings.environment,
        "auth_modes": settings.get_auth_modes(),
    }
