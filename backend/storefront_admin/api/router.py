from fastapi import APIRouter

from storefront_admin.api.admin import router as admin_router
from storefront_admin.api.auth import router as auth_router

api_router = APIRouter()

# Include sub-routers
api_router.include_router(auth_router)
api_router.include_router(admin_router)
