from fastapi import APIRouter

from merse.api.credits.router import router as credits_router
from merse.api.health.router import router as health_router
from merse.api.keys.router import router as keys_router
from merse.api.orion.router import router as orion_router

# V1 API router
v1_router = APIRouter(prefix="/v1")

# Include domain routers
v1_router.include_router(credits_router)
v1_router.include_router(keys_router)
v1_router.include_router(orion_router)

# Main API router
api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(v1_router)
