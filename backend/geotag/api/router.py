from __future__ import annotations

from fastapi import APIRouter

from geotag.api.geo import router as geo_router
from geotag.api.health import router as health_router


api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(geo_router)
