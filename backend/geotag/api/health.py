from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from geotag.codec import encode, is_valid


router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz() -> JSONResponse:
    # Readiness: the grid codec must be importable and round-trip a known point.
    try:
        token = encode(0.0, 0.0).token
    except Exception:
        return JSONResponse(status_code=503, content={"status": "not_ready"})
    if not is_valid(token):
        return JSONResponse(status_code=503, content={"status": "not_ready"})
    return JSONResponse(status_code=200, content={"status": "ready"})
