"""Health check routes (used by container health checks)."""

from fastapi import APIRouter

from ..app import SERVICE_NAME

router = APIRouter()


@router.get("/")
@router.get("/health")
async def health():
    return {"status": "ok", "service": SERVICE_NAME}
