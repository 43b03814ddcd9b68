from __future__ import annotations

from fastapi import APIRouter, Depends

from islanders.core.runtime import Runtime

from .deps import get_runtime


router = APIRouter()


@router.get("/health")
async def health(runtime: Runtime = Depends(get_runtime)) -> dict:
    return {
        "status": "ok",
        "version": "0.1.0",
        "storage": runtime.settings.storage_backend,
        "lifecycle_engine": runtime.engine.running,
    }
