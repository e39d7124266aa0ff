from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter(tags=["general"])


@router.get("/", response_model=Dict[str, str])
async def read_root() -> Dict[str, str]:
    return {
        "message": f"{settings.app_title} is running!",
        "version": settings.app_version,
        "docs": "/docs",
    }


@router.get("/health")
async def health_check() -> Dict[str, str]:
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}
