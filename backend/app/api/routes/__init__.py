from __future__ import annotations

from fastapi import APIRouter

from . import (
    folders,
    general,
    notes,
    transform,
)

router = APIRouter()
router.include_router(general.router)
router.include_router(transform.router)
router.include_router(folders.router)
router.include_router(notes.router)
