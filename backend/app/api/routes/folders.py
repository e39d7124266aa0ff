from __future__ import annotations

from typing import Dict

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.core.logging import get_logger
from app.database import (
    Folder as FolderRecord,
    Note as NoteRecord,
    folder_record_to_dict,
    get_db,
    now_ms,
)
from app.models.notes import FolderCreateRequest, FolderOut, FolderRenameRequest

router = APIRouter(prefix="/api/folders", tags=["folders"])
logger = get_logger("folders")


async def _get_folder_or_404(db: AsyncSession, folder_id: str) -> FolderRecord:
    result = await db.execute(select(FolderRecord).where(FolderRecord.id == folder_id))
    folder = result.scalar_one_or_none()
    if not folder:
        raise NotFound("Folder not found")
    return folder


@router.get("")
async def list_folders(db: AsyncSession = Depends(get_db)) -> Dict[str, object]:
    result = await db.execute(
        select(FolderRecord).order_by(FolderRecord.created_at.asc(), FolderRecord.id)
    )
    folders = [folder_record_to_dict(row) for row in result.scalars().all()]
    return {"folders": folders, "total": len(folders)}


@router.post("", status_code=201, response_model=FolderOut)
async def create_folder(
    payload: FolderCreateRequest, db: AsyncSession = Depends(get_db)
) -> Dict[str, object]:
    stamp = now_ms()
    folder = FolderRecord(name=payload.name, is_open=True, created_at=stamp, updated_at=stamp)
    db.add(folder)
    await db.flush()
    await db.refresh(folder)
    logger.info("Created folder %s", folder.id)
    return folder_record_to_dict(folder)


@router.put("/{folder_id}", response_model=FolderOut)
async def rename_folder(
    folder_id: str, payload: FolderRenameRequest, db: AsyncSession = Depends(get_db)
) -> Dict[str, object]:
    folder = await _get_folder_or_404(db, folder_id)
    folder.name = payload.name
    folder.updated_at = now_ms()
    await db.flush()
    return folder_record_to_dict(folder)


@router.post("/{folder_id}/toggle", response_model=FolderOut)
async def toggle_folder(
    folder_id: str, db: AsyncSession = Depends(get_db)
) -> Dict[str, object]:
    folder = await _get_folder_or_404(db, folder_id)
    folder.is_open = not folder.is_open
    folder.updated_at = now_ms()
    await db.flush()
    return folder_record_to_dict(folder)


@router.delete("/{folder_id}")
async def delete_folder(
    folder_id: str, db: AsyncSession = Depends(get_db)
) -> Dict[str, object]:
    folder = await _get_folder_or_404(db, folder_id)

    # Notes go with their folder, in the same transaction
    result = await db.execute(delete(NoteRecord).where(NoteRecord.folder_id == folder_id))
    await db.delete(folder)
    await db.flush()

    logger.info("Deleted folder %s with %d notes", folder_id, result.rowcount or 0)
    return {"deleted": True, "folder_id": folder_id, "notes_deleted": result.rowcount or 0}
