from __future__ import annotations

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.database import (
    Folder as FolderRecord,
    Note as NoteRecord,
    folder_record_to_dict,
    get_db,
    note_record_to_dict,
    now_ms,
)
from app.models.notes import (
    LibraryOut,
    NoteCreateRequest,
    NoteOut,
    NoteRenameRequest,
    NoteUpdateRequest,
)

router = APIRouter(tags=["notes"])


async def _get_note_or_404(db: AsyncSession, note_id: str) -> NoteRecord:
    result = await db.execute(select(NoteRecord).where(NoteRecord.id == note_id))
    note = result.scalar_one_or_none()
    if not note:
        raise NotFound("Note not found")
    return note


@router.get("/api/library", response_model=LibraryOut)
async def load_library(db: AsyncSession = Depends(get_db)) -> Dict[str, object]:
    """Every folder and note in one response, for the initial sidebar load."""
    folders = await db.execute(select(FolderRecord).order_by(FolderRecord.created_at.asc()))
    notes = await db.execute(select(NoteRecord).order_by(NoteRecord.updated_at.desc()))
    return {
        "folders": [folder_record_to_dict(f) for f in folders.scalars().all()],
        "notes": [note_record_to_dict(n) for n in notes.scalars().all()],
    }


@router.get("/api/notes")
async def list_notes(
    folder_id: Optional[str] = Query(None, alias="folderId"),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, object]:
    stmt = select(NoteRecord).order_by(NoteRecord.updated_at.desc(), NoteRecord.id)
    if folder_id is not None:
        stmt = stmt.where(NoteRecord.folder_id == folder_id)
    result = await db.execute(stmt)
    notes = [note_record_to_dict(row) for row in result.scalars().all()]
    return {"notes": notes, "total": len(notes)}


@router.get("/api/notes/{note_id}", response_model=NoteOut)
async def get_note(note_id: str, db: AsyncSession = Depends(get_db)) -> Dict[str, object]:
    return note_record_to_dict(await _get_note_or_404(db, note_id))


@router.post("/api/notes", status_code=201, response_model=NoteOut)
async def create_note(
    payload: NoteCreateRequest, db: AsyncSession = Depends(get_db)
) -> Dict[str, object]:
    folder = await db.get(FolderRecord, payload.folder_id)
    if not folder:
        raise NotFound("Folder not found")

    stamp = now_ms()
    note = NoteRecord(
        folder_id=folder.id,
        title="Untitled",
        content="",
        created_at=stamp,
        updated_at=stamp,
    )
    db.add(note)
    await db.flush()
    await db.refresh(note)
    return note_record_to_dict(note)


@router.patch("/api/notes/{note_id}", response_model=NoteOut)
async def update_note(
    note_id: str, payload: NoteUpdateRequest, db: AsyncSession = Depends(get_db)
) -> Dict[str, object]:
    note = await _get_note_or_404(db, note_id)
    if payload.title is not None:
        note.title = payload.title
    if payload.content is not None:
        note.content = payload.content
    note.updated_at = now_ms()
    await db.flush()
    return note_record_to_dict(note)


@router.put("/api/notes/{note_id}/title", response_model=NoteOut)
async def rename_note(
    note_id: str, payload: NoteRenameRequest, db: AsyncSession = Depends(get_db)
) -> Dict[str, object]:
    note = await _get_note_or_404(db, note_id)
    note.title = payload.title
    note.updated_at = now_ms()
    await db.flush()
    return note_record_to_dict(note)


@router.delete("/api/notes/{note_id}")
async def delete_note(note_id: str, db: AsyncSession = Depends(get_db)) -> Dict[str, object]:
    note = await _get_note_or_404(db, note_id)
    await db.delete(note)
    await db.flush()
    return {"deleted": True, "note_id": note_id}
