from __future__ import annotations

from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _trimmed_non_empty(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


TrimmedName = Annotated[str, AfterValidator(_trimmed_non_empty)]


class FolderCreateRequest(BaseModel):
    name: TrimmedName


class FolderRenameRequest(BaseModel):
    name: TrimmedName


class NoteCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    folder_id: str = Field(..., alias="folderId")


class NoteUpdateRequest(BaseModel):
    """Only the fields that are sent are changed."""

    title: Optional[str] = None
    content: Optional[str] = None


class NoteRenameRequest(BaseModel):
    title: TrimmedName


class FolderOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    is_open: bool = Field(..., alias="isOpen")
    created_at: int = Field(..., alias="createdAt")
    updated_at: int = Field(..., alias="updatedAt")


class NoteOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    folder_id: str = Field(..., alias="folderId")
    title: str
    content: str
    created_at: int = Field(..., alias="createdAt")
    updated_at: int = Field(..., alias="updatedAt")


class LibraryOut(BaseModel):
    folders: List[FolderOut]
    notes: List[NoteOut]
