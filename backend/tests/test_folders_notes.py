"""Tests for the folder and note storage endpoints."""

import pytest
from httpx import AsyncClient

from app.database import DEFAULT_FOLDER_ID, DEFAULT_FOLDER_NAME

FOLDERS = "/api/folders"
NOTES = "/api/notes"


async def _create_note(client: AsyncClient, folder_id: str = DEFAULT_FOLDER_ID) -> dict:
    resp = await client.post(NOTES, json={"folderId": folder_id})
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
class TestFolders:
    """/api/folders"""

    async def test_default_folder_seeded(self, client: AsyncClient):
        resp = await client.get(FOLDERS)
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 1
        folder = data["folders"][0]
        assert folder["id"] == DEFAULT_FOLDER_ID
        assert folder["name"] == DEFAULT_FOLDER_NAME
        assert folder["isOpen"] is True

    async def test_create_trims_name(self, client: AsyncClient):
        resp = await client.post(FOLDERS, json={"name": "  Biology  "})
        assert resp.status_code == 201
        data = resp.json()
        assert data["name"] == "Biology"
        assert data["createdAt"] == data["updatedAt"]

        listing = await client.get(FOLDERS)
        assert listing.json()["total"] == 2

    async def test_blank_name_rejected(self, client: AsyncClient):
        resp = await client.post(FOLDERS, json={"name": "   "})
        assert resp.status_code == 400

    async def test_rename(self, client: AsyncClient):
        resp = await client.put(f"{FOLDERS}/{DEFAULT_FOLDER_ID}", json={"name": "Archive"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Archive"

    async def test_rename_unknown(self, client: AsyncClient):
        resp = await client.put(f"{FOLDERS}/missing", json={"name": "x"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Folder not found"}

    async def test_toggle(self, client: AsyncClient):
        first = await client.post(f"{FOLDERS}/{DEFAULT_FOLDER_ID}/toggle")
        assert first.json()["isOpen"] is False
        second = await client.post(f"{FOLDERS}/{DEFAULT_FOLDER_ID}/toggle")
        assert second.json()["isOpen"] is True

    async def test_delete_removes_its_notes(self, client: AsyncClient):
        folder = (await client.post(FOLDERS, json={"name": "Temp"})).json()
        await _create_note(client, folder["id"])
        await _create_note(client, folder["id"])
        kept = await _create_note(client)

        resp = await client.delete(f"{FOLDERS}/{folder['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"deleted": True, "folder_id": folder["id"], "notes_deleted": 2}

        remaining = (await client.get(NOTES)).json()
        assert [n["id"] for n in remaining["notes"]] == [kept["id"]]

    async def test_delete_unknown(self, client: AsyncClient):
        resp = await client.delete(f"{FOLDERS}/missing")
        assert resp.status_code == 404


@pytest.mark.asyncio
class TestNotes:
    """/api/notes"""

    async def test_create_defaults(self, client: AsyncClient):
        note = await _create_note(client)
        assert note["folderId"] == DEFAULT_FOLDER_ID
        assert note["title"] == "Untitled"
        assert note["content"] == ""
        assert note["id"]

    async def test_create_in_unknown_folder(self, client: AsyncClient):
        resp = await client.post(NOTES, json={"folderId": "missing"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Folder not found"}

    async def test_get(self, client: AsyncClient):
        note = await _create_note(client)
        resp = await client.get(f"{NOTES}/{note['id']}")
        assert resp.status_code == 200
        assert resp.json() == note

    async def test_get_unknown(self, client: AsyncClient):
        resp = await client.get(f"{NOTES}/missing")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Note not found"}

    async def test_patch_changes_only_sent_fields(self, client: AsyncClient):
        note = await _create_note(client)
        resp = await client.patch(f"{NOTES}/{note['id']}", json={"content": "Mitosis has 4 phases."})
        assert resp.status_code == 200
        data = resp.json()
        assert data["content"] == "Mitosis has 4 phases."
        assert data["title"] == "Untitled"
        assert data["updatedAt"] >= note["updatedAt"]

    async def test_rename(self, client: AsyncClient):
        note = await _create_note(client)
        resp = await client.put(f"{NOTES}/{note['id']}/title", json={"title": " Cell Biology "})
        assert resp.status_code == 200
        assert resp.json()["title"] == "Cell Biology"

    async def test_rename_blank_rejected(self, client: AsyncClient):
        note = await _create_note(client)
        resp = await client.put(f"{NOTES}/{note['id']}/title", json={"title": ""})
        assert resp.status_code == 400

    async def test_list_filtered_by_folder(self, client: AsyncClient):
        other = (await client.post(FOLDERS, json={"name": "Chemistry"})).json()
        in_default = await _create_note(client)
        await _create_note(client, other["id"])

        resp = await client.get(NOTES, params={"folderId": DEFAULT_FOLDER_ID})
        data = resp.json()
        assert data["total"] == 1
        assert data["notes"][0]["id"] == in_default["id"]

        everything = (await client.get(NOTES)).json()
        assert everything["total"] == 2

    async def test_delete(self, client: AsyncClient):
        note = await _create_note(client)
        resp = await client.delete(f"{NOTES}/{note['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"deleted": True, "note_id": note["id"]}
        assert (await client.get(f"{NOTES}/{note['id']}")).status_code == 404

    async def test_delete_unknown(self, client: AsyncClient):
        resp = await client.delete(f"{NOTES}/missing")
        assert resp.status_code == 404

    async def test_library(self, client: AsyncClient):
        note = await _create_note(client)
        resp = await client.get("/api/library")
        assert resp.status_code == 200
        data = resp.json()
        assert [f["id"] for f in data["folders"]] == [DEFAULT_FOLDER_ID]
        assert [n["id"] for n in data["notes"]] == [note["id"]]
