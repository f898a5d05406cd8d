"""Tests for notes endpoints."""

from datetime import UTC, datetime

from bson import ObjectId

MIB = 1024 * 1024


def parse(value: str) -> datetime:
    return datetime.fromisoformat(value)


def parse_history(history: list[dict]) -> list[tuple[datetime, datetime]]:
    return [(parse(entry["date"]), parse(entry["modified_at"])) for entry in history]


class TestCreateNote:
    def test_create_note(self, make_note, folder):
        """Test creating a note seeds both date histories."""
        note = make_note(title="  Groceries ", content=" milk ", tags=["food", " ", "food"])

        assert note["title"] == "Groceries"
        assert note["content"] == "milk"
        assert note["tags"] == ["food", "food"]
        assert note["is_pinned"] is False
        assert note["folder"] == {"kind": "reference", "id": folder["id"]}
        assert len(note["custom_created_dates"]) == 1
        assert len(note["custom_last_modified_dates"]) == 1
        assert parse(note["main_created_at"]) == parse(note["custom_created_dates"][0]["date"])

    def test_create_note_empty_title(self, api_client, auth_headers, folder):
        response = api_client.post(
            "/notes",
            json={"folder_id": folder["id"], "title": "   ", "content": "x"},
            headers=auth_headers,
        )

        assert response.status_code == 422
        assert response.json()["code"] == "validation_error"

    def test_create_note_content_too_long(self, api_client, auth_headers, folder):
        response = api_client.post(
            "/notes",
            json={"folder_id": folder["id"], "title": "T", "content": "x" * 10001},
            headers=auth_headers,
        )

        assert response.status_code == 422

    def test_create_note_missing_folder(self, api_client, auth_headers):
        response = api_client.post(
            "/notes",
            json={"folder_id": str(ObjectId()), "title": "T", "content": "c"},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["details"]["kind"] == "folder"

    def test_create_increments_folder_count(self, api_client, auth_headers, folder, make_note):
        make_note()
        make_note()

        response = api_client.get(f"/folders/{folder['id']}", headers=auth_headers)

        assert response.json()["notes_count"] == 2


class TestAttachments:
    def test_image_stored_inline(self, make_note, image_payload):
        note = make_note(images=[image_payload(name="cat.PNG", size=2048)])

        image = note["images"][0]
        assert image["original_name"] == "cat.PNG"
        assert image["size"] == 2048
        assert image["filename"].endswith(".png")
        assert image["data"].startswith("data:image/png;base64,")

    def test_image_just_under_limit(self, make_note, image_payload):
        note = make_note(images=[image_payload(size=int(4.9 * MIB))])

        assert len(note["images"]) == 1

    def test_image_too_large(self, api_client, auth_headers, folder, image_payload):
        response = api_client.post(
            "/notes",
            json={
                "folder_id": folder["id"],
                "title": "Big",
                "content": "c",
                "images": [image_payload(size=6 * MIB)],
            },
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "too_large"

    def test_too_many_images(self, api_client, auth_headers, folder, image_payload):
        response = api_client.post(
            "/notes",
            json={
                "folder_id": folder["id"],
                "title": "Many",
                "content": "c",
                "images": [image_payload(name=f"{i}.png") for i in range(6)],
            },
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "too_many"

    def test_not_an_image(self, api_client, auth_headers, folder, image_payload):
        response = api_client.post(
            "/notes",
            json={
                "folder_id": folder["id"],
                "title": "Doc",
                "content": "c",
                "images": [image_payload(name="a.txt", mimetype="text/plain")],
            },
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_type"

    def test_invalid_base64(self, api_client, auth_headers, folder):
        response = api_client.post(
            "/notes",
            json={
                "folder_id": folder["id"],
                "title": "Broken",
                "content": "c",
                "images": [{"original_name": "a.png", "mimetype": "image/png", "data": "!!!"}],
            },
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_data"

    def test_replace_image_at_limit(self, api_client, auth_headers, make_note, image_payload):
        note = make_note(images=[image_payload(name=f"{i}.png") for i in range(5)])
        removed = note["images"][0]["filename"]

        response = api_client.put(
            f"/notes/{note['id']}",
            json={
                "title": note["title"],
                "content": note["content"],
                "remove_images": [removed],
                "images": [image_payload(name="new.png")],
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        images = response.json()["images"]
        assert len(images) == 5
        assert removed not in [image["filename"] for image in images]
        assert images[-1]["original_name"] == "new.png"

    def test_add_image_over_limit(self, api_client, auth_headers, make_note, image_payload):
        note = make_note(images=[image_payload(name=f"{i}.png") for i in range(5)])

        response = api_client.put(
            f"/notes/{note['id']}",
            json={"title": "T", "content": "c", "images": [image_payload()]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "too_many"


class TestGetNote:
    def test_get_note_reference(self, api_client, auth_headers, make_note, folder):
        note = make_note()

        response = api_client.get(f"/notes/{note['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["folder"] == {"kind": "reference", "id": folder["id"]}

    def test_get_note_expanded(self, api_client, auth_headers, make_note, folder):
        note = make_note()

        response = api_client.get(
            f"/notes/{note['id']}", params={"expand_folder": "true"}, headers=auth_headers
        )

        embedded = response.json()["folder"]
        assert embedded["kind"] == "expanded"
        assert embedded["id"] == folder["id"]
        assert embedded["name"] == "Work"
        assert embedded["notes_count"] == 1

    def test_get_missing_note(self, api_client, auth_headers):
        response = api_client.get(f"/notes/{ObjectId()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["details"]["kind"] == "note"


class TestUpdateNote:
    def test_plain_edit_keeps_dates(self, api_client, auth_headers, make_note):
        note = make_note()

        response = api_client.put(
            f"/notes/{note['id']}",
            json={"title": "Renamed", "content": "New body", "tags": ["x"]},
            headers=auth_headers,
        )

        data = response.json()
        assert data["title"] == "Renamed"
        assert data["tags"] == ["x"]
        assert parse(data["main_last_modified"]) == parse(note["main_last_modified"])
        assert len(data["custom_last_modified_dates"]) == 1

    def test_date_overrides_append_history(self, api_client, auth_headers, make_note):
        note = make_note()

        response = api_client.put(
            f"/notes/{note['id']}",
            json={
                "title": note["title"],
                "content": note["content"],
                "custom_created_at": "2022-01-01T08:00:00Z",
                "custom_last_modified": "2022-02-01T08:00:00+00:00",
            },
            headers=auth_headers,
        )

        data = response.json()
        assert parse(data["main_created_at"]) == datetime(2022, 1, 1, 8, tzinfo=UTC)
        assert parse(data["main_last_modified"]) == datetime(2022, 2, 1, 8, tzinfo=UTC)
        assert len(data["custom_created_dates"]) == 2
        assert len(data["custom_last_modified_dates"]) == 2
        assert parse(data["custom_last_modified_dates"][-1]["date"]) == parse(
            data["main_last_modified"]
        )

    def test_update_missing_note(self, api_client, auth_headers):
        response = api_client.put(
            f"/notes/{ObjectId()}", json={"title": "T", "content": "c"}, headers=auth_headers
        )

        assert response.status_code == 404


class TestPinAndDelete:
    def test_toggle_pin(self, api_client, auth_headers, make_note):
        note = make_note()

        first = api_client.patch(f"/notes/{note['id']}/pin", headers=auth_headers).json()
        second = api_client.patch(f"/notes/{note['id']}/pin", headers=auth_headers).json()

        assert first["is_pinned"] is True
        assert second["is_pinned"] is False
        assert len(second["custom_last_modified_dates"]) == 1
        assert parse(second["main_last_modified"]) == parse(note["main_last_modified"])
        assert parse(second["main_created_at"]) == parse(note["main_created_at"])
        assert parse_history(second["custom_created_dates"]) == parse_history(
            note["custom_created_dates"]
        )
        assert parse_history(second["custom_last_modified_dates"]) == parse_history(
            note["custom_last_modified_dates"]
        )

    def test_delete_note(self, api_client, auth_headers, make_note, folder):
        note = make_note()

        response = api_client.delete(f"/notes/{note['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert api_client.get(f"/notes/{note['id']}", headers=auth_headers).status_code == 404
        folder_now = api_client.get(f"/folders/{folder['id']}", headers=auth_headers).json()
        assert folder_now["notes_count"] == 0


class TestListFolderNotes:
    def test_pagination_clamps(self, api_client, auth_headers, folder, make_note):
        for i in range(25):
            make_note(title=f"Note {i:02d}")

        first = api_client.get(
            f"/notes/folder/{folder['id']}", params={"limit": 12}, headers=auth_headers
        ).json()
        beyond = api_client.get(
            f"/notes/folder/{folder['id']}", params={"limit": 12, "page": 99}, headers=auth_headers
        ).json()

        assert first["pagination"] == {"current": 1, "total": 3, "count": 12, "total_notes": 25}
        assert beyond["pagination"] == {"current": 3, "total": 3, "count": 1, "total_notes": 25}

    def test_default_page_size(self, api_client, auth_headers, folder, make_note):
        for i in range(13):
            make_note(title=f"Note {i}")

        data = api_client.get(f"/notes/folder/{folder['id']}", headers=auth_headers).json()

        assert data["pagination"]["count"] == 12
        assert data["pagination"]["total"] == 2

    def test_empty_folder(self, api_client, auth_headers, folder):
        data = api_client.get(f"/notes/folder/{folder['id']}", headers=auth_headers).json()

        assert data["notes"] == []
        assert data["pagination"] == {"current": 1, "total": 1, "count": 0, "total_notes": 0}

    def test_pinned_first(self, api_client, auth_headers, folder, make_note):
        make_note(title="Alpha")
        make_note(title="Bravo", is_pinned=True)
        make_note(title="Charlie")

        data = api_client.get(
            f"/notes/folder/{folder['id']}",
            params={"sort_by": "title", "sort_order": "asc"},
            headers=auth_headers,
        ).json()

        assert [n["title"] for n in data["notes"]] == ["Bravo", "Alpha", "Charlie"]

    def test_sort_title_desc(self, api_client, auth_headers, folder, make_note):
        for title in ["b", "C", "a"]:
            make_note(title=title)

        data = api_client.get(
            f"/notes/folder/{folder['id']}",
            params={"sort_by": "title", "sort_order": "desc"},
            headers=auth_headers,
        ).json()

        assert [n["title"] for n in data["notes"]] == ["C", "b", "a"]

    def test_search_title_content_tags(self, api_client, auth_headers, folder, make_note):
        make_note(title="Meeting notes", content="agenda")
        make_note(title="Shopping", content="Buy MEETING snacks")
        make_note(title="Other", content="nothing", tags=["meetings"])
        make_note(title="Unrelated", content="nope")

        data = api_client.get(
            f"/notes/folder/{folder['id']}", params={"search": "meeting"}, headers=auth_headers
        ).json()

        assert data["pagination"]["total_notes"] == 3
        assert "Unrelated" not in [n["title"] for n in data["notes"]]

    def test_invalid_sort_field(self, api_client, auth_headers, folder):
        response = api_client.get(
            f"/notes/folder/{folder['id']}", params={"sort_by": "size"}, headers=auth_headers
        )

        assert response.status_code == 422

    def test_missing_folder(self, api_client, auth_headers):
        response = api_client.get(f"/notes/folder/{ObjectId()}", headers=auth_headers)

        assert response.status_code == 404


class TestGlobalSearch:
    def test_search_across_folders(self, api_client, auth_headers, make_note):
        other = api_client.post("/folders", json={"name": "Home"}, headers=auth_headers).json()
        make_note(title="Budget 2024")
        api_client.post(
            "/notes",
            json={"folder_id": other["id"], "title": "Home budget", "content": "c"},
            headers=auth_headers,
        )

        data = api_client.get("/notes/search", params={"q": "budget"}, headers=auth_headers).json()

        assert data["pagination"]["total_notes"] == 2

    def test_search_requires_query(self, api_client, auth_headers):
        response = api_client.get("/notes/search", params={"q": ""}, headers=auth_headers)

        assert response.status_code == 422
