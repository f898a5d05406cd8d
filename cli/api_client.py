"""HTTP client for the Folder Notes API."""

from __future__ import annotations

from datetime import datetime

import httpx

from api.errors import (
    AttachmentError,
    AttachmentTooLarge,
    InvalidAttachmentData,
    InvalidAttachmentType,
    NoteAppError,
    RecordNotFound,
    RecordValidationError,
    TooManyAttachments,
)
from api.services.attachments import ImageUpload, upload_payload

_ATTACHMENT_ERRORS = {
    cls.code: cls
    for cls in (
        InvalidAttachmentType,
        AttachmentTooLarge,
        TooManyAttachments,
        InvalidAttachmentData,
    )
}


class TransportError(NoteAppError):
    """The API could not be reached or answered unexpectedly."""

    code = "transport_error"


class AuthenticationError(TransportError):
    """The saved token is missing, expired or was rejected."""

    code = "authentication_error"


def _body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _detail(response: httpx.Response) -> str:
    detail = _body(response).get("detail", response.text)
    if isinstance(detail, list):
        # FastAPI request validation errors
        return "; ".join(
            f"{'.'.join(str(part) for part in item.get('loc', [])[1:])}: {item.get('msg')}"
            for item in detail
        )
    return str(detail)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class NotesApiClient:
    """Thin synchronous wrapper over the REST API raising domain errors."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.token = token
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.ConnectError as e:
            raise TransportError("Could not connect to API server") from e
        except httpx.HTTPError as e:
            raise TransportError(f"API request failed: {e}") from e

        if response.is_success:
            return response

        status = response.status_code
        detail = _detail(response)
        if status in (401, 403):
            raise AuthenticationError(detail)
        if status == 404:
            details = _body(response).get("details", {})
            raise RecordNotFound(details.get("kind", "record"), details.get("id", path))
        if status == 422:
            raise RecordValidationError(detail)
        if status == 400:
            code = _body(response).get("code")
            raise _ATTACHMENT_ERRORS.get(code, AttachmentError)(detail)
        raise TransportError(f"HTTP {status}: {detail}")

    # Auth

    def login(self, password: str) -> str:
        response = self._request("POST", "/auth/login", json={"password": password})
        self.token = response.json()["access_token"]
        return self.token

    # Folders

    def list_folders(self) -> list[dict]:
        return self._request("GET", "/folders").json()

    def get_folder(self, folder_id: str) -> dict:
        return self._request("GET", f"/folders/{folder_id}").json()

    def folder_stats(self, folder_id: str) -> dict:
        return self._request("GET", f"/folders/{folder_id}/stats").json()

    def create_folder(
        self,
        name: str,
        description: str = "",
        color: str | None = None,
        custom_created_at: datetime | None = None,
    ) -> dict:
        payload = {"name": name, "description": description}
        if color:
            payload["color"] = color
        if custom_created_at is not None:
            payload["custom_created_at"] = _iso(custom_created_at)
        return self._request("POST", "/folders", json=payload).json()

    def update_folder(
        self,
        folder_id: str,
        name: str,
        description: str,
        color: str,
        custom_created_at: datetime | None = None,
    ) -> dict:
        payload = {"name": name, "description": description, "color": color}
        if custom_created_at is not None:
            payload["custom_created_at"] = _iso(custom_created_at)
        return self._request("PUT", f"/folders/{folder_id}", json=payload).json()

    def delete_folder(self, folder_id: str) -> None:
        self._request("DELETE", f"/folders/{folder_id}")

    # Notes

    def list_notes(
        self,
        folder_id: str,
        search: str | None = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
        page: int = 1,
        limit: int = 12,
    ) -> dict:
        params = {"sort_by": sort_by, "sort_order": sort_order, "page": page, "limit": limit}
        if search:
            params["search"] = search
        return self._request("GET", f"/notes/folder/{folder_id}", params=params).json()

    def search_notes(self, query: str, page: int = 1, limit: int = 20) -> dict:
        params = {"q": query, "page": page, "limit": limit}
        return self._request("GET", "/notes/search", params=params).json()

    def get_note(self, note_id: str, expand_folder: bool = False) -> dict:
        params = {"expand_folder": "true"} if expand_folder else None
        return self._request("GET", f"/notes/{note_id}", params=params).json()

    def create_note(
        self,
        folder_id: str,
        title: str,
        content: str,
        tags: list[str] | None = None,
        is_pinned: bool = False,
        images: list[ImageUpload] | None = None,
    ) -> dict:
        payload = {
            "folder_id": folder_id,
            "title": title,
            "content": content,
            "tags": tags or [],
            "is_pinned": is_pinned,
            "images": [upload_payload(image) for image in images or []],
        }
        return self._request("POST", "/notes", json=payload).json()

    def update_note(self, note_id: str, payload: dict) -> dict:
        return self._request("PUT", f"/notes/{note_id}", json=payload).json()

    def delete_note(self, note_id: str) -> None:
        self._request("DELETE", f"/notes/{note_id}")

    def toggle_pin(self, note_id: str) -> dict:
        return self._request("PATCH", f"/notes/{note_id}/pin").json()
