"""Tests for the HTTP client's error mapping."""

import httpx
import pytest

from api.errors import RecordNotFound, RecordValidationError, TooManyAttachments
from cli.api_client import AuthenticationError, NotesApiClient, TransportError


def make_client(handler, token="tok"):
    return NotesApiClient("http://test", token=token, transport=httpx.MockTransport(handler))


class TestRequests:
    def test_sends_bearer_token(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[])

        make_client(handler).list_folders()

        assert seen["auth"] == "Bearer tok"

    def test_login_stores_token(self):
        def handler(request):
            return httpx.Response(200, json={"access_token": "new", "token_type": "bearer"})

        client = make_client(handler, token=None)

        assert client.login("pw") == "new"
        assert client.token == "new"

    def test_list_notes_params(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"notes": [], "pagination": {}})

        make_client(handler).list_notes("f1", search="x", sort_by="title", page=2)

        assert seen["params"] == {
            "search": "x",
            "sort_by": "title",
            "sort_order": "desc",
            "page": "2",
            "limit": "12",
        }


class TestErrorMapping:
    def test_unauthorized(self):
        client = make_client(lambda r: httpx.Response(401, json={"detail": "nope"}))

        with pytest.raises(AuthenticationError):
            client.list_folders()

    def test_not_found(self):
        body = {"detail": "Note not found", "code": "not_found", "details": {"kind": "note", "id": "n1"}}
        client = make_client(lambda r: httpx.Response(404, json=body))

        with pytest.raises(RecordNotFound) as exc_info:
            client.get_note("n1")

        assert exc_info.value.kind == "note"
        assert exc_info.value.record_id == "n1"

    def test_validation(self):
        body = {"detail": [{"loc": ["body", "title"], "msg": "too short"}]}
        client = make_client(lambda r: httpx.Response(422, json=body))

        with pytest.raises(RecordValidationError) as exc_info:
            client.create_folder("")

        assert exc_info.value.message == "title: too short"

    def test_attachment_code(self):
        body = {"detail": "You can only have up to 5 images per note", "code": "too_many"}
        client = make_client(lambda r: httpx.Response(400, json=body))

        with pytest.raises(TooManyAttachments):
            client.update_note("n1", {})

    def test_server_error(self):
        client = make_client(lambda r: httpx.Response(500, text="boom"))

        with pytest.raises(TransportError):
            client.list_folders()

    def test_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        with pytest.raises(TransportError):
            make_client(handler).list_folders()
