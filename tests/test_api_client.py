from __future__ import annotations

from datetime import timezone
from typing import Any, Optional

import pytest
import requests

from transdesk.api.client import ApiClient
from transdesk.errors import CONNECTIVITY_MESSAGE, SERVER_DEFAULT_MESSAGE, SETUP_MESSAGE, AppError, ErrorKind

_NO_JSON = object()


class _FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None) -> None:
        self.status_code = status_code
        self._body = body

    def json(self) -> Any:
        if self._body is _NO_JSON:
            raise ValueError("no json")
        return self._body


class _FakeSession:
    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.calls: list[dict[str, Any]] = []
        self.responses: list[Any] = []

    def queue(self, item: Any) -> None:
        self.responses.append(item)

    def request(self, method, url, *, json=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "headers": headers or {}, "timeout": timeout})
        item = self.responses.pop(0) if self.responses else _FakeResponse(200, {})
        if isinstance(item, Exception):
            raise item
        return item


def _client(session: _FakeSession, token: Optional[str] = None) -> ApiClient:
    client = ApiClient(
        "http://backend.test/api/",
        "https://translate.test/translate",
        timeout=5.0,
        session=session,
    )
    client.set_token(token)
    return client


def test_login_posts_credentials_without_bearer() -> None:
    session = _FakeSession()
    session.queue(
        _FakeResponse(200, {"token": "tok", "user": {"_id": "u1", "firstName": "Ravi", "lastName": "Kumar", "email": "r@x.io"}})
    )
    payload = _client(session, token="stale").login("r@x.io", "secret1")

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://backend.test/api/auth/login"
    assert call["json"] == {"email": "r@x.io", "password": "secret1"}
    assert "Authorization" not in call["headers"]
    assert call["timeout"] == 5.0
    assert payload.token == "tok"
    assert payload.user.id == "u1"
    assert payload.user.display_name == "Ravi Kumar"


def test_register_uses_camel_case_body() -> None:
    session = _FakeSession()
    session.queue(_FakeResponse(201, {"token": "tok", "user": {"id": "u2", "email": "s@x.io"}}))
    _client(session).register("Sita", "Devi", "s@x.io", "secret1")
    assert session.calls[0]["json"] == {
        "firstName": "Sita",
        "lastName": "Devi",
        "email": "s@x.io",
        "password": "secret1",
    }


def test_authenticated_calls_carry_bearer_header() -> None:
    session = _FakeSession()
    session.queue(_FakeResponse(200, {"id": "u1", "firstName": "Ravi", "lastName": "K", "email": "r@x.io"}))
    user = _client(session, token="tok-9").me()
    assert session.calls[0]["url"] == "http://backend.test/api/users/me"
    assert session.calls[0]["headers"]["Authorization"] == "Bearer tok-9"
    assert user.first_name == "Ravi"


def test_update_password_is_put() -> None:
    session = _FakeSession()
    _client(session, token="t").update_password("old", "newpass")
    call = session.calls[0]
    assert call["method"] == "PUT"
    assert call["url"].endswith("/users/password")
    assert call["json"] == {"currentPassword": "old", "newPassword": "newpass"}


def test_translate_goes_to_external_endpoint_without_token() -> None:
    session = _FakeSession()
    session.queue(_FakeResponse(200, {"translatedText": "నమస్కారం"}))
    out = _client(session, token="secret").translate("Hello")
    call = session.calls[0]
    assert call["url"] == "https://translate.test/translate"
    assert call["json"] == {"text": "Hello"}
    assert "Authorization" not in call["headers"]
    assert out == "నమస్కారం"


def test_translate_without_field_is_server_error() -> None:
    session = _FakeSession()
    session.queue(_FakeResponse(200, {"unexpected": True}))
    with pytest.raises(AppError) as exc:
        _client(session).translate("Hello")
    assert exc.value.kind == ErrorKind.SERVER
    assert exc.value.message == SERVER_DEFAULT_MESSAGE


def test_http_error_uses_server_message() -> None:
    session = _FakeSession()
    session.queue(_FakeResponse(400, {"message": "Invalid credentials"}))
    with pytest.raises(AppError) as exc:
        _client(session).login("r@x.io", "bad")
    assert exc.value.kind == ErrorKind.SERVER
    assert exc.value.status == 400
    assert exc.value.message == "Invalid credentials"


def test_http_error_without_json_uses_default_message() -> None:
    session = _FakeSession()
    session.queue(_FakeResponse(502, _NO_JSON))
    with pytest.raises(AppError) as exc:
        _client(session, token="t").list_history()
    assert exc.value.message == SERVER_DEFAULT_MESSAGE
    assert exc.value.status == 502


@pytest.mark.parametrize("failure", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_transport_failures_are_connectivity(failure: Exception) -> None:
    session = _FakeSession()
    session.queue(failure)
    with pytest.raises(AppError) as exc:
        _client(session).forgot_password("r@x.io")
    assert exc.value.kind == ErrorKind.CONNECTIVITY
    assert exc.value.message == CONNECTIVITY_MESSAGE


def test_other_request_failures_are_setup() -> None:
    session = _FakeSession()
    session.queue(requests.exceptions.InvalidURL("bad url"))
    with pytest.raises(AppError) as exc:
        _client(session).reset_password("tok", "secret1")
    assert exc.value.kind == ErrorKind.SETUP
    assert exc.value.message == SETUP_MESSAGE


def test_list_history_parses_records() -> None:
    session = _FakeSession()
    session.queue(
        _FakeResponse(
            200,
            [
                {
                    "_id": "r1",
                    "userId": "u1",
                    "sourceText": "Hello",
                    "translatedText": "నమస్కారం",
                    "createdAt": "2026-10-18T09:00:00.000Z",
                },
                "junk",
            ],
        )
    )
    records = _client(session, token="t").list_history()
    assert len(records) == 1
    rec = records[0]
    assert (rec.id, rec.user_id, rec.source_text, rec.translated_text) == ("r1", "u1", "Hello", "నమస్కారం")
    assert rec.created_at is not None
    assert rec.created_at.tzinfo == timezone.utc
    assert rec.created_at.hour == 9


def test_list_history_rejects_non_list() -> None:
    session = _FakeSession()
    session.queue(_FakeResponse(200, {"records": []}))
    with pytest.raises(AppError):
        _client(session, token="t").list_history()


def test_save_translation_accepts_empty_body() -> None:
    session = _FakeSession()
    session.queue(_FakeResponse(201, _NO_JSON))
    rec = _client(session, token="t").save_translation("Hi", "హాయ్")
    assert session.calls[0]["json"] == {"sourceText": "Hi", "translatedText": "హాయ్"}
    assert rec.source_text == "Hi"
    assert rec.translated_text == "హాయ్"


def test_delete_and_clear_paths() -> None:
    session = _FakeSession()
    client = _client(session, token="t")
    client.delete_translation("r7")
    client.clear_history()
    assert [(c["method"], c["url"]) for c in session.calls] == [
        ("DELETE", "http://backend.test/api/history/r7"),
        ("DELETE", "http://backend.test/api/history"),
    ]
