from __future__ import annotations

import logging
import time
from typing import Any, Optional

import requests

from transdesk.app.logging_setup import log_event
from transdesk.contracts import AuthPayload, TranslationRecord, User
from transdesk.errors import AppError

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_TRANSLATE_URL = "https://languagetranslation-production.up.railway.app/translate"


def _server_message(response: requests.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if message:
            return str(message)
    return None


class ApiClient:
    """
    Single point of HTTP communication with the auth/history backend and the
    external translation endpoint. Every failure leaves as an AppError.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        translate_url: str = DEFAULT_TRANSLATE_URL,
        *,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.base_url = str(base_url or DEFAULT_API_URL).rstrip("/")
        self.translate_url = str(translate_url or DEFAULT_TRANSLATE_URL)
        self.timeout = float(timeout)
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})
        self.logger = logger
        self._token: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    def set_token(self, token: Optional[str]) -> None:
        self._token = token or None

    def _headers(self, auth: bool) -> dict[str, str]:
        if auth and self._token:
            return {"Authorization": f"Bearer {self._token}"}
        return {}

    def _send(
        self,
        method: str,
        url: str,
        *,
        payload: Any = None,
        auth: bool = True,
    ) -> requests.Response:
        t0 = time.perf_counter()
        try:
            response = self.session.request(
                method,
                url,
                json=payload,
                headers=self._headers(auth),
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            log_event(self.logger, logging.WARNING, "api_unreachable", method=method, url=url, detail=str(e))
            raise AppError.connectivity() from e
        except requests.RequestException as e:
            log_event(self.logger, logging.ERROR, "api_setup_failed", method=method, url=url, detail=str(e))
            raise AppError.setup() from e

        ms = round((time.perf_counter() - t0) * 1000.0, 2)
        log_event(
            self.logger,
            logging.INFO,
            "api_request",
            method=method,
            url=url,
            status=response.status_code,
            ms=ms,
        )
        if response.status_code >= 400:
            raise AppError.server(_server_message(response), status=response.status_code)
        return response

    def _request(self, method: str, path: str, *, payload: Any = None, auth: bool = True) -> requests.Response:
        return self._send(method, f"{self.base_url}/{path.lstrip('/')}", payload=payload, auth=auth)

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise AppError.server(None, status=response.status_code) from e

    # Auth
    def register(self, first_name: str, last_name: str, email: str, password: str) -> AuthPayload:
        response = self._request(
            "POST",
            "/auth/register",
            payload={"firstName": first_name, "lastName": last_name, "email": email, "password": password},
            auth=False,
        )
        return AuthPayload.from_wire(self._json(response))

    def login(self, email: str, password: str) -> AuthPayload:
        response = self._request("POST", "/auth/login", payload={"email": email, "password": password}, auth=False)
        return AuthPayload.from_wire(self._json(response))

    def forgot_password(self, email: str) -> None:
        self._request("POST", "/auth/forgot-password", payload={"email": email}, auth=False)

    def reset_password(self, token: str, password: str) -> None:
        self._request("POST", "/auth/reset-password", payload={"token": token, "password": password}, auth=False)

    def me(self) -> User:
        return User.from_wire(self._json(self._request("GET", "/users/me")))

    def update_password(self, current_password: str, new_password: str) -> None:
        self._request(
            "PUT",
            "/users/password",
            payload={"currentPassword": current_password, "newPassword": new_password},
        )

    # Translation
    def translate(self, text: str) -> str:
        body = self._json(self._send("POST", self.translate_url, payload={"text": text}, auth=False))
        if not isinstance(body, dict) or "translatedText" not in body:
            raise AppError.server(None)
        return str(body["translatedText"])

    # History
    def save_translation(self, source_text: str, translated_text: str) -> TranslationRecord:
        response = self._request(
            "POST",
            "/history",
            payload={"sourceText": source_text, "translatedText": translated_text},
        )
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            # Persist confirmed without a body: keep what we sent.
            body = {"sourceText": source_text, "translatedText": translated_text}
        return TranslationRecord.from_wire(body)

    def list_history(self) -> list[TranslationRecord]:
        body = self._json(self._request("GET", "/history"))
        if not isinstance(body, list):
            raise AppError.server(None)
        return [TranslationRecord.from_wire(item) for item in body if isinstance(item, dict)]

    def delete_translation(self, record_id: str) -> None:
        self._request("DELETE", f"/history/{record_id}")

    def clear_history(self) -> None:
        self._request("DELETE", "/history")
