from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

from transdesk.api.client import ApiClient
from transdesk.app.logging_setup import log_event
from transdesk.auth.tokens import TokenDecodeError, TokenStore, is_token_expired
from transdesk.contracts import AuthPayload, User
from transdesk.errors import AppError, ErrorKind

SIGNUP_UNREACHABLE = "Unable to connect to the server. Please check if the server is running and try again."


class AuthStatus(str, Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class AuthSession:
    """
    Process-wide authentication context.

    Owns the bearer token and the current user. Everyone else reads them
    through `status`, `user` and `is_authenticated`; only this class writes
    the token store or the client's bearer header.
    """

    def __init__(
        self,
        api: ApiClient,
        store: TokenStore,
        *,
        clock: Callable[[], float] = time.time,
        logger: logging.Logger | None = None,
    ) -> None:
        self.api = api
        self.store = store
        self.clock = clock
        self.logger = logger
        self._status = AuthStatus.LOADING
        self._user: Optional[User] = None
        self._listeners: list[Callable[[AuthStatus], None]] = []
        self._lock = threading.Lock()

    @property
    def status(self) -> AuthStatus:
        return self._status

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._status == AuthStatus.AUTHENTICATED

    @property
    def loading(self) -> bool:
        return self._status == AuthStatus.LOADING

    def add_listener(self, callback: Callable[[AuthStatus], None]) -> None:
        self._listeners.append(callback)

    def _set_state(self, status: AuthStatus, user: Optional[User]) -> None:
        with self._lock:
            changed = status != self._status or user != self._user
            self._status = status
            self._user = user
        if changed:
            log_event(self.logger, logging.INFO, "auth_state", status=status.value)
            for callback in list(self._listeners):
                callback(status)

    def _discard_token(self) -> None:
        self.store.remove()
        self.api.set_token(None)

    def _adopt(self, payload: AuthPayload) -> User:
        self.store.set(payload.token)
        self.api.set_token(payload.token)
        self._set_state(AuthStatus.AUTHENTICATED, payload.user)
        return payload.user

    def initialize(self) -> AuthStatus:
        """Hydrate from the stored token. Never raises."""
        token = self.store.get()
        if not token:
            self._set_state(AuthStatus.UNAUTHENTICATED, None)
            return self._status

        try:
            expired = is_token_expired(token, self.clock())
        except TokenDecodeError:
            log_event(self.logger, logging.WARNING, "auth_token_undecodable")
            expired = True
        if expired:
            log_event(self.logger, logging.INFO, "auth_token_expired")
            self._discard_token()
            self._set_state(AuthStatus.UNAUTHENTICATED, None)
            return self._status

        self.api.set_token(token)
        try:
            user = self.api.me()
        except AppError as e:
            log_event(self.logger, logging.WARNING, "auth_profile_failed", kind=e.kind.value, detail=e.message)
            self._discard_token()
            self._set_state(AuthStatus.UNAUTHENTICATED, None)
            return self._status

        self._set_state(AuthStatus.AUTHENTICATED, user)
        return self._status

    def login(self, email: str, password: str) -> User:
        payload = self.api.login(email, password)
        return self._adopt(payload)

    def signup(self, first_name: str, last_name: str, email: str, password: str) -> User:
        try:
            payload = self.api.register(first_name, last_name, email, password)
        except AppError as e:
            if e.kind == ErrorKind.CONNECTIVITY:
                raise AppError.connectivity(SIGNUP_UNREACHABLE) from e
            raise
        return self._adopt(payload)

    def logout(self) -> None:
        self._discard_token()
        self._set_state(AuthStatus.UNAUTHENTICATED, None)

    def forgot_password(self, email: str) -> None:
        self.api.forgot_password(email)

    def reset_password(self, token: str, password: str) -> None:
        self.api.reset_password(token, password)

    def update_password(self, current_password: str, new_password: str) -> None:
        self.api.update_password(current_password, new_password)
