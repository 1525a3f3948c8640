from __future__ import annotations

import pytest

from transdesk.app.routes import follow_route, resolve_route, split_location
from transdesk.auth.session import AuthStatus

AUTH = AuthStatus.AUTHENTICATED
ANON = AuthStatus.UNAUTHENTICATED


@pytest.mark.parametrize("path", ["/", "/history", "/profile"])
def test_protected_views_redirect_anonymous_to_login(path: str) -> None:
    decision = resolve_route(path, ANON)
    assert decision.redirect == "/login"
    assert not decision.renders


@pytest.mark.parametrize("path", ["/login", "/signup", "/forgot-password", "/reset-password"])
def test_public_only_views_redirect_signed_in_users_home(path: str) -> None:
    assert resolve_route(path, AUTH).redirect == "/"


def test_loading_renders_placeholder_everywhere_known() -> None:
    assert resolve_route("/", AuthStatus.LOADING).view == "loading"
    assert resolve_route("/login", AuthStatus.LOADING).view == "loading"


def test_unknown_path_is_not_found() -> None:
    assert resolve_route("/nope", ANON).view == "not_found"
    assert resolve_route("/nope", AUTH).view == "not_found"


def test_views_render_for_matching_status() -> None:
    assert resolve_route("/", AUTH).view == "translator"
    assert resolve_route("/history/", AUTH).view == "history"
    assert resolve_route("/signup", ANON).view == "signup"


def test_follow_route_resolves_redirect_chain() -> None:
    final, decision = follow_route("/history", ANON)
    assert final == "/login"
    assert decision.view == "login"

    final, decision = follow_route("/login", AUTH)
    assert final == "/"
    assert decision.view == "translator"


def test_reset_link_keeps_query() -> None:
    path, query = split_location("https://app.example/reset-password?token=abc")
    assert path == "/reset-password"
    assert query == {"token": "abc"}
    decision = resolve_route("/reset-password?token=abc", ANON)
    assert decision.view == "reset_password"
    assert decision.query["token"] == "abc"
