from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from transdesk.auth.session import AuthStatus

HOME = "/"
LOGIN = "/login"

PUBLIC_ONLY_VIEWS: dict[str, str] = {
    "/login": "login",
    "/signup": "signup",
    "/forgot-password": "forgot_password",
    "/reset-password": "reset_password",
}
PROTECTED_VIEWS: dict[str, str] = {
    "/": "translator",
    "/profile": "profile",
    "/history": "history",
}


@dataclass(frozen=True)
class RouteDecision:
    path: str
    view: Optional[str] = None
    redirect: Optional[str] = None
    query: dict[str, str] = field(default_factory=dict)

    @property
    def renders(self) -> bool:
        return self.redirect is None


def split_location(location: str) -> tuple[str, dict[str, str]]:
    parts = urlsplit(str(location or "/"))
    path = parts.path or "/"
    if len(path) > 1:
        path = path.rstrip("/")
    query = {k: v[0] for k, v in parse_qs(parts.query).items() if v}
    return path, query


def resolve_route(location: str, status: AuthStatus) -> RouteDecision:
    path, query = split_location(location)
    if path not in PUBLIC_ONLY_VIEWS and path not in PROTECTED_VIEWS:
        return RouteDecision(path=path, view="not_found", query=query)
    if status == AuthStatus.LOADING:
        return RouteDecision(path=path, view="loading", query=query)

    authenticated = status == AuthStatus.AUTHENTICATED
    if path in PROTECTED_VIEWS:
        if not authenticated:
            return RouteDecision(path=path, redirect=LOGIN)
        return RouteDecision(path=path, view=PROTECTED_VIEWS[path], query=query)

    if authenticated:
        return RouteDecision(path=path, redirect=HOME)
    return RouteDecision(path=path, view=PUBLIC_ONLY_VIEWS[path], query=query)


def follow_route(location: str, status: AuthStatus, max_hops: int = 4) -> tuple[str, RouteDecision]:
    """Resolve redirects until a view renders. Returns the final location too."""
    current = location
    decision = resolve_route(current, status)
    hops = 0
    while decision.redirect is not None and hops < max_hops:
        current = decision.redirect
        decision = resolve_route(current, status)
        hops += 1
    return current, decision
