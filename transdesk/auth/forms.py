from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from transdesk.errors import AppError

MIN_PASSWORD_LENGTH = 6
MISSING_RESET_TOKEN = "Reset token is missing. Please try again or request a new password reset link."
PASSWORDS_DO_NOT_MATCH = "Passwords do not match"
PASSWORD_TOO_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"


@dataclass(frozen=True)
class SignupForm:
    first_name: str
    last_name: str
    email: str
    password: str


def _raise_if_any(errors: dict[str, str]) -> None:
    if errors:
        first = next(iter(errors.values()))
        raise AppError.validation(first, fields=errors)


def split_full_name(name: str) -> tuple[str, str]:
    """First token is the first name; the rest is the last name, or the first name again."""
    parts = str(name or "").strip().split()
    if not parts:
        return "", ""
    first = parts[0]
    last = " ".join(parts[1:]) or first
    return first, last


def validate_login(email: str, password: str) -> tuple[str, str]:
    errors: dict[str, str] = {}
    if not str(email or "").strip():
        errors["email"] = "Email is required"
    if not password:
        errors["password"] = "Password is required"
    _raise_if_any(errors)
    return email.strip(), password


def validate_signup(name: str, email: str, password: str, confirm_password: str) -> SignupForm:
    errors: dict[str, str] = {}
    if not str(name or "").strip():
        errors["name"] = "Name is required"
    if not str(email or "").strip():
        errors["email"] = "Email is required"
    if password != confirm_password:
        errors["confirm_password"] = PASSWORDS_DO_NOT_MATCH
    elif not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = PASSWORD_TOO_SHORT
    _raise_if_any(errors)
    first, last = split_full_name(name)
    return SignupForm(first_name=first, last_name=last, email=email.strip(), password=password)


def validate_forgot_password(email: str) -> str:
    if not str(email or "").strip():
        raise AppError.validation("Please enter your email address", fields={"email": "Email is required"})
    return email.strip()


def validate_reset_password(token: Optional[str], password: str, confirm_password: str) -> tuple[str, str]:
    errors: dict[str, str] = {}
    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = PASSWORD_TOO_SHORT
    if password != confirm_password:
        errors["confirm_password"] = PASSWORDS_DO_NOT_MATCH
    _raise_if_any(errors)
    if not token:
        raise AppError.validation(MISSING_RESET_TOKEN, fields={"token": MISSING_RESET_TOKEN})
    return token, password


def validate_password_change(current_password: str, new_password: str, confirm_password: str) -> tuple[str, str]:
    errors: dict[str, str] = {}
    if not current_password:
        errors["current_password"] = "Current password is required"
    if not new_password:
        errors["new_password"] = "New password is required"
    elif len(new_password) < MIN_PASSWORD_LENGTH:
        errors["new_password"] = PASSWORD_TOO_SHORT
    if new_password != confirm_password:
        errors["confirm_password"] = PASSWORDS_DO_NOT_MATCH
    _raise_if_any(errors)
    return current_password, new_password


def reset_token_from_location(location: str) -> Optional[str]:
    """Pull `token` out of `/reset-password?token=...` or a full reset URL."""
    query = urlsplit(str(location or "")).query
    values = parse_qs(query).get("token") or []
    token = values[0].strip() if values else ""
    return token or None
