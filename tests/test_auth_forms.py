from __future__ import annotations

import pytest

from transdesk.auth import forms
from transdesk.errors import AppError, ErrorKind


def _error(fn, *args) -> AppError:
    with pytest.raises(AppError) as exc:
        fn(*args)
    assert exc.value.kind == ErrorKind.VALIDATION
    return exc.value


def test_split_full_name() -> None:
    assert forms.split_full_name("Sita Devi Rao") == ("Sita", "Devi Rao")
    assert forms.split_full_name("  Ravi   Kumar ") == ("Ravi", "Kumar")
    assert forms.split_full_name("Madhu") == ("Madhu", "Madhu")
    assert forms.split_full_name("   ") == ("", "")


def test_login_requires_email_and_password() -> None:
    err = _error(forms.validate_login, "", "")
    assert set(err.fields) == {"email", "password"}
    assert forms.validate_login(" a@b.co ", "pw") == ("a@b.co", "pw")


def test_signup_password_rules() -> None:
    err = _error(forms.validate_signup, "Sita", "s@x.io", "secret1", "secret2")
    assert err.message == forms.PASSWORDS_DO_NOT_MATCH
    assert err.fields == {"confirm_password": forms.PASSWORDS_DO_NOT_MATCH}

    err = _error(forms.validate_signup, "Sita", "s@x.io", "abc", "abc")
    assert err.message == "Password must be at least 6 characters"

    err = _error(forms.validate_signup, "", "", "abcdef", "abcdef")
    assert set(err.fields) == {"name", "email"}


def test_signup_returns_split_form() -> None:
    form = forms.validate_signup("Sita Devi", " s@x.io ", "secret1", "secret1")
    assert (form.first_name, form.last_name, form.email, form.password) == ("Sita", "Devi", "s@x.io", "secret1")


def test_forgot_password_requires_email() -> None:
    err = _error(forms.validate_forgot_password, "  ")
    assert err.message == "Please enter your email address"
    assert forms.validate_forgot_password(" a@b.co ") == "a@b.co"


def test_reset_password_checks_fields_before_token() -> None:
    err = _error(forms.validate_reset_password, None, "abc", "abc")
    assert err.message == forms.PASSWORD_TOO_SHORT

    err = _error(forms.validate_reset_password, None, "secret1", "secret1")
    assert err.message == forms.MISSING_RESET_TOKEN

    err = _error(forms.validate_reset_password, "tok", "secret1", "other12")
    assert err.message == forms.PASSWORDS_DO_NOT_MATCH

    assert forms.validate_reset_password("tok", "secret1", "secret1") == ("tok", "secret1")


def test_password_change_rules() -> None:
    err = _error(forms.validate_password_change, "", "", "")
    assert err.fields["current_password"] == "Current password is required"
    assert err.fields["new_password"] == "New password is required"

    err = _error(forms.validate_password_change, "old", "new", "new")
    assert err.message == forms.PASSWORD_TOO_SHORT

    assert forms.validate_password_change("oldpass", "newpass", "newpass") == ("oldpass", "newpass")


def test_reset_token_from_location() -> None:
    assert forms.reset_token_from_location("/reset-password?token=abc123") == "abc123"
    assert forms.reset_token_from_location("https://app.example/reset-password?token=x%2By") == "x+y"
    assert forms.reset_token_from_location("/reset-password") is None
    assert forms.reset_token_from_location("/reset-password?token=") is None
