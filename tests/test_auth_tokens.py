from __future__ import annotations

import json
from pathlib import Path

import pytest

from transdesk.auth.tokens import (
    TokenDecodeError,
    TokenStore,
    decode_token_claims,
    is_token_expired,
    token_expiry,
)

from conftest import make_token


def test_decode_token_claims_reads_unpadded_payload() -> None:
    token = make_token({"id": "u1", "exp": 1_800_000_000})
    claims = decode_token_claims(token)
    assert claims["id"] == "u1"
    assert token_expiry(token) == 1_800_000_000.0


def test_expiry_compares_against_now() -> None:
    token = make_token({"exp": 1_000})
    assert is_token_expired(token, now=1_001)
    assert not is_token_expired(token, now=999)
    assert not is_token_expired(token, now=1_000)


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.!!!.c", "a..c"])
def test_malformed_tokens_raise(token: str) -> None:
    with pytest.raises(TokenDecodeError):
        decode_token_claims(token)


def test_missing_exp_raises() -> None:
    with pytest.raises(TokenDecodeError):
        token_expiry(make_token({"id": "u1"}))
    with pytest.raises(TokenDecodeError):
        token_expiry(make_token({"exp": "soon"}))


def test_token_store_set_get_remove(tmp_path: Path) -> None:
    store = TokenStore(tmp_path / "session.json")
    assert store.get() is None

    store.set("tok-1")
    assert store.get() == "tok-1"
    assert json.loads((tmp_path / "session.json").read_text(encoding="utf-8")) == {"token": "tok-1"}

    store.remove()
    assert store.get() is None
    store.remove()


def test_token_store_treats_corrupt_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")
    store = TokenStore(path)
    assert store.get() is None
    store.set("tok-2")
    assert store.get() == "tok-2"
