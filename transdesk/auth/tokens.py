from __future__ import annotations

import base64
import binascii
import json
from pathlib import Path
from typing import Any, Optional

from transdesk.app.config import app_paths, load_json_dict, write_json_dict

TOKEN_KEY = "token"


class TokenDecodeError(ValueError):
    pass


def decode_token_claims(token: str) -> dict[str, Any]:
    """
    Read the claims segment of a JWT-shaped token without verifying it.
    Verification is the backend's job; the client only needs `exp`.
    """
    parts = str(token or "").split(".")
    if len(parts) != 3 or not parts[1]:
        raise TokenDecodeError("token is not a three-part JWT")
    segment = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(segment.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise TokenDecodeError("token payload is not base64url JSON") from e
    if not isinstance(claims, dict):
        raise TokenDecodeError("token payload is not a JSON object")
    return claims


def token_expiry(token: str) -> float:
    """Return the `exp` claim in seconds since the epoch."""
    exp = decode_token_claims(token).get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise TokenDecodeError("token has no numeric exp claim")
    return float(exp)


def is_token_expired(token: str, now: float) -> bool:
    return token_expiry(token) * 1000 < now * 1000


class TokenStore:
    """Bearer token persisted under a fixed key in the per-user session file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else app_paths().session_path

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return load_json_dict(self.path)
        except ValueError:
            # Corrupt session file: behave as logged out.
            return {}

    def get(self) -> Optional[str]:
        token = self._load().get(TOKEN_KEY)
        return str(token) if token else None

    def set(self, token: str) -> None:
        payload = self._load()
        payload[TOKEN_KEY] = token
        write_json_dict(self.path, payload)

    def remove(self) -> None:
        payload = self._load()
        if TOKEN_KEY not in payload:
            return
        del payload[TOKEN_KEY]
        write_json_dict(self.path, payload)
