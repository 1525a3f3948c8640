from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence


def _wire_id(payload: dict[str, Any]) -> str:
    # Backend may expose either `id` or a Mongo-style `_id`.
    raw = payload.get("id", payload.get("_id"))
    return "" if raw is None else str(raw)


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class User:
    id: str
    first_name: str
    last_name: str
    email: str

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> "User":
        return cls(
            id=_wire_id(payload),
            first_name=str(payload.get("firstName") or ""),
            last_name=str(payload.get("lastName") or ""),
            email=str(payload.get("email") or ""),
        )


@dataclass(frozen=True)
class AuthPayload:
    token: str
    user: User

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> "AuthPayload":
        return cls(token=str(payload.get("token") or ""), user=User.from_wire(payload.get("user") or {}))


@dataclass(frozen=True)
class TranslationRecord:
    id: str
    user_id: str
    source_text: str
    translated_text: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> "TranslationRecord":
        return cls(
            id=_wire_id(payload),
            user_id=str(payload.get("userId") or ""),
            source_text=str(payload.get("sourceText") or ""),
            translated_text=str(payload.get("translatedText") or ""),
            created_at=parse_timestamp(payload.get("createdAt")),
        )


@dataclass(frozen=True)
class RecognitionResult:
    transcript: str
    is_final: bool = False


@dataclass(frozen=True)
class RecognitionEvent:
    """
    Snapshot of a capture run: every result produced so far, oldest first.
    result_index: first result that changed since the previous event.
    """
    results: Sequence[RecognitionResult]
    result_index: int = 0

    def transcript(self) -> str:
        finals = "".join(r.transcript for r in self.results if r.is_final)
        interim = "".join(r.transcript for r in self.results if not r.is_final)
        return finals + interim
