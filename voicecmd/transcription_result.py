from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


def _field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        value = obj.get(name, default)
    else:
        value = getattr(obj, name, default)
    return default if value is None else value


@dataclass(frozen=True)
class Segment:
    id: int
    seek: int
    start: float
    end: float
    text: str
    tokens: list[int] = field(default_factory=list)
    temperature: float = 0.0

    @classmethod
    def from_response(cls, raw: Any) -> "Segment":
        return cls(
            id=int(_field(raw, "id", 0)),
            seek=int(_field(raw, "seek", 0)),
            start=float(_field(raw, "start", 0.0)),
            end=float(_field(raw, "end", 0.0)),
            text=str(_field(raw, "text", "")),
            tokens=[int(t) for t in _field(raw, "tokens", [])],
            temperature=float(_field(raw, "temperature", 0.0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "seek": self.seek,
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "tokens": list(self.tokens),
            "temperature": self.temperature,
        }


@dataclass(frozen=True)
class Transcription:
    text: str
    segments: list[Segment] = field(default_factory=list)
    language: str = ""

    @classmethod
    def from_response(cls, response: Any) -> "Transcription":
        """Build from a `verbose_json` SDK response object or a plain dict."""
        return cls(
            text=str(_field(response, "text", "")),
            segments=[Segment.from_response(s) for s in _field(response, "segments", [])],
            language=str(_field(response, "language", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "segments": [s.to_dict() for s in self.segments],
            "language": self.language,
        }
