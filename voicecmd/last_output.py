"""Keep the last transcription and its command mapping on disk for debugging.

Only the most recent cycle is kept. It lives next to the recording in the
runtime temp dir and disappears when the session cleans up.
"""

from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from voicecmd.editor_commands import CommandMapping, CommandMappingError
from voicecmd.paths import recording_tmp_dir
from voicecmd.transcription_result import Transcription


_LAST_FILENAME = "recording.json"
_LAST_VERSION = 1


@dataclass(frozen=True)
class LastTranscription:
    transcription: Transcription
    mapping: Optional[CommandMapping]
    created_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": _LAST_VERSION,
            "created_ms": int(self.created_ms),
            "transcription": self.transcription.to_dict(),
            "mapping": self.mapping.to_dict() if self.mapping is not None else None,
        }


def last_transcription_path(*, create_dir: bool = False) -> Path:
    return recording_tmp_dir(create=create_dir) / _LAST_FILENAME


def _atomic_write(path: Path, content: str) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(content, encoding="utf-8")
    os.replace(tmp_path, path)
    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


def save_last_transcription(
    transcription: Transcription,
    mapping: Optional[CommandMapping] = None,
    *,
    created_ms: Optional[int] = None,
) -> LastTranscription:
    created = int(time.time() * 1000) if created_ms is None else int(created_ms)
    entry = LastTranscription(transcription=transcription, mapping=mapping, created_ms=created)
    path = last_transcription_path(create_dir=True)
    _atomic_write(path, json.dumps(entry.to_dict(), ensure_ascii=False, indent=2) + "\n")
    return entry


def load_last_transcription() -> Optional[LastTranscription]:
    path = last_transcription_path(create_dir=False)
    if not path.exists():
        return None
    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    if not isinstance(parsed, dict) or str(parsed.get("version")) != str(_LAST_VERSION):
        return None

    mapping = None
    raw_mapping = parsed.get("mapping")
    if isinstance(raw_mapping, dict):
        try:
            mapping = CommandMapping.from_arguments(raw_mapping)
        except CommandMappingError:
            mapping = None

    return LastTranscription(
        transcription=Transcription.from_response(parsed.get("transcription") or {}),
        mapping=mapping,
        created_ms=int(parsed.get("created_ms") or 0),
    )


def clear_last_transcription() -> None:
    path = last_transcription_path(create_dir=False)
    path.unlink(missing_ok=True)
