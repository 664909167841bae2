from __future__ import annotations

from voicecmd.editor_commands import CommandMapping
from voicecmd.last_output import (
    clear_last_transcription,
    last_transcription_path,
    load_last_transcription,
    save_last_transcription,
)
from voicecmd.transcription_result import Transcription


def test_save_and_load_last_transcription(isolated_home) -> None:
    clear_last_transcription()
    assert load_last_transcription() is None

    saved = save_last_transcription(
        Transcription(text="save", language="en"),
        CommandMapping(command="workbench.action.files.save"),
        created_ms=123,
    )
    assert last_transcription_path().exists()

    loaded = load_last_transcription()
    assert loaded == saved

    clear_last_transcription()
    assert load_last_transcription() is None


def test_load_ignores_other_versions(isolated_home) -> None:
    path = last_transcription_path(create_dir=True)
    path.write_text('{"version": 99, "transcription": {"text": "x"}}', encoding="utf-8")
    assert load_last_transcription() is None
