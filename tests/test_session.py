from __future__ import annotations

from pathlib import Path

import pytest

from voicecmd.command_mapper import CommandMapper
from voicecmd.last_output import load_last_transcription
from voicecmd.session import (
    NO_MATCH_MESSAGE,
    STATUS_FAILED,
    STATUS_IDLE,
    STATUS_TRANSCRIBING,
    AssistantSession,
)
from voicecmd.transcriber import TranscriptionError
from voicecmd.transcription_result import Transcription


class _FakeRecorder:
    def __init__(self, tmp_path: Path):
        self.output_path = tmp_path / "recording.wav"
        self.is_recording = False
        self.events: list[str] = []

    def start(self) -> Path:
        self.is_recording = True
        self.events.append("start")
        return self.output_path

    def stop(self) -> Path:
        self.is_recording = False
        self.events.append("stop")
        return self.output_path

    def cleanup(self) -> None:
        self.events.append("cleanup")


class _FakeTranscriber:
    def __init__(self, text: str = "open the config file", error: Exception | None = None):
        self.text = text
        self.error = error
        self.files: list[str] = []

    def transcribe(self, audio_file: str) -> Transcription:
        self.files.append(audio_file)
        if self.error is not None:
            raise self.error
        return Transcription(text=self.text, language="en")


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _session(tmp_path, llm, host, *, mode="regular", transcriber=None, response=None, clipboard=None):
    completions = llm.FakeCompletions(
        response
        or llm.function_call({"command": "workbench.action.quickOpen", "args": {"filename": "config"}})
    )
    mapper = CommandMapper(host, client=llm.client(completions))
    return AssistantSession(
        host=host,
        recorder=_FakeRecorder(tmp_path),
        transcriber=transcriber or _FakeTranscriber(),
        mapper=mapper,
        recording_mode=mode,
        clock=_Clock(),
        clipboard=clipboard,
    )


def test_regular_mode_starts_then_processes_on_second_toggle(isolated_home, tmp_path, llm, fake_host) -> None:
    session = _session(tmp_path, llm, fake_host)

    assert session.toggle_recording() is None
    assert session.is_recording
    assert session.recorder.events == ["start"]

    outcome = session.toggle_recording()

    assert outcome is not None
    assert outcome.transcription.text == "open the config file"
    assert outcome.mapping.to_dict() == {
        "command": "workbench.action.quickOpen",
        "args": {"filename": "config"},
    }
    assert session.recorder.events == ["start", "stop"]
    assert fake_host.executed == [("workbench.action.quickOpen", {"filename": "config"})]
    assert not session.is_recording
    assert not session.is_transcribing

    saved = load_last_transcription()
    assert saved is not None
    assert saved.transcription.text == "open the config file"
    assert saved.mapping == outcome.mapping


def test_testing_mode_processes_immediately(isolated_home, tmp_path, llm, fake_host) -> None:
    session = _session(tmp_path, llm, fake_host, mode="testing")

    outcome = session.toggle_recording()

    assert outcome is not None and outcome.mapping is not None
    assert session.recorder.events == []
    assert session.transcriber.files == [str(session.recorder.output_path)]


def test_toggle_is_ignored_while_transcribing(isolated_home, tmp_path, llm, fake_host) -> None:
    session = _session(tmp_path, llm, fake_host)
    session.is_transcribing = True

    assert session.toggle_recording() is None
    assert session.recorder.events == []


def test_transcription_failure_is_reported(isolated_home, tmp_path, llm, fake_host) -> None:
    transcriber = _FakeTranscriber(error=TranscriptionError("Transcription failed: 401"))
    session = _session(tmp_path, llm, fake_host, mode="testing", transcriber=transcriber)

    outcome = session.toggle_recording()

    assert outcome is not None
    assert outcome.transcription is None
    assert outcome.mapping is None
    assert fake_host.errors == ["Transcription failed: 401"]
    assert fake_host.executed == []
    assert not session.is_transcribing


def test_short_transcription_executes_nothing(isolated_home, tmp_path, llm, fake_host) -> None:
    session = _session(tmp_path, llm, fake_host, mode="testing", transcriber=_FakeTranscriber(text="uh"))

    outcome = session.toggle_recording()

    assert outcome is not None
    assert outcome.mapping is None
    assert fake_host.executed == []
    assert fake_host.errors == []
    assert fake_host.infos == [NO_MATCH_MESSAGE]


def test_status_text(isolated_home, tmp_path, llm, fake_host) -> None:
    session = _session(tmp_path, llm, fake_host)
    assert session.status_text() == STATUS_IDLE

    session.start_recording()
    assert session.status_text(now=100.0 + 65) == "$(stop) 1:05"

    session.is_recording = False
    session.is_transcribing = True
    assert session.status_text() == STATUS_TRANSCRIBING


def test_close_cleans_up(isolated_home, tmp_path, llm, fake_host) -> None:
    session = _session(tmp_path, llm, fake_host)
    session.start_recording()

    session.close()

    assert session.recorder.events == ["start", "cleanup"]
    assert not session.is_recording
    assert session.status_text() == STATUS_IDLE


def test_unknown_recording_mode_is_rejected(tmp_path, llm, fake_host) -> None:
    with pytest.raises(ValueError):
        _session(tmp_path, llm, fake_host, mode="forever")


class _FakeClipboard:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.texts: list[str] = []

    def __call__(self, text: str) -> tuple[bool, str | None]:
        self.texts.append(text)
        return (True, None) if self.ok else (False, "No clipboard tool found")


def test_transcription_is_copied_to_clipboard(isolated_home, tmp_path, llm, fake_host) -> None:
    clipboard = _FakeClipboard()
    session = _session(tmp_path, llm, fake_host, mode="testing", clipboard=clipboard)

    session.toggle_recording()

    assert clipboard.texts == ["open the config file"]
    assert fake_host.executed == [("workbench.action.quickOpen", {"filename": "config"})]


def test_unmatched_transcription_is_still_copied(isolated_home, tmp_path, llm, fake_host) -> None:
    clipboard = _FakeClipboard()
    session = _session(tmp_path, llm, fake_host, mode="testing", response=llm.text(), clipboard=clipboard)

    outcome = session.toggle_recording()

    assert outcome is not None and outcome.mapping is None
    assert clipboard.texts == ["open the config file"]
    assert fake_host.infos == [NO_MATCH_MESSAGE]


def test_clipboard_failure_is_only_logged(isolated_home, tmp_path, llm, fake_host, caplog) -> None:
    session = _session(tmp_path, llm, fake_host, mode="testing", clipboard=_FakeClipboard(ok=False))

    with caplog.at_level("WARNING", logger="voicecmd.session"):
        outcome = session.toggle_recording()

    assert outcome is not None and outcome.mapping is not None
    assert fake_host.errors == []
    assert "No clipboard tool found" in caplog.text
    assert load_last_transcription() is not None


def test_failed_transcription_shows_error_status_for_three_seconds(isolated_home, tmp_path, llm, fake_host) -> None:
    transcriber = _FakeTranscriber(error=TranscriptionError("Transcription failed: 500"))
    clipboard = _FakeClipboard()
    session = _session(tmp_path, llm, fake_host, mode="testing", transcriber=transcriber, clipboard=clipboard)

    session.toggle_recording()

    assert session.status_text() == STATUS_FAILED
    assert session.status_text(now=100.0 + 2.9) == STATUS_FAILED
    assert session.status_text(now=100.0 + 3.0) == STATUS_IDLE
    assert clipboard.texts == []


def test_successful_cycle_clears_error_status(isolated_home, tmp_path, llm, fake_host) -> None:
    transcriber = _FakeTranscriber(error=TranscriptionError("Transcription failed: 500"))
    session = _session(tmp_path, llm, fake_host, mode="testing", transcriber=transcriber)
    session.toggle_recording()
    assert session.status_text() == STATUS_FAILED

    transcriber.error = None
    session.toggle_recording()

    assert session.status_text() == STATUS_IDLE
