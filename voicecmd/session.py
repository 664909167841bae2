"""Record -> transcribe -> map -> execute lifecycle for one user.

All lifecycle state lives on an `AssistantSession` instance; editor
integrations keep one session per window and drive it from their toggle
command and status bar.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from voicecmd.clipboard import copy_to_clipboard
from voicecmd.command_mapper import CommandMapper
from voicecmd.config import RECORDING_MODES
from voicecmd.editor_commands import CommandMapping
from voicecmd.host import CommandHost
from voicecmd.last_output import save_last_transcription
from voicecmd.recorder import RecorderError, SoxRecorder
from voicecmd.transcriber import TranscriptionError, WhisperTranscriber
from voicecmd.transcription_result import Transcription


logger = logging.getLogger(__name__)

STATUS_IDLE = "$(quote)"
STATUS_TRANSCRIBING = "$(loading~spin)"
STATUS_FAILED = "$(error) Transcription failed"

NO_MATCH_MESSAGE = "No command matched."
FAILED_STATUS_SECONDS = 3.0


@dataclass(frozen=True)
class SessionOutcome:
    transcription: Optional[Transcription]
    mapping: Optional[CommandMapping]


class AssistantSession:
    """Owns the recorder, transcriber and mapper for one editor window."""

    def __init__(
        self,
        *,
        host: CommandHost,
        recorder: SoxRecorder,
        transcriber: WhisperTranscriber,
        mapper: CommandMapper,
        recording_mode: str = "regular",
        protocol: str = "functions",
        clock: Callable[[], float] = time.monotonic,
        clipboard: Optional[Callable[[str], tuple[bool, Optional[str]]]] = None,
    ):
        if recording_mode not in RECORDING_MODES:
            raise ValueError(f"Unknown recording mode: {recording_mode!r}")
        self.host = host
        self.recorder = recorder
        self.transcriber = transcriber
        self.mapper = mapper
        self.recording_mode = recording_mode
        self.protocol = protocol
        self._clock = clock
        self._clipboard = clipboard

        self.is_recording = False
        self.is_transcribing = False
        self.recording_started: Optional[float] = None
        self.failed_at: Optional[float] = None

    @classmethod
    def from_config(cls, host: CommandHost) -> "AssistantSession":
        from voicecmd.config import get_mapper_protocol, get_recording_mode

        return cls(
            host=host,
            recorder=SoxRecorder(),
            transcriber=WhisperTranscriber.from_config(),
            mapper=CommandMapper.from_config(host),
            recording_mode=get_recording_mode(),
            protocol=get_mapper_protocol(),
            clipboard=copy_to_clipboard,
        )

    def status_text(self, now: Optional[float] = None) -> str:
        current = self._clock() if now is None else now
        if self.is_recording and self.recording_started is not None:
            elapsed = max(0, int(current - self.recording_started))
            minutes, seconds = divmod(elapsed, 60)
            return f"$(stop) {minutes}:{seconds:02d}"
        if self.is_transcribing:
            return STATUS_TRANSCRIBING
        if self.failed_at is not None and current - self.failed_at < FAILED_STATUS_SECONDS:
            return STATUS_FAILED
        return STATUS_IDLE

    def _copy_to_clipboard(self, text: str) -> None:
        if self._clipboard is None or not text:
            return
        ok, err = self._clipboard(text)
        if not ok:
            logger.warning("Could not copy transcription to clipboard: %s", err)

    def start_recording(self) -> Path:
        path = self.recorder.start()
        self.is_recording = True
        self.recording_started = self._clock()
        return path

    def toggle_recording(self) -> Optional[SessionOutcome]:
        """Start or stop a recording; returns the outcome once one is processed."""
        if self.is_transcribing:
            logger.info("Toggle ignored while transcribing")
            return None

        if self.recording_mode == "testing":
            # No live capture: process whatever the recorder last wrote.
            return self.process_recording()

        if not self.is_recording:
            try:
                self.start_recording()
            except RecorderError as e:
                logger.exception("Could not start recording: %s", e)
                self.host.show_error_message(str(e))
            return None

        self.recorder.stop()
        self.is_recording = False
        return self.process_recording()

    def process_recording(self, audio_file: Optional[str] = None) -> SessionOutcome:
        source = audio_file or str(self.recorder.output_path)
        self.is_recording = False
        self.is_transcribing = True
        self.failed_at = None
        try:
            try:
                transcription = self.transcriber.transcribe(source)
            except TranscriptionError as e:
                logger.exception("Transcription failed for %s: %s", source, e)
                self.failed_at = self._clock()
                self.host.show_error_message(str(e))
                return SessionOutcome(transcription=None, mapping=None)

            mapping = self.mapper.map(transcription, protocol=self.protocol)
            if mapping is not None:
                self.mapper.execute(mapping)
            else:
                self.host.show_info_message(NO_MATCH_MESSAGE)

            self._copy_to_clipboard(transcription.text)

            try:
                save_last_transcription(transcription, mapping)
            except OSError as e:
                logger.warning("Could not save last transcription: %s", e)

            return SessionOutcome(transcription=transcription, mapping=mapping)
        finally:
            self.is_transcribing = False
            self.recording_started = None

    def close(self) -> None:
        self.recorder.cleanup()
        self.is_recording = False
        self.is_transcribing = False
        self.recording_started = None
        self.failed_at = None
