"""Whisper-style transcription against an OpenAI-compatible API."""

from __future__ import annotations

import logging
from typing import Optional

from voicecmd.transcription_result import Transcription

try:
    from openai import OpenAI
except ImportError as e:  # pragma: no cover
    OpenAI = None  # type: ignore[assignment]
    _OPENAI_IMPORT_ERROR = e
else:
    _OPENAI_IMPORT_ERROR = None


logger = logging.getLogger(__name__)


class TranscriptionError(RuntimeError):
    pass


class WhisperTranscriber:
    """Handles transcription using a Whisper model behind an OpenAI-style API."""

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "whisper-1",
        language: Optional[str] = "en",
        client: Optional[object] = None,
    ):
        self.model = model
        self.language = language
        self.base_url = base_url
        if client is None:
            if OpenAI is None:
                raise RuntimeError(
                    "openai is not installed; install it to use transcription "
                    "(e.g. `pip install openai`)"
                ) from _OPENAI_IMPORT_ERROR
            kwargs: dict[str, str] = {"api_key": api_key or ""}
            if base_url:
                kwargs["base_url"] = base_url
            client = OpenAI(**kwargs)
        self.client = client

    @classmethod
    def from_config(cls) -> "WhisperTranscriber":
        from voicecmd.config import get_api_key, get_api_provider, get_base_url, get_language, get_transcribe_model

        provider = get_api_provider()
        return cls(
            api_key=get_api_key(),
            base_url=get_base_url(provider),
            model=get_transcribe_model(provider),
            language=get_language(),
        )

    def transcribe(self, audio_file: str) -> Transcription:
        """Transcribe an audio file, keeping segment timings and language."""
        logger.info("Transcribing %s with %s", audio_file, self.model)
        try:
            with open(audio_file, "rb") as f:
                params = {
                    "file": f,
                    "model": self.model,
                    "response_format": "verbose_json",
                }
                if self.language:
                    params["language"] = self.language
                response = self.client.audio.transcriptions.create(**params)  # type: ignore[attr-defined]
        except Exception as e:
            raise TranscriptionError(f"Transcription failed: {e}") from e

        transcription = Transcription.from_response(response)
        logger.info("Transcription raw: %s", transcription.text)
        return transcription
