"""Microphone capture through an external `sox` process.

This module intentionally does not import any Python audio backend; the sox
binary does the capture and writes a 16 kHz mono WAV file.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Optional

from voicecmd.paths import recording_tmp_dir


logger = logging.getLogger(__name__)

RECORDING_BASENAME = "recording"


class RecorderError(RuntimeError):
    pass


def check_if_installed(command: str) -> bool:
    """Return True if `command --help` runs successfully."""
    try:
        subprocess.run(
            [command, "--help"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=True,
        )
        return True
    except (OSError, subprocess.CalledProcessError):
        return False


def sox_command(output_path: Path) -> list[str]:
    return ["sox", "-d", "-b", "16", "-e", "signed", "-c", "1", "-r", "16k", str(output_path)]


class SoxRecorder:
    """Start/stop a sox recording into the runtime temp dir."""

    def __init__(self, temp_dir: Optional[Path] = None):
        self.temp_dir = Path(temp_dir) if temp_dir is not None else recording_tmp_dir(create=True)
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        self.output_path = self.temp_dir / f"{RECORDING_BASENAME}.wav"
        self._process: Optional[subprocess.Popen] = None

    @property
    def is_recording(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def start(self) -> Path:
        if self.is_recording:
            raise RecorderError("Recording already in progress")
        try:
            self._process = subprocess.Popen(
                sox_command(self.output_path),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise RecorderError(f"Could not start sox: {e}") from e
        logger.info("Recording started (PID: %s) -> %s", self._process.pid, self.output_path)
        return self.output_path

    def stop(self) -> Optional[Path]:
        process = self._process
        if process is None:
            logger.info("No recording process found")
            return None

        logger.info("Stopping recording")
        self._process = None
        process.terminate()
        try:
            _stdout, stderr = process.communicate(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            _stdout, stderr = process.communicate()
        if stderr:
            logger.debug("sox stderr: %s", stderr.strip())
        return self.output_path

    def cleanup(self) -> None:
        if self._process is not None:
            self.stop()
        if self.temp_dir.exists():
            shutil.rmtree(self.temp_dir, ignore_errors=True)
