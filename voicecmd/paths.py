"""Filesystem paths for Voicecmd runtime artifacts.

Recordings and the last-transcription debug dump live in a per-user runtime
directory:

- Prefer `XDG_RUNTIME_DIR` when available.
- Fall back to `/run/user/$UID` when present.
- Finally, fall back to the system temp directory, with a per-user suffix to
  avoid cross-user collisions.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


APP_NAME = "voicecmd"

_PRIVATE_DIR_MODE = 0o700


def _ensure_private_dir(path: Path) -> None:
    """Best-effort ensure a directory is user-private (0700)."""
    try:
        os.chmod(path, _PRIVATE_DIR_MODE)
    except OSError:
        pass


def _user_suffix() -> str:
    getuid = getattr(os, "getuid", None)
    return str(getuid()) if getuid is not None else (os.environ.get("USERNAME") or "user")


def runtime_dir() -> Path:
    """Return the best-available per-user runtime base directory."""
    xdg_runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    if xdg_runtime_dir:
        candidate = Path(xdg_runtime_dir)
        if candidate.exists():
            return candidate

    run_user_dir = Path("/run/user") / _user_suffix()
    if run_user_dir.exists():
        return run_user_dir

    return Path(tempfile.gettempdir())


def runtime_app_dir(*, create: bool = False) -> Path:
    """Return the per-user directory for Voicecmd runtime artifacts."""
    base = runtime_dir()

    tmp_dir = Path(tempfile.gettempdir())
    if base != tmp_dir and (not base.is_dir() or not os.access(base, os.W_OK | os.X_OK)):
        base = tmp_dir
    if base == tmp_dir:
        path = tmp_dir / f"{APP_NAME}-{_user_suffix()}"
    else:
        path = base / APP_NAME

    if create:
        path.mkdir(parents=True, exist_ok=True, mode=_PRIVATE_DIR_MODE)
        _ensure_private_dir(path)

    return path


def recording_tmp_dir(*, create: bool = False) -> Path:
    """Where the recorder writes audio and the debug transcription dump."""
    path = runtime_app_dir(create=create) / "temp"
    if create:
        path.mkdir(parents=True, exist_ok=True, mode=_PRIVATE_DIR_MODE)
        _ensure_private_dir(path)
    return path
