"""Logging setup for the voicecmd CLI.

`--debug` beats `VOICECMD_LOG_LEVEL`, which beats the caller's default. The
HTTP stack under the OpenAI SDK logs every request at INFO, so those loggers
stay at WARNING unless debugging.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional


LOG_LEVEL_ENV = "VOICECMD_LOG_LEVEL"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"

_SDK_LOGGERS = ("openai", "httpx", "httpcore")


def _parse_log_level(level: Optional[str], *, default: int) -> int:
    if not level:
        return default
    normalized = str(level).strip().upper()
    if normalized.isdigit():
        # Unicode digits like "²" pass isdigit() but not int().
        try:
            return int(normalized)
        except ValueError:
            return default
    parsed = logging.getLevelName(normalized)
    if isinstance(parsed, int):
        return parsed
    return default


def resolve_log_level(*, debug: bool = False, default_level: int = logging.INFO) -> int:
    if debug:
        return logging.DEBUG
    return _parse_log_level(os.environ.get(LOG_LEVEL_ENV), default=default_level)


def configure_logging(*, debug: bool = False, default_level: int = logging.INFO) -> int:
    """Configure the root logger and return the level in effect."""
    level = resolve_log_level(debug=debug, default_level=default_level)

    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        for handler in root.handlers:
            handler.setLevel(level)
    else:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        root.addHandler(handler)

    sdk_level = logging.DEBUG if debug else max(level, logging.WARNING)
    for name in _SDK_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)
    return level
