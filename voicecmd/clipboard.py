"""Copy the last transcription to the OS clipboard.

The editor integration always left the recognized text on the clipboard, so
a misheard request can still be pasted by hand.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from typing import Optional


_NO_TOOL_HINT = "Install wl-clipboard (wl-copy) for Wayland or xclip/xsel for X11."


def clipboard_commands() -> list[list[str]]:
    """Candidate clipboard writers for this platform, most specific first."""
    if sys.platform == "darwin":
        return [["pbcopy"]]
    if sys.platform.startswith("win"):
        return [["clip"]]

    wl_copy = ["wl-copy"]
    xclip = ["xclip", "-selection", "clipboard"]
    xsel = ["xsel", "--clipboard", "--input"]
    if (os.environ.get("WAYLAND_DISPLAY") or "").strip():
        return [wl_copy, xclip, xsel]
    if (os.environ.get("DISPLAY") or "").strip():
        return [xclip, xsel, wl_copy]
    return [wl_copy, xclip, xsel]


def copy_to_clipboard(text: str) -> tuple[bool, Optional[str]]:
    """Copy text with the first available clipboard tool (best-effort).

    Returns (ok, error_message).
    """
    for argv in clipboard_commands():
        if not shutil.which(argv[0]):
            continue
        try:
            subprocess.run(argv, input=text or "", text=True, check=True)
        except subprocess.CalledProcessError as e:
            return False, f"{argv[0]} failed (exit {e.returncode})"
        except OSError as e:
            return False, f"{argv[0]} failed: {e}"
        return True, None

    tools = ", ".join(argv[0] for argv in clipboard_commands())
    return False, f"No clipboard tool found ({tools}). {_NO_TOOL_HINT}"
