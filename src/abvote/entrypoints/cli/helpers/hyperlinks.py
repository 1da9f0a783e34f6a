"""OSC-8 hyperlink utilities for the ABVOTE CLI.

Detects whether the active text stream supports OSC-8 terminal hyperlinks and
renders share links as clickable text, falling back to the plain URL.
"""

import os
import sys
from typing import TextIO

OSC8_TERMINALS = {"apple_terminal", "vscode", "iterm.app", "wezterm", "kitty"}


def supports_osc8(stream: TextIO | None = None) -> bool:
    """Heuristically detect whether `stream` supports OSC-8 hyperlinks.

    Args:
        stream: Text stream to probe; defaults to ``sys.stdout``.

    Notes:
        - Never for non-TTY streams (piped or redirected output).
        - Otherwise an allowlist of terminal identifiers decides.
    """
    stream = stream or sys.stdout
    if not getattr(stream, "isatty", lambda: False)():
        return False
    terminal_program = (os.getenv("TERM_PROGRAM") or "").lower()
    return bool(
        terminal_program in OSC8_TERMINALS
        or os.getenv("WT_SESSION")  # Windows Terminal
        or os.getenv("VTE_VERSION")  # GNOME Terminal, Tilix, etc.
        or os.getenv("TERM", "").startswith(("alacritty", "konsole"))
    )


def hyperlink(url: str, label: str | None = None, stream: TextIO | None = None) -> str:
    """Return `url` as an OSC-8 hyperlink, or as plain text when unsupported.

    Args:
        url: Target URL.
        label: Visible text; defaults to the URL itself.
        stream: Stream the link will be written to (see `supports_osc8`).
    """
    text = label or url
    if not supports_osc8(stream):
        return url if label is None else f"{label} ({url})"
    return f"\x1b]8;;{url}\x07{text}\x1b]8;;\x07"  # OSC 8 ; ; URL BEL
