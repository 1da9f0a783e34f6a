"""Terminal message helpers for the ABVOTE CLI.

Notices go to stderr with emoji→ASCII fallbacks so stdout stays free for
data (test listings, tokens, share links).
"""

import click

GLYPHS = {
    "caution": ("⚠️", "[!]"),  # pragma: no mutate
    "success": ("✅", "[OK]"),  # pragma: no mutate
    "error": ("❌", "[X]"),  # pragma: no mutate
    "info": ("ℹ️", "[i]"),  # pragma: no mutate
}


def _supports_character(character: str) -> bool:
    """Return True if *character* can be encoded on stderr.

    Terminals without UTF-8 would otherwise raise `UnicodeEncodeError`.
    """
    stream = click.get_text_stream("stderr")  # pragma: no mutate
    encoding = getattr(stream, "encoding", None) or "ascii"
    try:
        character.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def glyph(kind: str) -> str:
    """Return the emoji for `kind` ("caution", "success", "error", "info"),
    or its ASCII fallback when stderr cannot encode it."""
    emoji, fallback = GLYPHS[kind]
    return emoji if _supports_character(emoji) else fallback


def warn(msg: str) -> None:
    """Emit a yellow, bold warning line to **stderr**.

    Example:
        ``⚠️  This test already exists``
    """
    click.secho(f"{glyph('caution')}  {msg}", fg="yellow", bold=True, err=True)


def success(msg: str) -> None:
    """Emit a green, bold success line to **stderr**."""
    click.secho(f"{glyph('success')}  {msg}", fg="green", bold=True, err=True)


def error(msg: str) -> None:
    click.secho(f"{glyph('error')}  {msg}", fg="red", bold=True, err=True)


def info(msg: str) -> None:
    click.secho(f"{glyph('info')}  {msg}", err=True)
