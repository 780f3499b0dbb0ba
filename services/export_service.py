"""Getting the missing list out of the program: clipboard and text file."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pyperclip
from loguru import logger

from utils.deck import CardRef, missing_filename
from utils.errors import ClipboardUnavailable, FileWriteError


def format_missing(missing: Sequence[CardRef]) -> str:
    """Decklist-style text, one ``<qty> <name>`` per line."""
    return "".join(f"{card}\n" for card in missing)


def copy_to_clipboard(text: str) -> None:
    """
    Put ``text`` on the system clipboard.

    Raises:
        ClipboardUnavailable: no clipboard mechanism is available
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        raise ClipboardUnavailable(f"Clipboard unavailable: {exc}") from exc
    logger.info(f"Copied {len(text.splitlines())} lines to clipboard")


def write_missing_file(
    missing: Sequence[CardRef],
    decklist_path: Path | str | None,
    directory: Path | None = None,
) -> Path:
    """
    Write the missing list next to the decklist (or into ``directory``).

    Raises:
        FileWriteError: the file cannot be written
    """
    if directory is None:
        directory = Path(decklist_path).parent if decklist_path else Path.cwd()
    target = directory / missing_filename(decklist_path)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        target.write_text(format_missing(missing), encoding="utf-8")
    except OSError as exc:
        raise FileWriteError(f"Unable to write {target}: {exc}") from exc
    logger.info(f"Wrote {len(missing)} missing cards to {target}")
    return target


__all__ = ["copy_to_clipboard", "format_missing", "write_missing_file"]
