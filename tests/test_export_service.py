"""Tests for exporting the missing list."""

import pyperclip
import pytest

from services import export_service
from services.export_service import copy_to_clipboard, format_missing, write_missing_file
from utils.deck import CardRef
from utils.errors import ClipboardUnavailable, FileWriteError

MISSING = [CardRef("Opt", 2), CardRef("Fire // Ice", 1)]


def test_format_missing():
    assert format_missing(MISSING) == "2 Opt\n1 Fire // Ice\n"
    assert format_missing([]) == ""


def test_copy_to_clipboard(monkeypatch):
    copied = []
    monkeypatch.setattr(export_service.pyperclip, "copy", copied.append)

    copy_to_clipboard("2 Opt\n")

    assert copied == ["2 Opt\n"]


def test_copy_without_clipboard_mechanism(monkeypatch):
    def fail(_text):
        raise pyperclip.PyperclipException("could not find a copy/paste mechanism")

    monkeypatch.setattr(export_service.pyperclip, "copy", fail)

    with pytest.raises(ClipboardUnavailable, match="copy/paste mechanism"):
        copy_to_clipboard("2 Opt\n")


def test_write_missing_next_to_decklist(tmp_path):
    decklist = tmp_path / "Izzet Tempo.txt"

    target = write_missing_file(MISSING, decklist)

    assert target == tmp_path / "missing_Izzet Tempo.txt"
    assert target.read_text(encoding="utf-8") == "2 Opt\n1 Fire // Ice\n"


def test_write_missing_into_directory(tmp_path):
    target = write_missing_file(MISSING, "/decks/tempo.txt", tmp_path / "out")

    assert target == tmp_path / "out" / "missing_tempo.txt"


def test_write_missing_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    with pytest.raises(FileWriteError):
        write_missing_file(MISSING, None, blocker)
