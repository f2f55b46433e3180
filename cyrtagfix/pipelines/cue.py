"""
cue — Re-encoding cp1251 cue sheets as UTF-8.

A cue sheet is one candidate as a whole: the question is which bytes to read,
not whether individual strings are mojibake, so the scorer is not involved.
"""
from __future__ import annotations
import codecs
from pathlib import Path
import structlog
from rich.console import Console

from ..backup import BackupManager, BackupError
from ..mojibake import LEGACY_ENCODING, decode_legacy

log = structlog.get_logger()
console = Console(highlight=False)

_UNICODE_BOMS = (
    codecs.BOM_UTF32_LE,
    codecs.BOM_UTF32_BE,
    codecs.BOM_UTF16_LE,
    codecs.BOM_UTF16_BE,
)


def is_unicode_text(raw: bytes) -> bool:
    """True for UTF-16/32 with a BOM, or for bytes that are valid UTF-8 (BOM or not)."""
    if raw.startswith(_UNICODE_BOMS):
        return True
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def process_cue(path: str | Path, backup_manager: BackupManager, force_legacy: bool = False) -> bool:
    """
    Rewrite a cp1251 cue sheet as UTF-8. Returns True if the file was rewritten.

    With ``force_legacy`` the bytes are always read as cp1251; otherwise a
    file that is already Unicode text is left alone.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        log.error("cue_read_failed", path=str(path), error=str(e))
        return False

    if force_legacy:
        content, had_errors = decode_legacy(raw)
        if had_errors:
            log.warning("cue_decode_incomplete", path=str(path), encoding=LEGACY_ENCODING)
    elif is_unicode_text(raw):
        return False
    else:
        content, _ = decode_legacy(raw)

    try:
        backup_manager.backup_file(path)
    except BackupError as e:
        log.error("backup_failed", path=str(path), error=str(e.error))
        return False

    try:
        # bytes, so line endings stay exactly as they were
        path.write_bytes(content.encode("utf-8"))
    except OSError as e:
        log.error("cue_write_failed", path=str(path), error=str(e))
        return False

    console.print("  [green]→ .cue saved as UTF-8[/green]")
    return True
