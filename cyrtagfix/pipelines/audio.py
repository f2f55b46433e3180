"""
audio — Repairing mojibake in the text fields of an audio file's tag.

Two phases: every field is checked and the fixes are collected first; only
then is the file backed up and the tag rewritten.
"""
from __future__ import annotations
from pathlib import Path
from typing import List
import structlog
from mutagen import MutagenError
from rich.console import Console
from rich.markup import escape

from ..backup import BackupManager, BackupError
from ..mojibake import DEFAULT_THRESHOLD, fix_mojibake
from ..tags import OpenTag, TagField, TagReadError, open_tag, text_fields, apply_fixes, save_tag

log = structlog.get_logger()
console = Console(highlight=False)


def collect_fixes(tag: OpenTag, threshold: float = DEFAULT_THRESHOLD) -> List[TagField]:
    """One TagField per repaired key, holding that key's complete new value list."""
    fixes: List[TagField] = []
    for fld in text_fields(tag):
        new_values = []
        changed = False
        for value in fld.values:
            fixed = fix_mojibake(value, threshold)
            if fixed is None:
                new_values.append(value)
                continue
            console.print(f"  [cyan]FIX[/cyan] {escape(fld.key)}: '{escape(value)}' -> '{escape(fixed)}'")
            new_values.append(fixed)
            changed = True
        if changed:
            fixes.append(TagField(fld.key, new_values))
    return fixes


def process_audio(
    path: str | Path,
    backup_manager: BackupManager,
    threshold: float = DEFAULT_THRESHOLD,
) -> bool:
    """Repair the tag of one audio file. Returns True if the file was rewritten."""
    path = Path(path)
    try:
        tag = open_tag(path)
    except TagReadError as e:
        log.error("tag_read_failed", path=str(path), error=str(e.error))
        return False
    if tag is None:
        return False

    fixes = collect_fixes(tag, threshold)
    if not fixes:
        return False

    try:
        backup_manager.backup_file(path)
    except BackupError as e:
        log.error("backup_failed", path=str(path), error=str(e.error))
        return False

    apply_fixes(tag, fixes)
    try:
        save_tag(tag)
    except (MutagenError, OSError) as e:
        log.error("tag_save_failed", path=str(path), error=str(e))
        return False

    console.print("  [green]→ tags updated[/green]")
    return True
