"""
walker — Walking a music folder and dispatching files to the cue/audio fixers.
"""
from __future__ import annotations
import errno
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional
import structlog
from rich.console import Console
from rich.text import Text

from ..backup import BackupManager
from ..mojibake import DEFAULT_THRESHOLD
from .audio import process_audio
from .cue import process_cue

log = structlog.get_logger()
console = Console(highlight=False)

AUDIO_EXTENSIONS = frozenset({"mp3", "flac", "m4a", "mp4", "ogg", "wav"})
CUE_EXTENSIONS = frozenset({"cue"})


class FileKind(str, Enum):
    AUDIO = "audio"
    CUE = "cue"


@dataclass
class RunReport:
    fixed: int = 0
    cue_fixed: int = 0
    audio_fixed: int = 0
    errors: int = 0
    fixed_paths: List[Path] = field(default_factory=list)


def extension_of(path: str | Path) -> str:
    """Lower-cased extension without the dot ('' if there is none)."""
    return Path(path).suffix[1:].lower()


def classify(path: str | Path) -> Optional[FileKind]:
    ext = extension_of(path)
    if ext in CUE_EXTENSIONS:
        return FileKind.CUE
    if ext in AUDIO_EXTENSIONS:
        return FileKind.AUDIO
    return None


def iter_files(
    root: str | Path,
    follow_symlinks: bool = True,
    on_error: Optional[Callable[[OSError], None]] = None,
) -> Iterator[Path]:
    """
    Yield every regular file under ``root`` (``root`` itself if it is a file).

    Unreadable entries are passed to ``on_error`` and skipped. When following
    symlinks, a link back to one of its own parent folders is reported and
    not entered. Other folders reached twice are walked twice.
    """
    def _report(err: OSError) -> None:
        if on_error is not None:
            on_error(err)

    root = Path(root)
    if root.is_file():
        yield root
        return

    # dirpath -> (st_dev, st_ino) of the directory and all its ancestors
    chains = {}
    for dirpath, dirnames, filenames in os.walk(root, onerror=_report, followlinks=follow_symlinks):
        if follow_symlinks:
            try:
                st = os.stat(dirpath)
            except OSError as e:
                _report(e)
                dirnames[:] = []
                continue
            ident = (st.st_dev, st.st_ino)
            chain = chains.get(os.path.dirname(dirpath), frozenset())
            if ident in chain:
                _report(OSError(errno.ELOOP, "symlink points back to a parent folder", dirpath))
                dirnames[:] = []
                continue
            chains[dirpath] = chain | {ident}

        dirnames.sort()
        for name in sorted(filenames):
            p = Path(dirpath) / name
            if not follow_symlinks and p.is_symlink():
                continue
            if p.is_file():
                yield p


def _print_fixed(label: str, style: str, path: Path) -> None:
    line = Text()
    line.append(f"{label:<6}", style=style)
    line.append(f" {path}")
    console.print(line)


def fix_tree(
    root: str | Path,
    backup_manager: BackupManager,
    force_cp1251_cue: bool = False,
    threshold: float = DEFAULT_THRESHOLD,
    follow_symlinks: bool = True,
) -> RunReport:
    """Fix every cue sheet and audio file under ``root``."""
    report = RunReport()

    def _on_error(err: OSError) -> None:
        report.errors += 1
        log.error("walk_failed", path=getattr(err, "filename", None), error=str(err))

    for path in iter_files(root, follow_symlinks=follow_symlinks, on_error=_on_error):
        kind = classify(path)
        if kind is FileKind.CUE:
            if not process_cue(path, backup_manager, force_cp1251_cue):
                continue
            _print_fixed("[CUE]", "magenta", path)
            report.cue_fixed += 1
        elif kind is FileKind.AUDIO:
            if not process_audio(path, backup_manager, threshold):
                continue
            _print_fixed(f"[{extension_of(path).upper()}]", "bright_blue", path)
            report.audio_fixed += 1
        else:
            continue

        report.fixed += 1
        report.fixed_paths.append(path)

    return report
