"""
reader — Opening an audio file's tag and listing its text fields (mutagen).
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator, List, Optional
import structlog
from mutagen import File as MutagenFile, MutagenError
# base of every Vorbis comment type (FLAC, Ogg Vorbis/Opus/FLAC/Speex); mutagen
# documents it but exports it from no public module
from mutagen._vorbis import VCommentDict
from mutagen.apev2 import APEv2, APENoHeaderError, TEXT
from mutagen.id3 import ID3, TextFrame, TimeStampTextFrame
from mutagen.mp4 import MP4Tags

log = structlog.get_logger()

KIND_ID3 = "id3"
KIND_VORBIS = "vorbis"
KIND_MP4 = "mp4"
KIND_APE = "ape"


class TagReadError(Exception):
    """The file could not be parsed as an audio container."""

    def __init__(self, path: str | Path, error: object):
        self.path = Path(path)
        self.error = error
        super().__init__(f"cannot read tags of {path}: {error}")


@dataclass
class OpenTag:
    """
    A tag picked for repair.

    ``owner`` is the mutagen FileType when the tag is the container's primary
    one (saving goes through it); None for a secondary tag such as APEv2,
    which saves itself.
    """
    path: Path
    kind: str
    tags: Any
    owner: Any = None


@dataclass
class TagField:
    key: str
    values: List[str] = field(default_factory=list)


def _tag_kind(tags: Any) -> Optional[str]:
    if isinstance(tags, ID3):
        return KIND_ID3
    if isinstance(tags, VCommentDict):
        return KIND_VORBIS
    if isinstance(tags, MP4Tags):
        return KIND_MP4
    if isinstance(tags, APEv2):
        return KIND_APE
    return None


def _first_secondary_tag(path: Path) -> Optional[APEv2]:
    try:
        return APEv2(path)
    except APENoHeaderError:
        return None


def open_tag(path: str | Path) -> Optional[OpenTag]:
    """
    Open ``path`` and pick the tag to work on.

    The container's primary tag wins; without one, the first secondary tag
    (APEv2) is used. Returns None when the file carries no usable tag.
    Raises TagReadError when mutagen can't parse the file.
    """
    path = Path(path)
    try:
        audio = MutagenFile(path)
        if audio is None:
            raise TagReadError(path, "unrecognised audio format")

        if audio.tags is not None:
            kind = _tag_kind(audio.tags)
            if kind is None:
                log.warning("tag_type_unsupported", path=str(path), tag=type(audio.tags).__name__)
                return None
            return OpenTag(path=path, kind=kind, tags=audio.tags, owner=audio)

        ape = _first_secondary_tag(path)
    except (MutagenError, OSError) as e:
        raise TagReadError(path, e) from e

    if ape is None:
        return None
    return OpenTag(path=path, kind=KIND_APE, tags=ape)


def _id3_fields(id3: ID3) -> Iterator[TagField]:
    for frame in id3.values():
        # timestamps are ID3TimeStamp objects, not free text
        if not isinstance(frame, TextFrame) or isinstance(frame, TimeStampTextFrame):
            continue
        yield TagField(frame.HashKey, [str(t) for t in frame.text])


def _vorbis_fields(comment: VCommentDict) -> Iterator[TagField]:
    seen = set()
    for key, _ in comment:
        lower = key.lower()
        if lower in seen:
            continue
        seen.add(lower)
        yield TagField(lower, list(comment[lower]))


def _mp4_fields(tags: MP4Tags) -> Iterator[TagField]:
    for key, values in tags.items():
        # cpil, pgap and pcst hold a bare bool
        if isinstance(values, list) and values and all(isinstance(v, str) for v in values):
            yield TagField(key, list(values))


def _ape_fields(ape: APEv2) -> Iterator[TagField]:
    for key, value in ape.items():
        if value.kind == TEXT:
            yield TagField(key, list(value))


_FIELD_READERS = {
    KIND_ID3: _id3_fields,
    KIND_VORBIS: _vorbis_fields,
    KIND_MP4: _mp4_fields,
    KIND_APE: _ape_fields,
}


def text_fields(tag: OpenTag) -> List[TagField]:
    """All text-valued fields of the tag, as a snapshot safe to iterate."""
    return list(_FIELD_READERS[tag.kind](tag.tags))
