"""
writer — Applying collected field fixes to an open tag and saving it in place.
"""
from __future__ import annotations
from typing import Iterable, List
import structlog
from mutagen.id3 import ID3, Encoding

from .reader import OpenTag, TagField, KIND_ID3

log = structlog.get_logger()


def _id3_major(id3: ID3) -> int:
    """Keep ID3v2.3 tags at 2.3; everything else is written as 2.4."""
    return 3 if tuple(id3.version[:2]) == (2, 3) else 4


def _set_id3(id3: ID3, key: str, values: List[str]) -> None:
    frame = id3[key]
    frame.text = list(values)
    # Latin-1 frames can't hold Cyrillic
    frame.encoding = Encoding.UTF16 if _id3_major(id3) == 3 else Encoding.UTF8


def apply_fixes(tag: OpenTag, fixes: Iterable[TagField]) -> None:
    """Write every fix into the in-memory tag; a later fix for a key wins."""
    for fix in fixes:
        if tag.kind == KIND_ID3:
            _set_id3(tag.tags, fix.key, fix.values)
        else:
            tag.tags[fix.key] = list(fix.values)


def save_tag(tag: OpenTag) -> None:
    """
    Persist the tag into its file in place.

    Raises mutagen.MutagenError / OSError on failure.
    """
    if tag.owner is None:
        tag.tags.save(tag.path)
    elif tag.kind == KIND_ID3:
        major = _id3_major(tag.tags)
        if major == 3:
            tag.tags.update_to_v23()
        tag.owner.save(v2_version=major)
    else:
        tag.owner.save()
    log.debug("tag_saved", path=str(tag.path), kind=tag.kind)
