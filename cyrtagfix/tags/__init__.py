"""
cyrtagfix.tags — Tag access on top of mutagen.

Public API:
    open_tag(path) -> OpenTag | None
    text_fields(tag) -> list[TagField]
    apply_fixes(tag, fixes)
    save_tag(tag)
"""
from .reader import OpenTag, TagField, TagReadError, open_tag, text_fields
from .writer import apply_fixes, save_tag

__all__ = [
    "OpenTag",
    "TagField",
    "TagReadError",
    "open_tag",
    "text_fields",
    "apply_fixes",
    "save_tag",
]
