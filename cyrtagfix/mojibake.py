"""
mojibake — cp1251 mojibake detection and repair.

"Ëüâèöà ðîêà" is what the cp1251 bytes of "Львица рока" look like when they
are read as Latin-1. Turning the characters back into bytes and decoding those
as cp1251 restores the text; a score over the result decides whether the
repair is trusted.
"""
from __future__ import annotations
import codecs
from typing import Optional, Tuple

LEGACY_ENCODING = "cp1251"

WEIGHT_CYR = 1.0
WEIGHT_DIACRITICS = 0.8
DEFAULT_THRESHOLD = 0.2

# Accented Latin letters of Western European text; seeing them in the original
# lowers the score.
LATIN_DIACRITICS = frozenset("äöüßÄÖÜéèêëáàâåíìîóòôúùû")

_CYR_FIRST = "\u0400"
_CYR_LAST = "\u04ff"


def _cp1252_fallback(exc: UnicodeError):
    """Encode error handler: characters above U+00FF go through cp1252, else '?'."""
    if not isinstance(exc, UnicodeEncodeError):
        raise exc
    chunk = exc.object[exc.start:exc.end]
    return chunk.encode("cp1252", errors="replace"), exc.end


_FALLBACK_HANDLER = "cyrtagfix.cp1252"
codecs.register_error(_FALLBACK_HANDLER, _cp1252_fallback)


def is_cyrillic(ch: str) -> bool:
    return _CYR_FIRST <= ch <= _CYR_LAST


def cyrillic_count(text: str) -> int:
    return sum(1 for ch in text if is_cyrillic(ch))


def has_cyrillic(text: str) -> bool:
    return any(is_cyrillic(ch) for ch in text)


def latin_diacritics_count(text: str) -> int:
    return sum(1 for ch in text if ch in LATIN_DIACRITICS)


def to_legacy_bytes(text: str) -> bytes:
    """
    Map each character back to the single byte it was most likely read from.

    Code points below U+0100 map to the byte of the same value (Latin-1),
    the typographic characters of Windows-1252 map to their cp1252 byte,
    anything else becomes b'?'. Never raises.
    """
    return text.encode("latin-1", errors=_FALLBACK_HANDLER)


def decode_legacy(data: bytes) -> Tuple[str, bool]:
    """Decode cp1251 bytes. Returns (text, had_errors); undefined bytes become U+FFFD."""
    try:
        return data.decode(LEGACY_ENCODING), False
    except UnicodeDecodeError:
        return data.decode(LEGACY_ENCODING, errors="replace"), True


def score_candidate(text: str) -> Tuple[str, float]:
    """Return the cp1251 reading of ``text`` and its score."""
    candidate, _ = decode_legacy(to_legacy_bytes(text))
    candidate = candidate.strip()
    if not candidate:
        return candidate, 0.0

    length = float(len(candidate))
    cyr_ratio = cyrillic_count(candidate) / length
    diacritics_ratio = latin_diacritics_count(text) / length
    score = WEIGHT_CYR * cyr_ratio - WEIGHT_DIACRITICS * diacritics_ratio
    return candidate, score


def fix_mojibake(text: str, threshold: float = DEFAULT_THRESHOLD) -> Optional[str]:
    """
    Return the repaired text when ``text`` is cp1251 mojibake, else None.

    Text that already contains Cyrillic is never touched, and a repair always
    contains Cyrillic, so applying the function to its own output is a no-op.
    """
    if not text or has_cyrillic(text):
        return None

    candidate, score = score_candidate(text)
    if not has_cyrillic(candidate):
        return None
    if score > threshold:
        return candidate
    return None
