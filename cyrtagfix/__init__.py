"""cyrtagfix — repairs cp1251 Cyrillic mojibake in audio tags and .cue sheets."""

__version__ = "0.1.0"
