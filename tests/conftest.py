from __future__ import annotations

import logging
import struct
from pathlib import Path

import pytest
import structlog
from mutagen.apev2 import APEv2
from mutagen.flac import FLAC
from mutagen.id3 import ID3
from mutagen.mp4 import MP4
from mutagen.wave import WAVE

# MPEG-1 Layer III, 128 kbit/s, 44.1 kHz, stereo, no padding
_MPEG_HEADER = b"\xff\xfb\x90\x00"
_MPEG_FRAME_LEN = 417


def _flac_bytes() -> bytes:
    streaminfo = struct.pack(">HH", 4096, 4096) + b"\x00" * 6
    # 20 bits sample rate, 3 bits channels-1, 5 bits bps-1, 36 bits total samples
    packed = (44100 << 44) | (1 << 41) | (15 << 36)
    streaminfo += struct.pack(">Q", packed) + b"\x00" * 16
    header = bytes([0x80]) + len(streaminfo).to_bytes(3, "big")  # last block, STREAMINFO
    return b"fLaC" + header + streaminfo


def _mpeg_bytes(frames: int = 8) -> bytes:
    return (_MPEG_HEADER + b"\x00" * (_MPEG_FRAME_LEN - 4)) * frames


def _atom(name: bytes, data: bytes) -> bytes:
    return struct.pack(">I", 8 + len(data)) + name + data


def _mp4_bytes() -> bytes:
    ftyp = _atom(b"ftyp", b"M4A " + struct.pack(">I", 0) + b"M4A mp42isom")
    # version 0 mvhd: flags, created, modified, timescale, duration, rest zeroed
    mvhd = _atom(b"mvhd", b"\x00" * 12 + struct.pack(">II", 1000, 5000) + b"\x00" * 80)
    return ftyp + _atom(b"moov", mvhd)


def _wav_bytes() -> bytes:
    # PCM, mono, 8 kHz, 16 bit
    fmt = _riff_chunk(b"fmt ", struct.pack("<HHLLHH", 1, 1, 8000, 16000, 2, 16))
    data = _riff_chunk(b"data", b"\x00" * 400)
    body = b"WAVE" + fmt + data
    return b"RIFF" + struct.pack("<I", len(body)) + body


def _riff_chunk(name: bytes, data: bytes) -> bytes:
    return name + struct.pack("<I", len(data)) + data


@pytest.fixture
def make_flac(tmp_path):
    """make_flac(name, {"title": "...", ...}) -> Path; None tags = no Vorbis comment block."""
    def _make(name: str = "track.flac", tags: dict | None = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(_flac_bytes())
        if tags is not None:
            audio = FLAC(path)
            audio.add_tags()
            for key, value in tags.items():
                audio[key] = value if isinstance(value, list) else [value]
            audio.save()
        return path
    return _make


@pytest.fixture
def make_mp3(tmp_path):
    """make_mp3(name, [frames], v2_version=3) -> Path; empty frames = no ID3 tag."""
    def _make(name: str = "track.mp3", frames: list | None = None, v2_version: int = 3) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(_mpeg_bytes())
        if frames:
            id3 = ID3()
            for frame in frames:
                id3.add(frame)
            if v2_version == 3:
                id3.update_to_v23()
            id3.save(path, v2_version=v2_version)
        return path
    return _make


@pytest.fixture
def add_ape():
    def _add(path: Path, items: dict) -> Path:
        ape = APEv2()
        for key, value in items.items():
            ape[key] = value
        ape.save(path)
        return path
    return _add


@pytest.fixture(autouse=True)
def _isolate_logging_and_config(monkeypatch, tmp_path_factory):
    """Keep tests away from the user's config.yaml and undo logging setup."""
    missing = tmp_path_factory.mktemp("cfg") / "config.yaml"
    monkeypatch.setattr("cyrtagfix.config.default_config_path", lambda: missing)

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def make_m4a(tmp_path):
    """make_m4a(name, {"\\xa9nam": [...], "cpil": True, ...}) -> Path; None tags = no ilst."""
    def _make(name: str = "track.m4a", tags: dict | None = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(_mp4_bytes())
        if tags is not None:
            audio = MP4(path)
            audio.add_tags()
            for key, value in tags.items():
                audio[key] = value
            audio.save()
        return path
    return _make


@pytest.fixture
def make_wav(tmp_path):
    """make_wav(name, [frames]) -> Path; empty frames = no id3 chunk."""
    def _make(name: str = "track.wav", frames: list | None = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(_wav_bytes())
        if frames:
            audio = WAVE(path)
            audio.add_tags()
            for frame in frames:
                audio.tags.add(frame)
            audio.save()
        return path
    return _make
