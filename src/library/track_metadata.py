# src/library/track_metadata.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Tuple

from mutagen import File as MutagenFile
from mutagen.flac import FLAC
from mutagen.id3 import ID3, ID3NoHeaderError
from mutagen.mp4 import MP4
from mutagen.oggopus import OggOpus
from mutagen.oggvorbis import OggVorbis
from mutagen import MutagenError

from core.models import Track

logger = logging.getLogger(__name__)

# Where taggers usually keep lyrics. Read only: tag editing lives elsewhere.
VORBIS_SYNCED_KEY = "LYRICS"
VORBIS_PLAIN_KEY = "UNSYNCEDLYRICS"
ID3_SYNCED_DESC = "LYRICS"
MP4_PLAIN_KEY = "\xa9lyr"
MP4_SYNCED_KEY = "----:com.lrclib:LYRICS"

_VORBIS_CLASSES = {".flac": FLAC, ".ogg": OggVorbis, ".oga": OggVorbis, ".opus": OggOpus}


def _norm(s) -> Optional[str]:
    if s is None:
        return None
    s2 = str(s).strip()
    return s2 or None


def _first(tags, key: str) -> Optional[str]:
    v = tags.get(key)
    if not v:
        return None
    if isinstance(v, (list, tuple)):
        return _norm(v[0]) if v else None
    return _norm(v)


def read_sidecar_lyrics(path: str) -> Tuple[Optional[str], Optional[str]]:
    """(txt, lrc) from song.txt / song.lrc next to the audio file."""
    base, _ = os.path.splitext(path)
    found = []
    for ext in (".txt", ".lrc"):
        side = base + ext
        text = None
        if os.path.isfile(side):
            try:
                with open(side, "r", encoding="utf-8", errors="replace") as f:
                    text = f.read()
            except OSError as e:
                logger.warning("Cannot read sidecar %s: %s", side, e)
        found.append(_norm(text))
    return found[0], found[1]


def read_embedded_lyrics(path: str) -> Tuple[Optional[str], Optional[str]]:
    """
    (plain, synced) lyrics stored inside the audio file.

      - MP3: first USLT frame (plain), TXXX:LYRICS (synced)
      - FLAC/Ogg/Opus: UNSYNCEDLYRICS / LYRICS vorbis comments
      - M4A/MP4: '\xa9lyr' (plain), custom '----:com.lrclib:LYRICS' atom (synced)
    """
    ext = Path(path).suffix.lower()
    plain = None
    synced = None

    try:
        if ext == ".mp3":
            try:
                tags = ID3(path)
            except ID3NoHeaderError:
                return None, None
            uslt = tags.getall("USLT")
            if uslt:
                plain = getattr(uslt[0], "text", None)
            for frame in tags.getall("TXXX"):
                if getattr(frame, "desc", "") == ID3_SYNCED_DESC:
                    text = frame.text
                    synced = text[0] if isinstance(text, (list, tuple)) and text else text
                    break

        elif ext in _VORBIS_CLASSES:
            audio = _VORBIS_CLASSES[ext](path)
            plain = _first(audio, VORBIS_PLAIN_KEY)
            synced = _first(audio, VORBIS_SYNCED_KEY)

        elif ext in {".m4a", ".mp4"}:
            audio = MP4(path)
            plain = _first(audio, MP4_PLAIN_KEY)
            atom = audio.get(MP4_SYNCED_KEY)
            if isinstance(atom, (list, tuple)) and atom:
                first = atom[0]
                if isinstance(first, (bytes, bytearray)):
                    synced = bytes(first).decode("utf-8", errors="replace")
                else:
                    synced = str(first)
    except (MutagenError, OSError) as e:
        logger.debug("No embedded lyrics in %s: %s", path, e)
        return None, None

    return _norm(plain), _norm(synced)


def read_track(path: str) -> Track:
    """
    Metadata for a queued file. Unreadable or untagged files still produce a
    Track, titled after the file name.
    """
    file_name = os.path.basename(path)
    title = artist = album = None
    duration = 0.0

    try:
        audio = MutagenFile(path, easy=True)
    except (MutagenError, OSError) as e:
        logger.debug("Cannot read tags from %s: %s", path, e)
        audio = None

    if audio is not None:
        tags = audio.tags or {}
        title = _first(tags, "title")
        artist = _first(tags, "artist")
        album = _first(tags, "album")
        length = getattr(getattr(audio, "info", None), "length", None)
        if length:
            duration = float(length)

    # SIDE-CAR (preferred) then EMBEDDED
    txt_sidecar, lrc_sidecar = read_sidecar_lyrics(path)
    txt_embedded, lrc_embedded = (None, None)
    if audio is not None:
        txt_embedded, lrc_embedded = read_embedded_lyrics(path)

    return Track(
        file_path=path,
        file_name=file_name,
        title=title or os.path.splitext(file_name)[0],
        artist=artist or "Unknown Artist",
        album=album or "Unknown Album",
        duration=duration,
        lrc_lyrics=lrc_sidecar or lrc_embedded,
        txt_lyrics=txt_sidecar or txt_embedded,
    )
