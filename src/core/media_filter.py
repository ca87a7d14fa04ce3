# core/media_filter.py
from __future__ import annotations

from core.utils import file_extension

AUDIO_EXTS = {"mp3", "wav", "flac", "aac", "m4a", "ogg", "opus", "webm"}
VIDEO_EXTS = {"mp4", "mkv", "avi", "mov", "webm"}


def is_audio_file(name: str) -> bool:
    return file_extension(name) in AUDIO_EXTS


def is_video_file(name: str) -> bool:
    return file_extension(name) in VIDEO_EXTS


def is_playable(name: str) -> bool:
    return is_audio_file(name) or is_video_file(name)


def get_file_type(name: str) -> str:
    """'AUDIO' | 'VIDEO' | 'UNKNOWN' (webm counts as audio)."""
    if is_audio_file(name):
        return "AUDIO"
    if is_video_file(name):
        return "VIDEO"
    return "UNKNOWN"
