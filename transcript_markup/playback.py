"""Resolve audio cues into play requests for an audio player or TTS."""

import logging
import os
import re
from dataclasses import replace
from urllib.parse import unquote

from transcript_markup.models import AUDIO, MODE_AUDIO, MODE_SPEECH, PlayRequest, Segment

logger = logging.getLogger(__name__)

_VIETNAMESE_RE = re.compile(
    r"[àáạảãâầấậẩẫăằắặẳẵèéẹẻẽêềếệểễìíịỉĩòóọỏõôồốộổỗơờớợởỡùúụủũưừứựửữỳýỵỷỹđ]",
    re.IGNORECASE,
)
# Dingbats, private use, misc symbols and the astral emoji planes
_SYMBOL_RE = re.compile(r"[\u2600-\u27BF\uE000-\uF8FF\U0001F000-\U0001FAFF]")


def clean_text_for_tts(text: str) -> str:
    """Strip markup, markdown emphasis and emoji so speech sounds natural."""
    text = re.sub(r"\*+", "", text)
    text = re.sub(r"[{}\[\]<>]", "", text)
    text = text.replace("—", ", ")
    text = _SYMBOL_RE.sub("", text)
    return text.strip()


def detect_language(text: str) -> str:
    """Return "vi" for text with Vietnamese diacritics, else "en"."""
    return "vi" if _VIETNAMESE_RE.search(text) else "en"


def speech_request(text: str) -> PlayRequest:
    """Speak arbitrary text, e.g. a sentence the user clicked."""
    return PlayRequest(mode=MODE_SPEECH, text=clean_text_for_tts(text))


def resolve_playback(segment: Segment) -> PlayRequest:
    """Turn a parsed audio cue into an audio-range or speech request.

    A cue bound to a file plays from ``start`` (default 0) and stops at
    ``start + duration`` when a duration is set. Cues without a file are
    spoken from their display text.
    """
    if segment.kind != AUDIO:
        raise ValueError(f"Not an audio cue: {segment.kind} segment at {segment.start}")

    fallback = clean_text_for_tts(segment.display)
    meta = segment.meta
    if meta is None or not meta.file:
        return speech_request(segment.display)

    start = meta.start if meta.start is not None else 0.0
    stop_at = start + meta.duration if meta.duration is not None else None
    return PlayRequest(
        mode=MODE_AUDIO,
        text=fallback,
        file=meta.file,
        start=start,
        stop_at=stop_at,
    )


def _decoded_name(path: str) -> str:
    return unquote(path.rstrip("/").split("/")[-1])


def match_audio_asset(file: str, assets: list[str]) -> str | None:
    """Find the known asset a cue's file refers to.

    Tries, in order: exact match, asset path ending with the name, then the
    URL-decoded asset filename equal to or containing the decoded name.
    """
    if not file:
        return None
    if file in assets:
        return file
    for asset in assets:
        if asset.endswith(file):
            return asset

    wanted = unquote(os.path.basename(file)) or unquote(file)
    for asset in assets:
        if _decoded_name(asset) == wanted:
            return asset
    for asset in assets:
        if wanted in _decoded_name(asset):
            return asset
    return None


def bind_to_assets(request: PlayRequest, assets: list[str]) -> PlayRequest:
    """Point an audio request at a known asset, or fall back to speech."""
    if request.mode != MODE_AUDIO:
        return request
    asset = match_audio_asset(request.file or "", assets)
    if asset is None:
        logger.info("No audio asset matches %r, speaking %r instead", request.file, request.text)
        return PlayRequest(mode=MODE_SPEECH, text=request.text)
    return replace(request, file=asset)
