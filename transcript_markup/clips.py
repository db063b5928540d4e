"""Render play requests to audio files: cut asset ranges or synthesize speech."""

import logging
import os
import re
from urllib.parse import unquote

from pydub import AudioSegment

from transcript_markup.constants import CLIP_BITRATE, CLIP_FORMAT, CLIP_TARGET_DBFS
from transcript_markup.models import AUDIO, MODE_AUDIO, MODE_SPEECH, PlayRequest
from transcript_markup.parser import parse_transcript
from transcript_markup.playback import bind_to_assets, resolve_playback
from transcript_markup.tts import synthesize

logger = logging.getLogger(__name__)


def _slug(text: str, limit: int = 30) -> str:
    slug = re.sub(r"[^a-zA-Z0-9]+", "_", text).strip("_").lower()
    return slug[:limit].rstrip("_") or "cue"


def local_asset_path(asset: str, asset_dir: str | None = None) -> str | None:
    """Map an asset link to a file on disk, or None if there is none."""
    if os.path.isfile(asset):
        return asset
    if asset_dir:
        candidate = os.path.join(asset_dir, unquote(asset.rstrip("/").split("/")[-1]))
        if os.path.isfile(candidate):
            return candidate
    return None


def extract_clip(asset_path: str, start: float = 0.0, stop_at: float | None = None) -> AudioSegment:
    """Load an audio file and cut [start, stop_at) seconds out of it."""
    audio = AudioSegment.from_file(asset_path)
    start_ms = max(int(round(start * 1000)), 0)
    if stop_at is None:
        return audio[start_ms:]
    stop_ms = max(int(round(stop_at * 1000)), start_ms)
    return audio[start_ms:stop_ms]


def normalize_clip(audio: AudioSegment, target_dbfs: float = CLIP_TARGET_DBFS) -> AudioSegment:
    """Adjust loudness towards target_dbfs. Silent clips are left unchanged."""
    if audio.dBFS == float("-inf"):
        return audio
    return audio + (target_dbfs - audio.dBFS)


def locate_request(
    request: PlayRequest,
    assets: list[str] | tuple = (),
    asset_dir: str | None = None,
) -> tuple[PlayRequest, str | None]:
    """Bind a request to a local file, falling back to speech.

    Returns (request as it will be rendered, local source path or None).
    """
    bound = bind_to_assets(request, list(assets))
    if bound.mode != MODE_AUDIO:
        return bound, None
    source = local_asset_path(bound.file, asset_dir)
    if source is None:
        logger.warning("Asset %r is not available locally, using speech", bound.file)
        return PlayRequest(mode=MODE_SPEECH, text=bound.text), None
    return bound, source


def _write_clip(bound: PlayRequest, source: str | None, output_dir: str, stem: str,
                fmt: str, skip_existing: bool) -> str:
    os.makedirs(output_dir, exist_ok=True)
    if bound.mode == MODE_AUDIO:
        output_path = os.path.join(output_dir, f"{stem}_audio.{fmt}")
        if skip_existing and os.path.exists(output_path) and os.path.getsize(output_path) > 0:
            return output_path
        clip = normalize_clip(extract_clip(source, bound.start, bound.stop_at))
        clip.export(output_path, format=fmt, bitrate=CLIP_BITRATE)
        return output_path

    output_path = os.path.join(output_dir, f"{stem}_speech.mp3")
    if skip_existing and os.path.exists(output_path) and os.path.getsize(output_path) > 0:
        return output_path
    return synthesize(bound.text, output_path)


def render_play_request(
    request: PlayRequest,
    output_dir: str,
    stem: str,
    assets: list[str] | tuple = (),
    asset_dir: str | None = None,
    fmt: str = CLIP_FORMAT,
    skip_existing: bool = False,
) -> str:
    """Write the audio a play request describes and return its path.

    Audio requests are cut from the matching asset and named
    ``<stem>_audio.<fmt>``; anything that cannot be found locally falls back
    to speech, written as ``<stem>_speech.mp3``. Raises ValueError when the
    fallback has no words to speak.
    """
    bound, source = locate_request(request, assets, asset_dir)
    if bound.mode == MODE_SPEECH and not bound.text:
        raise ValueError(f"Nothing to play: {request.file or 'no file'} and no words to speak")
    return _write_clip(bound, source, output_dir, stem, fmt, skip_existing)


def render_transcript_cues(
    text: str,
    output_dir: str,
    assets: list[str] | tuple = (),
    asset_dir: str | None = None,
    fmt: str = CLIP_FORMAT,
) -> list[str]:
    """Render every audio cue in a transcript, in order.

    Returns list of output file paths. Prints progress counter; clips that
    already exist are reused, and cues left with nothing to speak after
    asset lookup are skipped.
    """
    cues = [seg for seg in parse_transcript(text) if seg.kind == AUDIO]
    total = len(cues)
    paths = []

    for i, seg in enumerate(cues):
        stem = f"{i:03d}_{_slug(seg.display)}"
        bound, source = locate_request(resolve_playback(seg), assets, asset_dir)
        if bound.mode == MODE_SPEECH and not bound.text:
            print(f"  [skip] Cue {i + 1}/{total}: nothing to speak")
            continue
        print(f"  Rendering cue {i + 1}/{total}: {seg.display[:40]}")
        paths.append(_write_clip(bound, source, output_dir, stem, fmt, skip_existing=True))

    return paths
