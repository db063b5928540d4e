"""Transcript files, asset lists and JSON artifacts on disk."""

import json
import logging
import os
import tempfile

from transcript_markup.constants import ASSET_SIDECAR_SUFFIX, AUDIO_EXTENSIONS
from transcript_markup.models import Segment

logger = logging.getLogger(__name__)


def load_transcript(path: str) -> str:
    """Read raw transcript text exactly as stored."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def save_transcript(path: str, text: str) -> str:
    """Atomically replace the transcript file with new raw text.

    Returns the path written.
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".transcript-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    return path


def segments_to_dicts(segments: list[Segment]) -> list[dict]:
    """JSON-ready view of parsed segments."""
    result = []
    for index, seg in enumerate(segments):
        entry = {
            "index": index,
            "kind": seg.kind,
            "start": seg.start,
            "end": seg.end,
            "display": seg.display,
        }
        if seg.meta is not None:
            entry["meta"] = {
                "file": seg.meta.file,
                "start": seg.meta.start,
                "duration": seg.meta.duration,
            }
        result.append(entry)
    return result


def write_artifact(path: str, data) -> str:
    """Write a JSON artifact. Returns path to the written file."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return path


def load_artifact(path: str):
    """Read JSON artifact. Returns None if file doesn't exist."""
    if not os.path.exists(path):
        return None
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def load_asset_list(transcript_path: str) -> list[str]:
    """Load the <transcript>.assets.json sidecar if it exists.

    Accepts a JSON list of links or {"audio_links": [...]}. Returns an
    empty list if the sidecar is missing or malformed.
    """
    base = os.path.splitext(transcript_path)[0]
    sidecar = base + ASSET_SIDECAR_SUFFIX
    try:
        data = load_artifact(sidecar)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Malformed asset list: %s, ignoring it", sidecar)
        return []
    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("audio_links", [])
    if not isinstance(data, list):
        logger.warning("Asset list %s is not a list, ignoring it", sidecar)
        return []
    return [str(link) for link in data if link]


def scan_asset_dir(asset_dir: str) -> list[str]:
    """Audio files directly inside asset_dir, sorted by name."""
    if not asset_dir or not os.path.isdir(asset_dir):
        return []
    return sorted(
        os.path.join(asset_dir, name)
        for name in os.listdir(asset_dir)
        if name.lower().endswith(AUDIO_EXTENSIONS)
    )
