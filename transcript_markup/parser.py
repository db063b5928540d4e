"""Parse annotated transcript text into display segments."""

import math
import re

from transcript_markup.constants import META_FIELD_COUNT, META_SEPARATOR
from transcript_markup.models import (
    AUDIO,
    HIGHLIGHT,
    TEXT,
    AudioConfig,
    AudioMeta,
    Segment,
)

# Alternation order matters: the metadata form must win over the bare cue
# so "[text](meta)" is not split into "[text]" plus literal "(meta)".
_MARKUP_RE = re.compile(
    r"(?P<highlight>\{(?P<hl_body>[^}]*)\})"
    r"|(?P<cue_meta>\[(?P<cm_body>[^\]]*)\]\((?P<cm_meta>[^)]*)\))"
    r"|(?P<cue>\[(?P<cue_body>[^\]]*)\])"
)

# Highlight braces kept inside an audio cue body
_INNER_HIGHLIGHT_RE = re.compile(r"(\{[^}]*\})")


def _parse_seconds(value: str) -> float | None:
    """Parse a seconds field; empty, non-numeric or non-finite is unset."""
    value = value.strip()
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    if not math.isfinite(seconds):
        return None
    return seconds


def _split_fields(body: str) -> list[str]:
    fields = body.split(META_SEPARATOR)[:META_FIELD_COUNT]
    return fields + [""] * (META_FIELD_COUNT - len(fields))


def parse_metadata(body: str) -> AudioMeta:
    """Parse the inside of a "(file|start|duration)" group.

    Every field may be empty. Positions are significant, so "a.mp3||3"
    means file "a.mp3", no start, 3 seconds of duration.
    """
    file, start, duration = _split_fields(body)
    file = file.strip()
    return AudioMeta(
        file=file or None,
        start=_parse_seconds(start),
        duration=_parse_seconds(duration),
    )


def _segment_from_match(match: re.Match) -> Segment:
    start, end = match.span()
    raw = match.group(0)
    if match.group("highlight") is not None:
        return Segment(HIGHLIGHT, start, end, raw, match.group("hl_body"))
    if match.group("cue_meta") is not None:
        meta = parse_metadata(match.group("cm_meta"))
        return Segment(AUDIO, start, end, raw, match.group("cm_body"), meta)
    return Segment(AUDIO, start, end, raw, match.group("cue_body"))


def parse_transcript(text: str) -> list[Segment]:
    """Split raw transcript text into text, highlight and audio segments.

    Never fails: anything that does not match an annotation form stays
    literal text. The returned spans are contiguous and cover ``text``
    exactly, so joining every ``segment.raw`` gives the input back.
    """
    segments = []
    pos = 0
    for match in _MARKUP_RE.finditer(text):
        if match.start() > pos:
            plain = text[pos:match.start()]
            segments.append(Segment(TEXT, pos, match.start(), plain, plain))
        segments.append(_segment_from_match(match))
        pos = match.end()

    if pos < len(text):
        plain = text[pos:]
        segments.append(Segment(TEXT, pos, len(text), plain, plain))

    return segments


def serialize(segments: list[Segment]) -> str:
    """Rebuild raw text from parsed segments."""
    return "".join(seg.raw for seg in segments)


def split_highlights(display: str) -> list[tuple[bool, str]]:
    """Split cue display text into (is_highlight, text) parts for rendering.

    An audio cue made from a span like "a {b} c" keeps the highlight
    braces inside it; they are shown as highlighted text within the cue.
    """
    parts = []
    for part in _INNER_HIGHLIGHT_RE.split(display):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}") and len(part) >= 2:
            parts.append((True, part[1:-1]))
        else:
            parts.append((False, part))
    return parts


def audio_config_of(segment: Segment) -> AudioConfig | None:
    """Pre-fill values for editing an existing cue, or None without metadata."""
    if segment.kind != AUDIO or not segment.has_meta:
        return None
    # raw ends with "(...)"; reuse the field text as typed, not re-formatted
    body = segment.raw[segment.raw.index("](") + 2:-1]
    file, start, duration = _split_fields(body)
    return AudioConfig(filename=file, start=start, duration=duration)
