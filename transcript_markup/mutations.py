"""Apply annotation edits to raw transcript text.

Every operation takes the raw text and a LogicalRange and returns new raw
text. Characters outside the range are never touched; inside it only the
annotation delimiters change. A request that breaks an operation's
precondition returns the text unchanged, because the host is expected to
only offer actions that apply.
"""

import logging
import re

from transcript_markup.constants import (
    CUE_CLOSE,
    CUE_OPEN,
    HIGHLIGHT_CLOSE,
    HIGHLIGHT_OPEN,
    META_CLOSE,
    META_OPEN,
    META_SEPARATOR,
)
from transcript_markup.parser import parse_transcript
from transcript_markup.models import (
    AUDIO,
    HIGHLIGHT,
    OP_AUDIO,
    OP_CLEAR,
    OP_EDIT,
    OP_HIGHLIGHT,
    TEXT,
    AudioConfig,
    LogicalRange,
)

logger = logging.getLogger(__name__)

_CUE_RE = re.compile(r"\[([^\]]*)\](?:\([^)]*\))?")
_HIGHLIGHT_RE = re.compile(r"\{([^}]*)\}")


def _in_bounds(text: str, rng: LogicalRange) -> bool:
    return 0 <= rng.start < rng.end <= len(text)


def _format_field(value: str | float | int | None) -> str:
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return f"{value:g}"
    return value.strip()


def _unwrap(raw: str) -> str | None:
    """Inner content of a single annotation, or None if raw is not one."""
    match = _HIGHLIGHT_RE.fullmatch(raw) or _CUE_RE.fullmatch(raw)
    if not match:
        return None
    return match.group(1)


def serialize_metadata(config: AudioConfig | None) -> str:
    """Render a cue config as its "(file|start|duration)" suffix.

    The file field is always emitted, start is emitted whenever start or
    duration is set, then trailing empty fields are trimmed:
    file only -> "(a.mp3)", file + duration -> "(a.mp3||3)",
    nothing -> "".
    """
    if config is None:
        return ""
    file = _format_field(config.filename)
    start = _format_field(config.start)
    duration = _format_field(config.duration)

    fields = [file]
    if start or duration:
        fields.append(start)
    if duration:
        fields.append(duration)
    while fields and not fields[-1]:
        fields.pop()

    if not fields:
        return ""
    return META_OPEN + META_SEPARATOR.join(fields) + META_CLOSE


def _build_cue(content: str, config: AudioConfig | None) -> str:
    return CUE_OPEN + content + CUE_CLOSE + serialize_metadata(config)


def _replace(text: str, rng: LogicalRange, annotation: str, kind: str) -> str:
    """Put annotation in place of the range if it re-parses as exactly one segment.

    Reserved characters in the content or metadata, or a literal "(...)"
    right after a bare cue, would otherwise change how the text parses.
    """
    new_text = text[:rng.start] + annotation + text[rng.end:]
    end = rng.start + len(annotation)
    for seg in parse_transcript(new_text):
        if seg.start == rng.start:
            if seg.end == end and seg.kind == kind:
                return new_text
            break
    logger.debug("%r would not re-parse as one %s segment at %d", annotation, kind, rng.start)
    return text


def apply_highlight(text: str, rng: LogicalRange) -> str:
    """Wrap text[start:end] in {}.

    A multi-segment span may already contain highlights; their braces are
    dropped so the result is a single flat highlight.
    """
    if rng.kind != TEXT or not _in_bounds(text, rng):
        logger.debug("Highlight not applicable to %s", rng)
        return text
    inner = parse_transcript(text[rng.start:rng.end])
    if any(seg.kind == AUDIO for seg in inner):
        logger.debug("Highlight would swallow an audio cue: %s", rng)
        return text
    content = "".join(seg.display if seg.kind == HIGHLIGHT else seg.raw for seg in inner)
    return _replace(text, rng, HIGHLIGHT_OPEN + content + HIGHLIGHT_CLOSE, HIGHLIGHT)


def apply_audio_mark(text: str, rng: LogicalRange, config: AudioConfig | None = None) -> str:
    """Wrap a text or highlight range as an audio cue.

    A highlight range is unwrapped first so the cue holds the plain words,
    not the highlight markup.
    """
    if rng.kind == AUDIO or not _in_bounds(text, rng):
        logger.debug("Audio mark not applicable to %s", rng)
        return text
    content = text[rng.start:rng.end]
    if rng.kind == HIGHLIGHT:
        inner = _unwrap(content)
        if inner is None:
            logger.debug("Stale highlight range %s: %r", rng, content)
            return text
        content = inner
    elif any(seg.kind == AUDIO for seg in parse_transcript(content)):
        logger.debug("Audio cues cannot nest: %s", rng)
        return text
    return _replace(text, rng, _build_cue(content, config), AUDIO)


def edit_audio_mark(text: str, rng: LogicalRange, config: AudioConfig | None = None) -> str:
    """Replace an existing cue's metadata, keeping its words."""
    if rng.kind != AUDIO or not _in_bounds(text, rng):
        logger.debug("Audio edit not applicable to %s", rng)
        return text
    match = _CUE_RE.fullmatch(text[rng.start:rng.end])
    if not match:
        logger.debug("Stale audio range %s", rng)
        return text
    return _replace(text, rng, _build_cue(match.group(1), config), AUDIO)


def clear_annotation(text: str, rng: LogicalRange) -> str:
    """Strip a highlight or cue back to its bare words."""
    if rng.kind == TEXT or not _in_bounds(text, rng):
        logger.debug("Clear not applicable to %s", rng)
        return text
    content = _unwrap(text[rng.start:rng.end])
    if content is None:
        logger.debug("Stale annotation range %s", rng)
        return text
    return text[:rng.start] + content + text[rng.end:]


def apply_operation(
    text: str,
    rng: LogicalRange,
    operation: str,
    config: AudioConfig | None = None,
) -> str:
    """Dispatch one of "highlight", "audio", "edit" or "clear"."""
    if operation == OP_HIGHLIGHT:
        return apply_highlight(text, rng)
    if operation == OP_AUDIO:
        return apply_audio_mark(text, rng, config)
    if operation == OP_EDIT:
        return edit_audio_mark(text, rng, config)
    if operation == OP_CLEAR:
        return clear_annotation(text, rng)
    logger.debug("Unknown operation: %s", operation)
    return text
