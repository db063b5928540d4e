"""Normalize UI selections into logical ranges over the raw text."""

from transcript_markup.models import (
    AUDIO,
    HIGHLIGHT,
    OP_AUDIO,
    OP_CLEAR,
    OP_EDIT,
    OP_HIGHLIGHT,
    TEXT,
    LogicalRange,
    Segment,
    Selection,
    SelectionPoint,
)
from transcript_markup.parser import parse_transcript

_ACTIONS = {
    TEXT: (OP_HIGHLIGHT, OP_AUDIO),
    HIGHLIGHT: (OP_CLEAR,),
    AUDIO: (OP_CLEAR, OP_EDIT),
}


def resolve_segment(segments: list[Segment], index: int) -> LogicalRange | None:
    """Full span of one segment, e.g. for a hover or click on it."""
    if not 0 <= index < len(segments):
        return None
    seg = segments[index]
    return LogicalRange(seg.start, seg.end, seg.kind)


def resolve_selection(
    text: str,
    segments: list[Segment] | None,
    selection: Selection | None,
) -> LogicalRange | None:
    """Map a selection to the range an action would apply to.

    - collapsed or missing selection -> None
    - inside one text segment -> the exact sub-range, kind "text"
    - inside one highlight/audio segment -> that whole segment and its kind
    - across segments -> snapped to whole segments, kind "text", unless an
      audio cue is touched, in which case None (cues cannot nest or merge)
    """
    if selection is None or selection.is_collapsed:
        return None
    if segments is None:
        segments = parse_transcript(text)

    a_idx = selection.anchor.segment_index
    f_idx = selection.focus.segment_index
    if not (0 <= a_idx < len(segments) and 0 <= f_idx < len(segments)):
        return None

    if a_idx == f_idx:
        seg = segments[a_idx]
        if seg.kind != TEXT:
            return LogicalRange(seg.start, seg.end, seg.kind)
        length = seg.end - seg.start
        lo, hi = sorted(
            min(max(point.offset, 0), length)
            for point in (selection.anchor, selection.focus)
        )
        if lo == hi:
            return None
        return LogicalRange(seg.start + lo, seg.start + hi, TEXT)

    lo, hi = sorted((a_idx, f_idx))
    touched = segments[lo:hi + 1]
    if any(seg.kind == AUDIO for seg in touched):
        return None
    return LogicalRange(segments[lo].start, segments[hi].end, TEXT)


def point_at(segments: list[Segment], offset: int, prefer_end: bool = False) -> SelectionPoint | None:
    """Locate a raw-text offset as (segment index, sub-offset).

    On a boundary between two segments the offset belongs to the later one,
    or to the earlier one when ``prefer_end`` is set (the end of a range).
    """
    for i, seg in enumerate(segments):
        if prefer_end:
            inside = seg.start < offset <= seg.end
        else:
            inside = seg.start <= offset < seg.end
        if inside:
            return SelectionPoint(i, offset - seg.start)
    return None


def selection_from_offsets(segments: list[Segment], start: int, end: int) -> Selection | None:
    """Build a Selection from two raw offsets, as a textarea reports them."""
    if start > end:
        start, end = end, start
    if start == end:
        return None
    anchor = point_at(segments, start)
    focus = point_at(segments, end, prefer_end=True)
    if anchor is None or focus is None:
        return None
    return Selection(anchor, focus)


def available_actions(rng: LogicalRange | None) -> tuple[str, ...]:
    """Actions a host should offer for a resolved range."""
    if rng is None:
        return ()
    return _ACTIONS.get(rng.kind, ())
