"""Tests for selection module (selection → logical range)."""

from transcript_markup.models import (
    AUDIO,
    HIGHLIGHT,
    OP_AUDIO,
    OP_CLEAR,
    OP_EDIT,
    OP_HIGHLIGHT,
    TEXT,
    LogicalRange,
    Selection,
    SelectionPoint,
)
from transcript_markup.mutations import apply_highlight
from transcript_markup.parser import parse_transcript
from transcript_markup.selection import (
    available_actions,
    point_at,
    resolve_segment,
    resolve_selection,
    selection_from_offsets,
)

MIXED = "one {two} three [four](f.mp3) five"
# segments: 0 "one ", 1 {two}, 2 " three ", 3 [four](f.mp3), 4 " five"


def _sel(a_idx, a_off, f_idx, f_off):
    return Selection(SelectionPoint(a_idx, a_off), SelectionPoint(f_idx, f_off))


def test_no_selection():
    """Missing selection resolves to nothing."""
    assert resolve_selection(MIXED, None, None) is None


def test_collapsed_selection():
    """A caret (same point twice) offers no action."""
    assert resolve_selection(MIXED, None, _sel(0, 2, 0, 2)) is None


def test_selection_inside_text_segment():
    """Exact sub-offsets inside one text segment."""
    rng = resolve_selection(MIXED, None, _sel(2, 1, 2, 6))
    assert rng == LogicalRange(10, 15, TEXT)
    assert MIXED[rng.start:rng.end] == "three"


def test_backwards_selection_is_ordered():
    """Focus before anchor still gives start <= end."""
    assert resolve_selection(MIXED, None, _sel(2, 6, 2, 1)) == LogicalRange(10, 15, TEXT)


def test_offsets_are_clamped_to_segment():
    """Offsets past the segment end are clamped."""
    rng = resolve_selection(MIXED, None, _sel(0, 1, 0, 99))
    assert rng == LogicalRange(1, 4, TEXT)


def test_selection_inside_highlight_selects_whole_segment():
    """Selecting within a highlight selects the full highlight."""
    rng = resolve_selection(MIXED, None, _sel(1, 1, 1, 2))
    assert rng == LogicalRange(4, 9, HIGHLIGHT)


def test_selection_inside_audio_selects_whole_segment():
    """Selecting within a cue selects the full cue with its kind."""
    segments = parse_transcript(MIXED)
    rng = resolve_selection(MIXED, segments, _sel(3, 0, 3, 3))
    assert rng == LogicalRange(segments[3].start, segments[3].end, AUDIO)


def test_multi_segment_selection_snaps_to_boundaries():
    """Spanning text and highlight snaps to whole segments as text."""
    rng = resolve_selection(MIXED, None, _sel(0, 2, 2, 3))
    assert rng == LogicalRange(0, 16, TEXT)


def test_multi_segment_selection_with_audio_is_rejected():
    """Any cue among several touched segments rejects the selection."""
    assert resolve_selection(MIXED, None, _sel(2, 1, 4, 2)) is None
    assert resolve_selection(MIXED, None, _sel(4, 2, 3, 0)) is None


def test_out_of_range_segment_index():
    """Endpoints outside the segment list give no range."""
    assert resolve_selection(MIXED, None, _sel(0, 0, 9, 0)) is None


def test_resolve_segment():
    """Explicit segment index maps to its full span."""
    segments = parse_transcript(MIXED)
    assert resolve_segment(segments, 1) == LogicalRange(4, 9, HIGHLIGHT)
    assert resolve_segment(segments, 7) is None


def test_point_at_boundaries():
    """Boundary offsets go to the later segment unless prefer_end."""
    segments = parse_transcript(MIXED)
    assert point_at(segments, 4) == SelectionPoint(1, 0)
    assert point_at(segments, 4, prefer_end=True) == SelectionPoint(0, 4)
    assert point_at(segments, len(MIXED)) is None
    assert point_at(segments, len(MIXED), prefer_end=True) == SelectionPoint(4, 5)


def test_selection_from_offsets_exact_highlight():
    """Raw offsets covering a highlight resolve to that highlight."""
    segments = parse_transcript(MIXED)
    selection = selection_from_offsets(segments, 4, 9)
    assert resolve_selection(MIXED, segments, selection) == LogicalRange(4, 9, HIGHLIGHT)


def test_selection_from_offsets_empty():
    """Equal offsets are not a selection."""
    assert selection_from_offsets(parse_transcript(MIXED), 3, 3) is None


def test_select_word_and_highlight():
    """Selecting "world" in "Hello world" and highlighting gives "Hello {world}"."""
    text = "Hello world"
    segments = parse_transcript(text)
    rng = resolve_selection(text, segments, selection_from_offsets(segments, 6, 11))
    assert apply_highlight(text, rng) == "Hello {world}"


def test_available_actions():
    """Text offers highlight/audio, highlight offers clear, audio offers clear/edit."""
    assert available_actions(None) == ()
    assert available_actions(LogicalRange(0, 1, TEXT)) == (OP_HIGHLIGHT, OP_AUDIO)
    assert available_actions(LogicalRange(0, 1, HIGHLIGHT)) == (OP_CLEAR,)
    assert available_actions(LogicalRange(0, 1, AUDIO)) == (OP_CLEAR, OP_EDIT)
