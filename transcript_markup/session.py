"""Host adapters that drive the markup engine for one transcript.

The engine functions are stateless; a session owns the last accepted raw
text, the current selection, the hover menu and the playback controller,
and persists edits after an idle window.
"""

import functools
import logging
import threading

from transcript_markup.constants import SAVE_DEBOUNCE_SECONDS
from transcript_markup.hover import HoverMenu
from transcript_markup.models import (
    AUDIO,
    HIGHLIGHT,
    OP_CLEAR,
    OP_EDIT,
    OP_HIGHLIGHT,
    TEXT,
    AudioConfig,
    LogicalRange,
    Segment,
    Selection,
)
from transcript_markup.mutations import (
    apply_audio_mark,
    apply_highlight,
    clear_annotation,
    edit_audio_mark,
)
from transcript_markup.parser import audio_config_of, parse_transcript
from transcript_markup.selection import (
    available_actions,
    resolve_segment,
    resolve_selection,
    selection_from_offsets,
)

logger = logging.getLogger(__name__)


class TranscriptSession:
    """Shared behaviour of every surface that shows an annotated transcript."""

    def __init__(
        self,
        text: str,
        persist,
        player=None,
        read_only: bool = False,
        debounce: float = SAVE_DEBOUNCE_SECONDS,
        timer_factory=threading.Timer,
    ):
        self._text = text
        self._persist = persist
        self.player = player
        self.read_only = read_only
        self.debounce = debounce
        self._timer_factory = timer_factory
        self._save_timer = None
        self._save_generation = 0
        self._lock = threading.Lock()
        self.selection: LogicalRange | None = None
        self.hover = HoverMenu(read_only=read_only, timer_factory=timer_factory)

    @property
    def text(self) -> str:
        return self._text

    @property
    def segments(self) -> list[Segment]:
        # Always from the last accepted text; never reuse an older parse.
        return parse_transcript(self._text)

    @property
    def has_pending_save(self) -> bool:
        return self._save_timer is not None

    # --- Selection ---

    def select(self, selection: Selection | None) -> LogicalRange | None:
        if self.read_only:
            self.selection = None
        else:
            self.selection = resolve_selection(self._text, self.segments, selection)
        return self.selection

    def select_offsets(self, start: int, end: int) -> LogicalRange | None:
        """Select by raw offsets, as a plain textarea reports them."""
        return self.select(selection_from_offsets(self.segments, start, end))

    def select_segment(self, index: int) -> LogicalRange | None:
        self.selection = None if self.read_only else resolve_segment(self.segments, index)
        return self.selection

    def actions(self) -> tuple[str, ...]:
        return available_actions(self.selection)

    def clear_selection(self):
        self.selection = None

    # --- Mutations ---

    def _accept(self, new_text: str) -> bool:
        self.selection = None
        if new_text == self._text:
            return False
        with self._lock:
            self._text = new_text
            self._schedule_save()
        return True

    def _schedule_save(self):
        if self._save_timer is not None:
            self._save_timer.cancel()
        self._save_generation += 1
        callback = functools.partial(self._on_save_timer, self._save_generation)
        self._save_timer = self._timer_factory(self.debounce, callback)
        self._save_timer.daemon = True
        self._save_timer.start()

    def _on_save_timer(self, generation: int):
        with self._lock:
            if generation != self._save_generation:
                return
        self.flush()

    def flush(self):
        """Persist the current text now and drop any pending save."""
        with self._lock:
            if self._save_timer is None:
                return
            self._save_timer.cancel()
            self._save_timer = None
            text = self._text
        self._persist(text)

    def _mutate(self, fn, *args) -> bool:
        if self.read_only or self.selection is None:
            return False
        return self._accept(fn(self._text, self.selection, *args))

    def highlight(self) -> bool:
        return self._mutate(apply_highlight)

    def mark_audio(self, config: AudioConfig | None = None) -> bool:
        return self._mutate(apply_audio_mark, config)

    def edit_audio(self, config: AudioConfig | None = None) -> bool:
        return self._mutate(edit_audio_mark, config)

    def clear(self) -> bool:
        return self._mutate(clear_annotation)

    def replace_text(self, new_text: str) -> bool:
        """Accept a whole new text from free-text edit mode."""
        if self.read_only:
            return False
        return self._accept(new_text)

    def edit_form_defaults(self) -> AudioConfig | None:
        """Values to pre-fill when editing the selected audio cue."""
        if self.selection is None or self.selection.kind != AUDIO:
            return None
        for seg in self.segments:
            if seg.start == self.selection.start and seg.end == self.selection.end:
                return audio_config_of(seg)
        return None

    # --- Hover ---

    def hover_action(self, action: str) -> AudioConfig | None:
        """Run "clear" or "edit" for the hovered segment.

        "clear" applies immediately. "edit" selects the cue and returns
        its current settings; the caller then confirms with edit_audio().
        """
        index = self.hover.take()
        if index is None:
            return None
        self.select_segment(index)
        if action == OP_CLEAR:
            self.clear()
            return None
        if action == OP_EDIT:
            return self.edit_form_defaults()
        logger.debug("Unknown hover action: %s", action)
        return None

    # --- Playback ---

    def play(self, index: int):
        segments = self.segments
        if self.player is None or not 0 <= index < len(segments):
            return None
        seg = segments[index]
        if seg.kind != AUDIO:
            return None
        return self.player.play_segment(seg)

    def close(self):
        self.hover.dismiss()
        self.flush()
        if self.player is not None:
            self.player.stop()


class TranscriptEditor(TranscriptSession):
    """Full transcript editor: highlight, audio cues, edit and clear."""


class ListeningCard(TranscriptSession):
    """Listening practice card: only highlights are authored here."""

    def wrap_selection(self, start: int, end: int) -> bool:
        """Highlight the raw [start, end) range picked in the card's textarea."""
        rng = self.select_offsets(start, end)
        if rng is None or rng.kind != TEXT:
            self.selection = None
            return False
        return self.highlight()

    def actions(self) -> tuple[str, ...]:
        if self.selection is None:
            return ()
        if self.selection.kind == TEXT:
            return (OP_HIGHLIGHT,)
        if self.selection.kind == HIGHLIGHT:
            return (OP_CLEAR,)
        return ()

    def mark_audio(self, config: AudioConfig | None = None) -> bool:
        return False

    def edit_audio(self, config: AudioConfig | None = None) -> bool:
        return False
