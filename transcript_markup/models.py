"""Data models for annotated transcripts."""

from dataclasses import dataclass

TEXT = "text"
HIGHLIGHT = "highlight"
AUDIO = "audio"
SEGMENT_KINDS = (TEXT, HIGHLIGHT, AUDIO)

OP_HIGHLIGHT = "highlight"
OP_AUDIO = "audio"
OP_EDIT = "edit"
OP_CLEAR = "clear"

MODE_AUDIO = "audio"
MODE_SPEECH = "speech"


@dataclass(frozen=True)
class AudioMeta:
    file: str | None = None
    start: float | None = None       # seconds
    duration: float | None = None    # seconds


@dataclass(frozen=True)
class Segment:
    kind: str          # "text", "highlight" or "audio"
    start: int
    end: int
    raw: str           # rawText[start:end]
    display: str
    meta: AudioMeta | None = None

    @property
    def has_meta(self) -> bool:
        return self.meta is not None


@dataclass(frozen=True)
class AudioConfig:
    """User-entered cue settings; empty string means unset."""

    filename: str = ""
    start: str | float = ""
    duration: str | float = ""


@dataclass(frozen=True)
class LogicalRange:
    start: int
    end: int
    kind: str = TEXT


@dataclass(frozen=True)
class SelectionPoint:
    segment_index: int
    offset: int = 0


@dataclass(frozen=True)
class Selection:
    anchor: SelectionPoint
    focus: SelectionPoint

    @property
    def is_collapsed(self) -> bool:
        return self.anchor == self.focus


@dataclass(frozen=True)
class PlayRequest:
    mode: str                      # "audio" or "speech"
    text: str                      # speech fallback, always set
    file: str | None = None
    start: float = 0.0
    stop_at: float | None = None
