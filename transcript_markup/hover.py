"""Hover menu for annotated segments, with a cancellable dismiss delay."""

import functools
import threading

from transcript_markup.constants import HOVER_DISMISS_SECONDS
from transcript_markup.models import TEXT

IDLE = "idle"
HOVERING = "hovering"
DISMISSING = "dismissing"


class HoverMenu:
    """Idle -> Hovering(segment) -> Dismissing(timer) -> Idle.

    Leaving a segment does not close the menu at once: the pointer gets
    ``delay`` seconds to reach the menu (or come back) before it closes.
    A dismiss timer that fires after it was cancelled is ignored.
    """

    def __init__(self, delay: float = HOVER_DISMISS_SECONDS, read_only: bool = False,
                 timer_factory=threading.Timer):
        self.delay = delay
        self.read_only = read_only
        self._timer_factory = timer_factory
        self._timer = None
        self._generation = 0
        self._lock = threading.RLock()
        self.state = IDLE
        self.index: int | None = None
        self.kind: str | None = None

    def _cancel(self):
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_dismiss(self):
        self._cancel()
        self.state = DISMISSING
        self._timer = self._timer_factory(self.delay, functools.partial(self._on_timer, self._generation))
        self._timer.daemon = True
        self._timer.start()

    def _on_timer(self, generation: int):
        with self._lock:
            if generation == self._generation:
                self.dismiss()

    def enter(self, index: int, kind: str):
        """Pointer entered an annotated segment."""
        if self.read_only or kind == TEXT:
            return
        with self._lock:
            self._cancel()
            self.state = HOVERING
            self.index = index
            self.kind = kind

    def leave(self):
        with self._lock:
            if self.state == HOVERING:
                self._schedule_dismiss()

    def enter_menu(self):
        with self._lock:
            if self.state == DISMISSING:
                self._cancel()
                self.state = HOVERING

    def leave_menu(self):
        self.leave()

    def dismiss(self):
        with self._lock:
            self._cancel()
            self.state = IDLE
            self.index = None
            self.kind = None

    def take(self) -> int | None:
        """Close the menu and return the segment it was open for."""
        with self._lock:
            index = self.index if self.state != IDLE else None
            self.dismiss()
            return index
