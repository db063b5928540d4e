"""Single active playback with auto-stop for audio cue ranges."""

import functools
import logging
import threading

from transcript_markup.models import MODE_AUDIO, PlayRequest, Segment
from transcript_markup.playback import bind_to_assets, resolve_playback

logger = logging.getLogger(__name__)


class PlaybackController:
    """Play cue requests through a backend, one stream at a time.

    The backend is any object with ``play_file(file, start)``,
    ``speak(text)`` and ``stop()``. Starting a new request always stops the
    current one and cancels its pending stop-at timer first, so two streams
    never overlap. Each playback gets a new generation number; a stop-at
    callback that was already running when its timer got cancelled sees a
    stale generation and does nothing.
    """

    def __init__(self, backend, assets=(), timer_factory=threading.Timer):
        self.backend = backend
        self.assets = list(assets)
        self._timer_factory = timer_factory
        self._stop_timer = None
        self._generation = 0
        self._lock = threading.Lock()
        self.current: PlayRequest | None = None

    @property
    def is_playing(self) -> bool:
        return self.current is not None

    def _stop_locked(self):
        self._generation += 1
        if self._stop_timer is not None:
            self._stop_timer.cancel()
            self._stop_timer = None
        if self.current is not None:
            self.backend.stop()
            self.current = None

    def stop(self):
        """Stop any playback and drop the pending stop-at timer."""
        with self._lock:
            self._stop_locked()

    def _on_stop_at(self, generation: int):
        with self._lock:
            if generation != self._generation:
                logger.debug("Ignoring stop-at from superseded playback %d", generation)
                return
            self._stop_timer = None
            self._stop_locked()

    def play(self, request: PlayRequest) -> PlayRequest:
        """Start a request; returns it as actually played (maybe as speech)."""
        bound = bind_to_assets(request, self.assets)
        with self._lock:
            self._stop_locked()
            self.current = bound

            if bound.mode != MODE_AUDIO:
                if bound.text:
                    self.backend.speak(bound.text)
                else:
                    self.current = None
                return bound

            self.backend.play_file(bound.file, bound.start)
            if bound.stop_at is not None:
                delay = max(bound.stop_at - bound.start, 0.0)
                callback = functools.partial(self._on_stop_at, self._generation)
                self._stop_timer = self._timer_factory(delay, callback)
                self._stop_timer.daemon = True
                self._stop_timer.start()
        logger.debug("Playing %s from %.2fs (stop at %s)", bound.file, bound.start, bound.stop_at)
        return bound

    def play_segment(self, segment: Segment) -> PlayRequest:
        return self.play(resolve_playback(segment))
