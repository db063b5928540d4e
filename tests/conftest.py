"""Shared fixtures for transcript markup tests."""

import pytest
from pydub.generators import Sine

SAMPLE_TEXT = "Hello {world} and [bye](f.mp3|1|2)."


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function()


class FakeBackend:
    """Records what a PlaybackController asks the audio layer to do."""

    def __init__(self):
        self.calls = []

    def play_file(self, file, start):
        self.calls.append(("play_file", file, start))

    def speak(self, text):
        self.calls.append(("speak", text))

    def stop(self):
        self.calls.append(("stop",))


@pytest.fixture
def timers():
    """Timer factory that keeps every timer it creates."""
    created = []

    def factory(interval, function):
        timer = FakeTimer(interval, function)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def sample_text():
    return SAMPLE_TEXT


@pytest.fixture
def tone_wav(tmp_path):
    """A 3 second 440 Hz WAV file (no ffmpeg needed)."""
    path = tmp_path / "assets" / "lesson one.wav"
    path.parent.mkdir()
    Sine(440).to_audio_segment(duration=3000).export(str(path), format="wav").close()
    return path
