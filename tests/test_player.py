"""Tests for player module (single active playback, auto-stop)."""

from transcript_markup.models import MODE_AUDIO, MODE_SPEECH, PlayRequest
from transcript_markup.parser import parse_transcript
from transcript_markup.player import PlaybackController

ASSETS = ["https://cdn.example.com/f.mp3"]


def _cue(text):
    return parse_transcript(text)[0]


def test_play_audio_range_schedules_stop(backend, timers):
    """A ranged cue plays from start and stops after its duration."""
    player = PlaybackController(backend, ASSETS, timer_factory=timers)
    played = player.play_segment(_cue("[bye](f.mp3|1|2)"))

    assert played.file == ASSETS[0]
    assert backend.calls == [("play_file", ASSETS[0], 1.0)]
    timer = timers.created[0]
    assert timer.interval == 2.0
    assert timer.daemon and timer.started
    assert player.is_playing

    timer.fire()
    assert backend.calls[-1] == ("stop",)
    assert not player.is_playing


def test_play_without_duration_has_no_timer(backend, timers):
    """Open-ended cues play to the end."""
    player = PlaybackController(backend, ASSETS, timer_factory=timers)
    player.play_segment(_cue("[bye](f.mp3|4)"))
    assert backend.calls == [("play_file", ASSETS[0], 4.0)]
    assert timers.created == []


def test_play_bare_cue_speaks(backend, timers):
    """Cues without a file use speech."""
    player = PlaybackController(backend, timer_factory=timers)
    played = player.play_segment(_cue("[good {morning}]"))
    assert played.mode == MODE_SPEECH
    assert backend.calls == [("speak", "good morning")]


def test_unknown_file_falls_back_to_speech(backend, timers):
    """A file not among the assets is spoken instead."""
    player = PlaybackController(backend, ASSETS, timer_factory=timers)
    played = player.play_segment(_cue("[hi](missing.mp3|0|1)"))
    assert played.mode == MODE_SPEECH
    assert backend.calls == [("speak", "hi")]
    assert timers.created == []


def test_new_play_stops_previous_and_cancels_timer(backend, timers):
    """Only one stream at a time; a stale stop timer never fires."""
    player = PlaybackController(backend, ASSETS, timer_factory=timers)
    player.play_segment(_cue("[a](f.mp3|0|5)"))
    first_timer = timers.created[0]

    player.play(PlayRequest(mode=MODE_SPEECH, text="next"))
    assert first_timer.cancelled
    assert backend.calls == [
        ("play_file", ASSETS[0], 0.0),
        ("stop",),
        ("speak", "next"),
    ]

    first_timer.fire()
    assert backend.calls[-1] == ("speak", "next")
    assert player.is_playing


def test_stop_when_idle_does_nothing(backend):
    """Stopping with nothing playing does not touch the backend."""
    player = PlaybackController(backend)
    player.stop()
    assert backend.calls == []


def test_empty_speech_is_not_played(backend):
    """A request with nothing to say leaves the player idle."""
    player = PlaybackController(backend)
    player.play(PlayRequest(mode=MODE_SPEECH, text=""))
    assert backend.calls == []
    assert not player.is_playing


def test_zero_length_range(backend, timers):
    """A zero duration stops immediately when the timer fires."""
    player = PlaybackController(backend, ASSETS, timer_factory=timers)
    played = player.play(PlayRequest(mode=MODE_AUDIO, text="x", file="f.mp3", start=3.0, stop_at=3.0))
    assert played.stop_at == 3.0
    assert timers.created[0].interval == 0.0


def test_superseded_stop_timer_callback_is_ignored(backend, timers):
    """A stop-at callback already running when a new play starts leaves the new playback alone."""
    player = PlaybackController(backend, ["a.mp3", "b.mp3"], timer_factory=timers)
    player.play(PlayRequest(mode=MODE_AUDIO, text="a", file="a.mp3", start=0.0, stop_at=1.0))
    player.play(PlayRequest(mode=MODE_AUDIO, text="b", file="b.mp3", start=0.0, stop_at=10.0))
    first, second = timers.created

    # Timer.cancel() cannot stop a callback that has already started
    first.function()

    assert player.is_playing
    assert player.current.file == "b.mp3"
    assert backend.calls[-1] == ("play_file", "b.mp3", 0.0)
    assert not second.cancelled

    second.fire()
    assert backend.calls[-1] == ("stop",)
    assert not player.is_playing


def test_stop_timer_callback_after_manual_stop(backend, timers):
    """A stop-at callback racing an explicit stop() does not stop twice."""
    player = PlaybackController(backend, ASSETS, timer_factory=timers)
    player.play_segment(_cue("[bye](f.mp3|1|2)"))
    player.stop()
    timers.created[0].function()
    assert backend.calls.count(("stop",)) == 1
