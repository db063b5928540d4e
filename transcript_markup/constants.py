"""All magic numbers and configuration constants."""

HIGHLIGHT_OPEN = "{"
HIGHLIGHT_CLOSE = "}"
CUE_OPEN = "["
CUE_CLOSE = "]"
META_OPEN = "("
META_CLOSE = ")"
META_SEPARATOR = "|"
META_FIELD_COUNT = 3                # file|start|duration

SAVE_DEBOUNCE_SECONDS = 1.5         # idle window before persisting edited text
HOVER_DISMISS_SECONDS = 0.6         # hover menu hysteresis before closing

TTS_RETRY_COUNT = 3                 # max retries per TTS clip
TTS_RETRY_BASE_DELAY = 1.0          # seconds, base delay for exponential backoff
TTS_RATE = "-5%"                    # speech rate: slightly slower for learners
TTS_VOICES = {
    "en": "en-US-AriaNeural",
    "vi": "vi-VN-HoaiMyNeural",
}

CLIP_FORMAT = "mp3"                 # export format for cut audio clips
CLIP_BITRATE = "192k"
CLIP_TARGET_DBFS = -20.0            # loudness target for rendered clips
AUDIO_EXTENSIONS = (".mp3", ".wav", ".m4a", ".ogg", ".flac", ".webm")
ASSET_SIDECAR_SUFFIX = ".assets.json"
OUTPUT_DIR = "clips"
VERSION = "0.1.0"
