"""Speech fallback via edge-tts with retry logic."""

import asyncio
import logging
import os
import time

import edge_tts

from transcript_markup.constants import TTS_RATE, TTS_RETRY_BASE_DELAY, TTS_RETRY_COUNT, TTS_VOICES
from transcript_markup.playback import clean_text_for_tts, detect_language

logger = logging.getLogger(__name__)


def voice_for(text: str) -> str:
    """Pick a neural voice matching the text's language."""
    return TTS_VOICES.get(detect_language(text), TTS_VOICES["en"])


def synthesize(text: str, output_path: str, voice: str | None = None, rate: str = TTS_RATE) -> str:
    """Speak text into an MP3 file with retry logic.

    Sync wrapper around edge_tts.Communicate(). Retries on network errors,
    HTTP errors, or 0-byte output files, backing off exponentially.
    Returns output_path.
    """
    cleaned = clean_text_for_tts(text)
    if not cleaned:
        raise ValueError(f"Nothing to speak in: {text[:50]!r}")
    voice = voice or voice_for(cleaned)

    last_error = None
    for attempt in range(TTS_RETRY_COUNT):
        try:
            communicate = edge_tts.Communicate(cleaned, voice, rate=rate)
            asyncio.run(communicate.save(output_path))

            if os.path.exists(output_path) and os.path.getsize(output_path) > 0:
                return output_path

            last_error = Exception(f"TTS produced 0-byte file for: {cleaned[:50]}...")
        except Exception as e:
            last_error = e

        logger.warning("TTS attempt %d/%d failed: %s", attempt + 1, TTS_RETRY_COUNT, last_error)
        if attempt < TTS_RETRY_COUNT - 1:
            time.sleep(TTS_RETRY_BASE_DELAY * (2 ** attempt))

    raise last_error
