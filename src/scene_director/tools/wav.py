"""WAV container for raw narration samples."""

from __future__ import annotations

import io
import wave

CHANNELS = 1
SAMPLE_WIDTH = 2  # 16-bit
HEADER_SIZE = 44


def pcm_to_wav(samples: bytes, sample_rate: int) -> bytes:
    """Wrap little-endian 16-bit mono PCM in a canonical 44-byte RIFF/WAVE header.

    The result is ``HEADER_SIZE + len(samples)`` bytes long; the RIFF size
    field holds ``36 + len(samples)`` and the data size field ``len(samples)``.
    """
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(CHANNELS)
        wav.setsampwidth(SAMPLE_WIDTH)
        wav.setframerate(sample_rate)
        wav.writeframes(samples)
    return buffer.getvalue()
