"""Media artifacts and the fixed catalogues they are produced against."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from typing import Literal


class AspectRatio(str, Enum):
    PORTRAIT = "9:16"
    LANDSCAPE = "16:9"
    SQUARE = "1:1"


@dataclass(frozen=True)
class VoiceOption:
    id: str
    name: str
    gender: Literal["male", "female"]


VOICE_OPTIONS: tuple[VoiceOption, ...] = (
    VoiceOption(id="Kore", name="Stoic Male (Deep)", gender="male"),
    VoiceOption(id="Puck", name="Enthusiastic Youth", gender="male"),
    VoiceOption(id="Fenrir", name="The Storyteller", gender="male"),
    VoiceOption(id="Aoede", name="Soothing Female", gender="female"),
    VoiceOption(id="Leda", name="Professional News", gender="female"),
    VoiceOption(id="Zephyr", name="Friendly Agent", gender="male"),
)

VOICE_IDS = frozenset(v.id for v in VOICE_OPTIONS)


def _data_url(mime_type: str, data: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


@dataclass(frozen=True)
class ImageArtifact:
    """Encoded image bytes as returned by the provider."""

    data: bytes
    mime_type: str = "image/png"

    @property
    def data_url(self) -> str:
        return _data_url(self.mime_type, self.data)


@dataclass(frozen=True)
class PcmAudio:
    """Raw little-endian 16-bit mono samples straight from speech synthesis."""

    samples: bytes
    sample_rate: int


@dataclass(frozen=True)
class NarrationAudio:
    """Playable narration: a WAV container plus what it was synthesized from."""

    wav: bytes
    sample_rate: int
    voice: str

    @property
    def data_url(self) -> str:
        return _data_url("audio/wav", self.wav)
