"""Snapshot types for one production — scenes, style, voice and global artifacts."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from typing_extensions import TypedDict

from scene_director.models.media import ImageArtifact, NarrationAudio


class SceneFlag(str, Enum):
    """Per-scene busy flags. Independent of each other."""

    GENERATING_IMAGE = "generating_image"
    ENHANCING_PROMPT = "enhancing_prompt"


class GlobalFlag(str, Enum):
    """Production-wide busy flags."""

    SEGMENTING = "segmenting"
    REFINING_SCRIPT = "refining_script"
    ANALYZING_STYLE = "analyzing_style"
    GENERATING_AUDIO = "generating_audio"
    ENHANCING_ALL = "enhancing_all"
    GENERATING_THUMBNAIL = "generating_thumbnail"


class Scene(TypedDict):
    scene_number: int
    duration_estimate: str
    visual_hook: str
    viral_score: int  # 0 - 100
    rationale: str
    audio_mood: str
    sfx_cue: str
    prompt: str
    generated_image: Optional[ImageArtifact]
    busy: dict[SceneFlag, bool]
    error: Optional[str]


class Production(TypedDict):
    """Full in-memory state for one script. Replaced, never mutated in place."""

    script: str
    scenes: tuple[Scene, ...]
    scene_generation: int  # bumped on every segmentation

    # Style
    style_descriptor: str
    style_reference_image: Optional[ImageArtifact]

    # Output settings
    aspect_ratio: str
    voice: str

    # User-editable inputs for one-shot operations
    refine_instructions: str
    thumbnail_prompt: str

    # Global artifacts
    narration: Optional[NarrationAudio]
    thumbnail: Optional[ImageArtifact]

    busy: dict[GlobalFlag, bool]

    # Global error banner
    error: Optional[str]


Phase = Literal["idle", "analyzing", "producing"]


def production_phase(production: Production) -> Phase:
    """Derive the coarse phase shown by the front-end."""
    if production["busy"][GlobalFlag.SEGMENTING]:
        return "analyzing"
    if production["scenes"]:
        return "producing"
    return "idle"


def find_scene(production: Production, scene_number: int) -> Optional[Scene]:
    for scene in production["scenes"]:
        if scene["scene_number"] == scene_number:
            return scene
    return None
