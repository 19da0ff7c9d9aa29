"""Production State Store — pure snapshot transitions and the object that owns the current snapshot.

Every transition takes a ``Production`` and returns a new one; nothing is
mutated in place, so a snapshot handed to a reader never changes under it.
Transitions are synchronous: on the event loop each one is applied as a
single indivisible step, which is what keeps concurrent scene-scoped
handlers from interleaving partial writes to the same scene record.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Optional

from scene_director.config import settings
from scene_director.errors import UnknownSceneError
from scene_director.models.media import (
    VOICE_IDS,
    AspectRatio,
    ImageArtifact,
    NarrationAudio,
)
from scene_director.models.scene import SceneOutput
from scene_director.state.production import (
    GlobalFlag,
    Production,
    Scene,
    SceneFlag,
    find_scene,
)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def new_production(
    aspect_ratio: Optional[str] = None,
    voice: Optional[str] = None,
    thumbnail_prompt: Optional[str] = None,
) -> Production:
    """Return an empty production with every busy flag cleared."""
    return {
        "script": "",
        "scenes": (),
        "scene_generation": 0,
        "style_descriptor": "",
        "style_reference_image": None,
        "aspect_ratio": _valid_aspect_ratio(aspect_ratio or settings.default_aspect_ratio),
        "voice": _valid_voice(voice or settings.default_voice),
        "refine_instructions": "",
        "thumbnail_prompt": (
            settings.default_thumbnail_prompt if thumbnail_prompt is None else thumbnail_prompt
        ),
        "narration": None,
        "thumbnail": None,
        "busy": {flag: False for flag in GlobalFlag},
        "error": None,
    }


def scene_from_output(output: SceneOutput) -> Scene:
    return {
        "scene_number": output.scene_number,
        "duration_estimate": output.duration_estimate,
        "visual_hook": output.visual_hook,
        "viral_score": output.viral_score,
        "rationale": output.rationale,
        "audio_mood": output.audio_mood,
        "sfx_cue": output.sfx_cue,
        "prompt": output.prompt,
        "generated_image": None,
        "busy": {flag: False for flag in SceneFlag},
        "error": None,
    }


def _valid_aspect_ratio(value: str) -> str:
    return AspectRatio(value).value


def _valid_voice(value: str) -> str:
    if value not in VOICE_IDS:
        raise ValueError(f"Unknown voice {value!r}. Expected one of: {', '.join(sorted(VOICE_IDS))}")
    return value


# ---------------------------------------------------------------------------
# Scene-scoped transitions
# ---------------------------------------------------------------------------


def _scene(production: Production, scene_number: int) -> Scene:
    scene = find_scene(production, scene_number)
    if scene is None:
        raise UnknownSceneError(scene_number)
    return scene


def _replace_scene(production: Production, target: Scene, **changes) -> Production:
    """Copy *production* with *target*'s fields replaced."""
    scenes = tuple(
        {**scene, **changes} if scene is target else scene for scene in production["scenes"]
    )
    return {**production, "scenes": scenes}


def replace_scenes(production: Production, outputs: Sequence[SceneOutput]) -> Production:
    """Swap in a freshly segmented scene list. Nothing from the old list survives.

    ``scene_generation`` is bumped so results started against the old list
    can be recognised and dropped.
    """
    numbers = [o.scene_number for o in outputs]
    if len(set(numbers)) != len(numbers):
        raise ValueError(f"Duplicate scene numbers in segmentation: {numbers}")
    return {
        **production,
        "scenes": tuple(scene_from_output(o) for o in outputs),
        "scene_generation": production["scene_generation"] + 1,
    }


def update_scene_prompt(production: Production, scene_number: int, text: str) -> Production:
    scene = _scene(production, scene_number)
    if scene["prompt"] == text:
        return production
    return _replace_scene(production, scene, prompt=text)


def set_scene_busy(
    production: Production, scene_number: int, flag: SceneFlag, value: bool
) -> Production:
    scene = _scene(production, scene_number)
    busy = {**scene["busy"], SceneFlag(flag): value}
    return _replace_scene(production, scene, busy=busy)


def start_scene_operation(production: Production, scene_number: int, flag: SceneFlag) -> Production:
    """Raise one busy flag and drop the scene's previous error together."""
    scene = _scene(production, scene_number)
    busy = {**scene["busy"], SceneFlag(flag): True}
    return _replace_scene(production, scene, busy=busy, error=None)


def apply_enhanced_prompt(production: Production, scene_number: int, text: str) -> Production:
    """Store an enhanced prompt and drop the prompt-busy flag in the same step."""
    scene = _scene(production, scene_number)
    busy = {**scene["busy"], SceneFlag.ENHANCING_PROMPT: False}
    return _replace_scene(production, scene, prompt=text, busy=busy)


def set_scene_image(production: Production, scene_number: int, image: ImageArtifact) -> Production:
    """Store a finished render and drop the image-busy flag in the same step."""
    scene = _scene(production, scene_number)
    busy = {**scene["busy"], SceneFlag.GENERATING_IMAGE: False}
    return _replace_scene(production, scene, generated_image=image, busy=busy)


def set_scene_error(
    production: Production,
    scene_number: int,
    message: str,
    flag: Optional[SceneFlag] = None,
) -> Production:
    """Record a scene-scoped failure.

    *flag* is the busy flag of the operation that failed and is dropped in the
    same step. Without it every busy flag is left as it was.
    """
    scene = _scene(production, scene_number)
    if flag is None:
        return _replace_scene(production, scene, error=message)
    busy = {**scene["busy"], SceneFlag(flag): False}
    return _replace_scene(production, scene, error=message, busy=busy)


def replace_all_prompts(production: Production, prompts: Mapping[int, str]) -> Production:
    """Apply a batch of prompts at once. Every scene number is checked before any is written."""
    for scene_number in prompts:
        _scene(production, scene_number)
    scenes = tuple(
        {**scene, "prompt": prompts[scene["scene_number"]]}
        if scene["scene_number"] in prompts
        else scene
        for scene in production["scenes"]
    )
    return {**production, "scenes": scenes}


# ---------------------------------------------------------------------------
# Production-wide transitions
# ---------------------------------------------------------------------------


def replace_script(production: Production, text: str) -> Production:
    return {**production, "script": text}


def set_busy(production: Production, flag: GlobalFlag, value: bool) -> Production:
    return {**production, "busy": {**production["busy"], GlobalFlag(flag): value}}


def start_operation(production: Production, flag: GlobalFlag) -> Production:
    """Raise a global busy flag and dismiss the current banner."""
    return {**set_busy(production, flag, True), "error": None}


def set_error(production: Production, message: Optional[str]) -> Production:
    return {**production, "error": message}


def set_style(
    production: Production,
    descriptor: str,
    reference_image: Optional[ImageArtifact] = None,
) -> Production:
    """Make *descriptor* the authoritative style. The reference image goes with it."""
    return {
        **production,
        "style_descriptor": descriptor,
        "style_reference_image": reference_image,
    }


def set_style_reference(production: Production, image: ImageArtifact) -> Production:
    return {**production, "style_reference_image": image}


def clear_style(production: Production) -> Production:
    return set_style(production, "", None)


def set_aspect_ratio(production: Production, value: str) -> Production:
    return {**production, "aspect_ratio": _valid_aspect_ratio(value)}


def set_voice(production: Production, value: str) -> Production:
    return {**production, "voice": _valid_voice(value)}


def set_refine_instructions(production: Production, text: str) -> Production:
    return {**production, "refine_instructions": text}


def set_thumbnail_prompt(production: Production, text: str) -> Production:
    return {**production, "thumbnail_prompt": text}


def set_narration(production: Production, audio: NarrationAudio) -> Production:
    return {**production, "narration": audio}


def set_thumbnail(production: Production, image: ImageArtifact) -> Production:
    return {**production, "thumbnail": image}


# ---------------------------------------------------------------------------
# Owning object
# ---------------------------------------------------------------------------


class ProductionStore:
    """Owns the current snapshot for one session and applies transitions to it.

    Handlers receive the store by reference and always read through
    ``snapshot`` at the moment they need a value, never from a copy taken
    before an await.
    """

    def __init__(self, production: Optional[Production] = None):
        self._production = production if production is not None else new_production()

    @property
    def snapshot(self) -> Production:
        return self._production

    def scene(self, scene_number: int) -> Scene:
        return _scene(self._production, scene_number)

    def _apply(self, transition, *args) -> Production:
        self._production = transition(self._production, *args)
        return self._production

    # Scene-scoped
    def replace_scenes(self, outputs: Sequence[SceneOutput]) -> Production:
        return self._apply(replace_scenes, outputs)

    def update_scene_prompt(self, scene_number: int, text: str) -> Production:
        return self._apply(update_scene_prompt, scene_number, text)

    def set_scene_busy(self, scene_number: int, flag: SceneFlag, value: bool) -> Production:
        return self._apply(set_scene_busy, scene_number, flag, value)

    def start_scene_operation(self, scene_number: int, flag: SceneFlag) -> Production:
        return self._apply(start_scene_operation, scene_number, flag)

    def apply_enhanced_prompt(self, scene_number: int, text: str) -> Production:
        return self._apply(apply_enhanced_prompt, scene_number, text)

    def set_scene_image(self, scene_number: int, image: ImageArtifact) -> Production:
        return self._apply(set_scene_image, scene_number, image)

    def set_scene_error(
        self, scene_number: int, message: str, flag: Optional[SceneFlag] = None
    ) -> Production:
        return self._apply(set_scene_error, scene_number, message, flag)

    def replace_all_prompts(self, prompts: Mapping[int, str]) -> Production:
        return self._apply(replace_all_prompts, prompts)

    # Production-wide
    def replace_script(self, text: str) -> Production:
        return self._apply(replace_script, text)

    def set_busy(self, flag: GlobalFlag, value: bool) -> Production:
        return self._apply(set_busy, flag, value)

    def start_operation(self, flag: GlobalFlag) -> Production:
        return self._apply(start_operation, flag)

    def set_error(self, message: Optional[str]) -> Production:
        return self._apply(set_error, message)

    def set_style(
        self, descriptor: str, reference_image: Optional[ImageArtifact] = None
    ) -> Production:
        return self._apply(set_style, descriptor, reference_image)

    def set_style_reference(self, image: ImageArtifact) -> Production:
        return self._apply(set_style_reference, image)

    def clear_style(self) -> Production:
        return self._apply(clear_style)

    def set_aspect_ratio(self, value: str) -> Production:
        return self._apply(set_aspect_ratio, value)

    def set_voice(self, value: str) -> Production:
        return self._apply(set_voice, value)

    def set_refine_instructions(self, text: str) -> Production:
        return self._apply(set_refine_instructions, text)

    def set_thumbnail_prompt(self, text: str) -> Production:
        return self._apply(set_thumbnail_prompt, text)

    def set_narration(self, audio: NarrationAudio) -> Production:
        return self._apply(set_narration, audio)

    def set_thumbnail(self, image: ImageArtifact) -> Production:
        return self._apply(set_thumbnail, image)
