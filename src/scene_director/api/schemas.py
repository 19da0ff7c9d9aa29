"""Request/Response schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from scene_director.state.production import Production, Scene, SceneFlag, production_phase


class SessionCreateRequest(BaseModel):
    script: str = ""
    aspect_ratio: Optional[str] = None
    voice: Optional[str] = None


class SessionCreateResponse(BaseModel):
    session_id: str


class ScriptUpdateRequest(BaseModel):
    script: str


class SettingsUpdateRequest(BaseModel):
    aspect_ratio: Optional[str] = Field(default=None, description="'9:16', '16:9' or '1:1'")
    voice: Optional[str] = Field(default=None, description="Voice id from /voices")
    refine_instructions: Optional[str] = None
    thumbnail_prompt: Optional[str] = None


class PromptUpdateRequest(BaseModel):
    prompt: str


class StyleQueryRequest(BaseModel):
    query: str


class OperationResponse(BaseModel):
    session_id: str
    operation: str
    status: str = "started"


class VoiceResponse(BaseModel):
    id: str
    name: str
    gender: str


class SceneResponse(BaseModel):
    scene_number: int
    duration_estimate: str
    visual_hook: str
    viral_score: int
    rationale: str
    audio_mood: str
    sfx_cue: str
    prompt: str
    generated_image: Optional[str] = None  # data URL
    is_generating_image: bool
    is_enhancing_prompt: bool
    error: Optional[str] = None

    @classmethod
    def from_scene(cls, scene: Scene) -> "SceneResponse":
        image = scene["generated_image"]
        return cls(
            scene_number=scene["scene_number"],
            duration_estimate=scene["duration_estimate"],
            visual_hook=scene["visual_hook"],
            viral_score=scene["viral_score"],
            rationale=scene["rationale"],
            audio_mood=scene["audio_mood"],
            sfx_cue=scene["sfx_cue"],
            prompt=scene["prompt"],
            generated_image=image.data_url if image is not None else None,
            is_generating_image=scene["busy"][SceneFlag.GENERATING_IMAGE],
            is_enhancing_prompt=scene["busy"][SceneFlag.ENHANCING_PROMPT],
            error=scene["error"],
        )


class ProductionResponse(BaseModel):
    session_id: str
    phase: str  # "idle" | "analyzing" | "producing"
    script: str
    scenes: list[SceneResponse]
    style_descriptor: str
    style_reference_image: Optional[str] = None  # data URL
    aspect_ratio: str
    voice: str
    refine_instructions: str
    thumbnail_prompt: str
    narration_url: Optional[str] = None
    thumbnail: Optional[str] = None  # data URL
    busy: dict[str, bool]
    error: Optional[str] = None

    @classmethod
    def from_production(cls, session_id: str, production: Production) -> "ProductionResponse":
        reference = production["style_reference_image"]
        thumbnail = production["thumbnail"]
        return cls(
            session_id=session_id,
            phase=production_phase(production),
            script=production["script"],
            scenes=[SceneResponse.from_scene(s) for s in production["scenes"]],
            style_descriptor=production["style_descriptor"],
            style_reference_image=reference.data_url if reference is not None else None,
            aspect_ratio=production["aspect_ratio"],
            voice=production["voice"],
            refine_instructions=production["refine_instructions"],
            thumbnail_prompt=production["thumbnail_prompt"],
            narration_url=(
                f"/api/v1/sessions/{session_id}/narration.wav"
                if production["narration"] is not None
                else None
            ),
            thumbnail=thumbnail.data_url if thumbnail is not None else None,
            busy={flag.value: value for flag, value in production["busy"].items()},
            error=production["error"],
        )
