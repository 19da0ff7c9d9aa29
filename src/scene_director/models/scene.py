"""Pydantic models for segmentation structured output."""

from pydantic import BaseModel, Field, field_validator


class SceneOutput(BaseModel):
    """One scene as described by the segmentation model."""

    scene_number: int = Field(description="1-based position of the scene in the script")
    duration_estimate: str = Field(description="Estimated spoken duration, e.g. '6s'")
    visual_hook: str = Field(description="What grabs attention in the first 3 seconds")
    viral_score: int = Field(description="Trend potential from 0 to 100")
    rationale: str = Field(description="Why this scene works")
    audio_mood: str = Field(description="Music / ambience mood tag")
    sfx_cue: str = Field(description="Sound effect cue")
    prompt: str = Field(description="Detailed prompt for an image model")

    @field_validator("viral_score", mode="after")
    @classmethod
    def _clamp_viral_score(cls, value: int) -> int:
        return max(0, min(100, value))


class SegmentationResult(BaseModel):
    """Full segmentation response."""

    scenes: list[SceneOutput]
