"""Artifact Client boundary — every remote generative call the handlers make."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from scene_director.models.media import ImageArtifact, PcmAudio
from scene_director.models.scene import SceneOutput


class ArtifactClient(Protocol):
    """Stateless request/response operations against the model provider.

    Text operations that fall back to their input on an empty answer say so;
    artifact operations raise ``ArtifactError`` when nothing usable comes back.
    """

    async def segment_script(self, script: str, style_descriptor: str) -> list[SceneOutput]:
        """Split *script* into ordered scenes. Raises on empty or malformed output."""
        ...

    async def refine_script(self, script: str, instructions: str) -> str:
        """Rewrite *script* per *instructions*; returns *script* unchanged on an empty answer."""
        ...

    async def enhance_prompt(self, prompt: str, style_descriptor: str) -> str:
        """Rewrite an image prompt; returns *prompt* unchanged on an empty answer."""
        ...

    async def extract_style_from_image(self, image: bytes, mime_type: str) -> str:
        ...

    async def extract_style_from_query(self, query: str) -> str:
        ...

    async def generate_image(self, prompt: str, aspect_ratio: str) -> ImageArtifact:
        ...

    async def generate_thumbnail(
        self, images: Sequence[ImageArtifact], instructions: str, aspect_ratio: str
    ) -> ImageArtifact:
        ...

    async def synthesize_narration(self, text: str, voice: str) -> PcmAudio:
        ...
