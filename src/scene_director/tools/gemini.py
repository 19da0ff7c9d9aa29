"""Google GenAI (Gemini) implementation of the artifact client."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Optional

import structlog
from google import genai
from google.genai import types
from pydantic import ValidationError

from scene_director.config import settings
from scene_director.errors import ArtifactError
from scene_director.models.media import ImageArtifact, PcmAudio
from scene_director.models.scene import SceneOutput, SegmentationResult

logger = structlog.get_logger()

# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

NEGATIVE_CONSTRAINTS = """\
CRITICAL NEGATIVE CONSTRAINTS (STRICT ADHERENCE REQUIRED):
- Do NOT generate Hindu religious symbols.
- EXCLUDE: Om symbols, Saffron/Orange Flags (Bhagwa), Hindu Temple Arches, Idols of Hindu Deities, Trishuls, Tikka/Bindi.
- Keep the aesthetic strictly aligned with the script's specific context or completely Neutral/Cinematic."""

SEGMENT_SYSTEM_PROMPT = """\
ACT AS: The "Visual Production Engine" - Director Mode.
TASK: Analyze the provided Voiceover Script.
CRITICAL SEGMENTATION RULE: Break script into 5-10s scenes.
STYLE CONTEXT: {style}

RULES:
1. Break the script into meaningful visual units.
2. Provide a 'visual_hook' that grabs attention in the first 3 seconds.
3. Generate a highly detailed 'prompt' for an image model.
4. Calculate a 'viral_score' (1-100) based on trend potential.
5. Adhere to negative constraints: {negative_constraints}"""

REFINE_SYSTEM_PROMPT = """\
ACT AS: Expert Script Writer and Viral Content Strategist.
TASK: Refine the provided script based on specific user instructions.

GUIDELINES:
1. Maintain the core message but optimize for retention, impact, and flow.
2. Incorporate the user's specific feedback: "{instructions}".
3. Ensure the tone is consistent and professional.
4. Output ONLY the refined script text."""

ENHANCE_SYSTEM_PROMPT = """\
ACT AS: Expert Visual Prompt Engineer for high-end AI Image Generators.
TASK: Rewrite the user's basic prompt into a professional, cinematic, and detailed visual masterpiece.

GUIDELINES:
1. Inject technical details: camera angles (low angle, close up), lighting (volumetric, rim lighting, golden hour), and texture (hyper-realistic, 8k, Unreal Engine 5).
2. Incorporate the Style Context: {style}.
3. Keep it punchy but descriptive.
4. Output ONLY the enhanced prompt text, no preamble."""

STYLE_FROM_IMAGE_PROMPT = (
    "STRICT ANALYSIS: Examine this image and identify: 1. Dominant color palette (specific shades). "
    "2. Lighting techniques (e.g., chiaroscuro, bokeh, volumetric light). 3. Artistic medium "
    "(e.g., macro photography, digital oil painting, 3D render). 4. Mood and texture. "
    "Return 20 precise descriptive keywords for prompt engineering, ignoring subject matter."
)

STYLE_FROM_QUERY_PROMPT = (
    'Describe the visual aesthetic of "{query}" in 20 keywords covering lighting, medium, and colors.'
)

IMAGE_PROMPT_SUFFIX = ". Cinematic, high fidelity, professional grade."

THUMBNAIL_PROMPT = """\
ACT AS: Viral Marketing Visual Specialist.
TASK: Create a HIGH-CLICK-THROUGH-RATE YouTube Thumbnail.
BLEND: Incorporate and blend elements from the provided {count} scenes into a single, cohesive, dramatic composition.
INSTRUCTIONS: {instructions}"""

DEFAULT_THUMBNAIL_INSTRUCTIONS = (
    "Focus on the most impactful visuals. Add cinematic depth, vibrant highlights, "
    "and create a sense of intrigue. Professional 4k quality."
)

_RATE_RE = re.compile(r"rate=(\d+)")


def _first_inline_data(response) -> Optional[types.Blob]:
    """Return the first inline blob in the first candidate, if any."""
    candidates = response.candidates or []
    if not candidates or candidates[0].content is None:
        return None
    for part in candidates[0].content.parts or []:
        if part.inline_data is not None and part.inline_data.data:
            return part.inline_data
    return None


def sample_rate_from_mime(mime_type: Optional[str], default: int) -> int:
    """Read the sample rate out of an ``audio/L16;codec=pcm;rate=24000`` MIME type."""
    match = _RATE_RE.search(mime_type or "")
    return int(match.group(1)) if match else default


class GeminiArtifactClient:
    """Artifact client backed by the Google GenAI SDK's async surface."""

    def __init__(
        self,
        client: Optional[genai.Client] = None,
        text_model: Optional[str] = None,
        image_model: Optional[str] = None,
        tts_model: Optional[str] = None,
    ) -> None:
        self._client = client or genai.Client(api_key=settings.gemini_api_key or None)
        self._text_model = text_model or settings.text_model
        self._image_model = image_model or settings.image_model
        self._tts_model = tts_model or settings.tts_model

    async def segment_script(self, script: str, style_descriptor: str) -> list[SceneOutput]:
        logger.info("gemini.segment.start", script_len=len(script), has_style=bool(style_descriptor))

        response = await self._client.aio.models.generate_content(
            model=self._text_model,
            contents=script,
            config=types.GenerateContentConfig(
                system_instruction=SEGMENT_SYSTEM_PROMPT.format(
                    style=style_descriptor or "Default Cinematic",
                    negative_constraints=NEGATIVE_CONSTRAINTS,
                ),
                response_mime_type="application/json",
                response_schema=SegmentationResult,
            ),
        )

        if not response.text:
            raise ArtifactError("Segmentation returned an empty response")
        try:
            result = SegmentationResult.model_validate_json(response.text)
        except ValidationError as exc:
            raise ArtifactError(f"Segmentation response was malformed: {exc}") from exc

        if not result.scenes:
            raise ArtifactError("Segmentation returned no scenes")
        numbers = [s.scene_number for s in result.scenes]
        if len(set(numbers)) != len(numbers):
            raise ArtifactError(f"Segmentation returned duplicate scene numbers: {numbers}")

        logger.info("gemini.segment.done", num_scenes=len(result.scenes))
        return result.scenes

    async def refine_script(self, script: str, instructions: str) -> str:
        response = await self._client.aio.models.generate_content(
            model=self._text_model,
            contents=f'Current Script: "{script}"\n\nInstructions: "{instructions}"',
            config=types.GenerateContentConfig(
                system_instruction=REFINE_SYSTEM_PROMPT.format(instructions=instructions),
            ),
        )
        refined = (response.text or "").strip()
        logger.info("gemini.refine.done", script_len=len(script), refined_len=len(refined))
        return refined or script

    async def enhance_prompt(self, prompt: str, style_descriptor: str) -> str:
        response = await self._client.aio.models.generate_content(
            model=self._text_model,
            contents=f'Enhance this prompt: "{prompt}"',
            config=types.GenerateContentConfig(
                system_instruction=ENHANCE_SYSTEM_PROMPT.format(
                    style=style_descriptor or "Cinematic Photorealism"
                ),
            ),
        )
        enhanced = (response.text or "").strip()
        return enhanced or prompt

    async def extract_style_from_image(self, image: bytes, mime_type: str) -> str:
        logger.info("gemini.style_from_image.start", bytes=len(image), mime_type=mime_type)
        response = await self._client.aio.models.generate_content(
            model=self._text_model,
            contents=[
                STYLE_FROM_IMAGE_PROMPT,
                types.Part.from_bytes(data=image, mime_type=mime_type),
            ],
        )
        return response.text or ""

    async def extract_style_from_query(self, query: str) -> str:
        response = await self._client.aio.models.generate_content(
            model=self._text_model,
            contents=STYLE_FROM_QUERY_PROMPT.format(query=query),
        )
        return response.text or ""

    async def generate_image(self, prompt: str, aspect_ratio: str) -> ImageArtifact:
        logger.info("gemini.image.start", prompt_len=len(prompt), aspect_ratio=aspect_ratio)

        response = await self._client.aio.models.generate_content(
            model=self._image_model,
            contents=f"{prompt}{IMAGE_PROMPT_SUFFIX}",
            config=types.GenerateContentConfig(
                image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
            ),
        )

        blob = _first_inline_data(response)
        if blob is None:
            raise ArtifactError("No image generated")

        logger.info("gemini.image.done", bytes=len(blob.data))
        return ImageArtifact(data=blob.data, mime_type=blob.mime_type or "image/png")

    async def generate_thumbnail(
        self, images: Sequence[ImageArtifact], instructions: str, aspect_ratio: str
    ) -> ImageArtifact:
        logger.info("gemini.thumbnail.start", num_images=len(images), aspect_ratio=aspect_ratio)

        parts: list = [
            types.Part.from_bytes(data=image.data, mime_type=image.mime_type) for image in images
        ]
        parts.append(
            THUMBNAIL_PROMPT.format(
                count=len(images),
                instructions=instructions or DEFAULT_THUMBNAIL_INSTRUCTIONS,
            )
        )

        response = await self._client.aio.models.generate_content(
            model=self._image_model,
            contents=parts,
            config=types.GenerateContentConfig(
                image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
            ),
        )

        blob = _first_inline_data(response)
        if blob is None:
            raise ArtifactError("Thumbnail generation failed")

        logger.info("gemini.thumbnail.done", bytes=len(blob.data))
        return ImageArtifact(data=blob.data, mime_type=blob.mime_type or "image/png")

    async def synthesize_narration(self, text: str, voice: str) -> PcmAudio:
        logger.info("gemini.tts.start", text_len=len(text), voice=voice)

        response = await self._client.aio.models.generate_content(
            model=self._tts_model,
            contents=text,
            config=types.GenerateContentConfig(
                response_modalities=["AUDIO"],
                speech_config=types.SpeechConfig(
                    voice_config=types.VoiceConfig(
                        prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice),
                    ),
                ),
            ),
        )

        blob = _first_inline_data(response)
        if blob is None:
            raise ArtifactError("TTS generation failed")

        sample_rate = sample_rate_from_mime(blob.mime_type, settings.tts_sample_rate)
        logger.info("gemini.tts.done", bytes=len(blob.data), sample_rate=sample_rate)
        return PcmAudio(samples=blob.data, sample_rate=sample_rate)
