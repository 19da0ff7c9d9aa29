import asyncio
from collections.abc import Sequence

import pytest

from scene_director.models.media import ImageArtifact, PcmAudio
from scene_director.models.scene import SceneOutput
from scene_director.state.store import ProductionStore, new_production


def make_scene(number: int, prompt: str | None = None) -> SceneOutput:
    return SceneOutput(
        scene_number=number,
        duration_estimate=f"{number + 4}s",
        visual_hook=f"hook {number}",
        viral_score=50 + number,
        rationale=f"rationale {number}",
        audio_mood="tense",
        sfx_cue="whoosh",
        prompt=prompt if prompt is not None else f"prompt {number}",
    )


class FakeArtifactClient:
    """Records every call. Operations listed in ``fail`` raise; ``gates`` hold an
    operation until its event is set."""

    def __init__(self, scenes: Sequence[SceneOutput] | None = None):
        self.scenes = list(scenes) if scenes is not None else [make_scene(1), make_scene(2)]
        self.calls: list[tuple[str, tuple]] = []
        self.fail: set[str] = set()
        self.fail_prompts: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.style_descriptor = "teal and orange, volumetric haze"

    async def _call(self, name: str, *args) -> None:
        self.calls.append((name, args))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        if name in self.fail:
            raise RuntimeError(f"{name} failed")

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def segment_script(self, script, style_descriptor):
        await self._call("segment_script", script, style_descriptor)
        return list(self.scenes)

    async def refine_script(self, script, instructions):
        await self._call("refine_script", script, instructions)
        return f"{script} (refined: {instructions})"

    async def enhance_prompt(self, prompt, style_descriptor):
        await self._call("enhance_prompt", prompt, style_descriptor)
        if prompt in self.fail_prompts:
            raise RuntimeError(f"enhance failed for {prompt!r}")
        return f"{prompt} [enhanced]"

    async def extract_style_from_image(self, image, mime_type):
        await self._call("extract_style_from_image", image, mime_type)
        return self.style_descriptor

    async def extract_style_from_query(self, query):
        await self._call("extract_style_from_query", query)
        return f"{query} keywords"

    async def generate_image(self, prompt, aspect_ratio):
        await self._call("generate_image", prompt, aspect_ratio)
        return ImageArtifact(data=f"img:{prompt}".encode())

    async def generate_thumbnail(self, images, instructions, aspect_ratio):
        await self._call("generate_thumbnail", list(images), instructions, aspect_ratio)
        return ImageArtifact(data=b"thumbnail")

    async def synthesize_narration(self, text, voice):
        await self._call("synthesize_narration", text, voice)
        return PcmAudio(samples=b"\x01\x00" * 100, sample_rate=24000)


async def settle(rounds: int = 5) -> None:
    """Let freshly created tasks run up to their first real suspension."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def fake_client() -> FakeArtifactClient:
    return FakeArtifactClient()


@pytest.fixture
def store() -> ProductionStore:
    return ProductionStore({**new_production(), "script": "Hello world."})


@pytest.fixture
def store_with_scenes(store: ProductionStore) -> ProductionStore:
    store.replace_scenes([make_scene(1), make_scene(2)])
    return store
