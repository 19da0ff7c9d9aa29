import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from scene_director.errors import ArtifactError
from scene_director.models.media import ImageArtifact
from scene_director.tools.gemini import (
    DEFAULT_THUMBNAIL_INSTRUCTIONS,
    IMAGE_PROMPT_SUFFIX,
    GeminiArtifactClient,
    sample_rate_from_mime,
)


def _text_response(text):
    return SimpleNamespace(text=text, candidates=[])


def _blob_response(data: bytes, mime_type: str):
    blob = SimpleNamespace(data=data, mime_type=mime_type)
    part = SimpleNamespace(inline_data=blob, text=None)
    return SimpleNamespace(
        text=None, candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))]
    )


def _scene_json(number: int, **overrides) -> dict:
    scene = {
        "scene_number": number,
        "duration_estimate": "6s",
        "visual_hook": "a door slams",
        "viral_score": 70,
        "rationale": "tension",
        "audio_mood": "dark",
        "sfx_cue": "slam",
        "prompt": f"scene {number} prompt",
    }
    scene.update(overrides)
    return scene


def _make_client(response):
    genai_client = MagicMock()
    genai_client.aio.models.generate_content = AsyncMock(return_value=response)
    client = GeminiArtifactClient(
        client=genai_client, text_model="text", image_model="image", tts_model="tts"
    )
    return client, genai_client.aio.models.generate_content


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------


async def test_segment_parses_scenes_and_clamps_score():
    payload = {"scenes": [_scene_json(1, viral_score=140), _scene_json(2, viral_score=-5)]}
    client, generate = _make_client(_text_response(json.dumps(payload)))

    scenes = await client.segment_script("Hello world.", "noir")

    assert [s.scene_number for s in scenes] == [1, 2]
    assert [s.viral_score for s in scenes] == [100, 0]
    kwargs = generate.await_args.kwargs
    assert kwargs["model"] == "text"
    assert kwargs["contents"] == "Hello world."
    assert "noir" in kwargs["config"].system_instruction
    assert kwargs["config"].response_mime_type == "application/json"


async def test_segment_without_style_uses_default_context():
    payload = {"scenes": [_scene_json(1)]}
    client, generate = _make_client(_text_response(json.dumps(payload)))

    await client.segment_script("Hello world.", "")

    assert "Default Cinematic" in generate.await_args.kwargs["config"].system_instruction


@pytest.mark.parametrize(
    "text",
    [
        None,
        "",
        "not json",
        json.dumps({"scenes": []}),
        json.dumps({"scenes": [{"scene_number": 1}]}),
        json.dumps({"scenes": [_scene_json(1), _scene_json(1)]}),
    ],
    ids=["none", "empty", "not-json", "no-scenes", "missing-fields", "duplicate-numbers"],
)
async def test_segment_rejects_unusable_responses(text):
    client, _ = _make_client(_text_response(text))

    with pytest.raises(ArtifactError):
        await client.segment_script("Hello world.", "")


# ---------------------------------------------------------------------------
# Text rewrites and style
# ---------------------------------------------------------------------------


async def test_refine_returns_trimmed_text():
    client, generate = _make_client(_text_response("  Sharper script.\n"))

    assert await client.refine_script("Old script.", "be sharper") == "Sharper script."
    assert "be sharper" in generate.await_args.kwargs["config"].system_instruction


@pytest.mark.parametrize("text", [None, "", "   "])
async def test_empty_rewrites_fall_back_to_input(text):
    client, _ = _make_client(_text_response(text))

    assert await client.refine_script("Old script.", "be sharper") == "Old script."
    assert await client.enhance_prompt("a cat", "") == "a cat"


async def test_enhance_prompt_includes_style():
    client, generate = _make_client(_text_response("a cat, rim lighting, 8k"))

    assert await client.enhance_prompt("a cat", "pastel dreamscape") == "a cat, rim lighting, 8k"
    kwargs = generate.await_args.kwargs
    assert "pastel dreamscape" in kwargs["config"].system_instruction
    assert '"a cat"' in kwargs["contents"]


async def test_style_calls_return_empty_string_when_silent():
    client, generate = _make_client(_text_response(None))

    assert await client.extract_style_from_query("blade runner") == ""
    assert "blade runner" in generate.await_args.kwargs["contents"]
    assert await client.extract_style_from_image(b"\x89PNG", "image/png") == ""


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------


async def test_generate_image_returns_inline_bytes():
    client, generate = _make_client(_blob_response(b"png-bytes", "image/png"))

    image = await client.generate_image("a lighthouse", "9:16")

    assert image == ImageArtifact(data=b"png-bytes", mime_type="image/png")
    kwargs = generate.await_args.kwargs
    assert kwargs["model"] == "image"
    assert kwargs["contents"] == f"a lighthouse{IMAGE_PROMPT_SUFFIX}"
    assert kwargs["config"].image_config.aspect_ratio == "9:16"


@pytest.mark.parametrize(
    "response",
    [
        SimpleNamespace(text="I cannot draw that", candidates=[]),
        SimpleNamespace(text=None, candidates=None),
        SimpleNamespace(
            text="text only",
            candidates=[
                SimpleNamespace(
                    content=SimpleNamespace(parts=[SimpleNamespace(inline_data=None, text="x")])
                )
            ],
        ),
    ],
    ids=["no-candidates", "null-candidates", "text-part-only"],
)
async def test_generate_image_without_inline_data_fails(response):
    client, _ = _make_client(response)

    with pytest.raises(ArtifactError, match="No image generated"):
        await client.generate_image("a lighthouse", "16:9")


async def test_thumbnail_sends_every_image_then_instructions():
    client, generate = _make_client(_blob_response(b"thumb", "image/png"))
    images = [ImageArtifact(data=b"one"), ImageArtifact(data=b"two", mime_type="image/jpeg")]

    thumbnail = await client.generate_thumbnail(images, "", "1:1")

    assert thumbnail.data == b"thumb"
    contents = generate.await_args.kwargs["contents"]
    assert len(contents) == 3
    assert "2 scenes" in contents[-1]
    assert DEFAULT_THUMBNAIL_INSTRUCTIONS in contents[-1]


async def test_thumbnail_without_inline_data_fails():
    client, _ = _make_client(_text_response("nope"))

    with pytest.raises(ArtifactError, match="Thumbnail generation failed"):
        await client.generate_thumbnail([ImageArtifact(data=b"one")], "go big", "16:9")


# ---------------------------------------------------------------------------
# Speech
# ---------------------------------------------------------------------------


async def test_tts_reads_sample_rate_from_mime():
    client, generate = _make_client(_blob_response(b"\x00\x00" * 10, "audio/L16;codec=pcm;rate=16000"))

    pcm = await client.synthesize_narration("Hello world.", "Fenrir")

    assert pcm.samples == b"\x00\x00" * 10
    assert pcm.sample_rate == 16000
    config = generate.await_args.kwargs["config"]
    assert config.response_modalities == ["AUDIO"]
    assert config.speech_config.voice_config.prebuilt_voice_config.voice_name == "Fenrir"


async def test_tts_without_audio_fails():
    client, _ = _make_client(_text_response(None))

    with pytest.raises(ArtifactError, match="TTS generation failed"):
        await client.synthesize_narration("Hello world.", "Kore")


@pytest.mark.parametrize(
    "mime_type, expected",
    [
        ("audio/L16;codec=pcm;rate=24000", 24000),
        ("audio/L16;rate=44100", 44100),
        ("audio/pcm", 24000),
        (None, 24000),
    ],
)
def test_sample_rate_from_mime(mime_type, expected):
    assert sample_rate_from_mime(mime_type, 24000) == expected
