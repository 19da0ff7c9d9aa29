"""Narration handler — full-script text-to-speech."""

from __future__ import annotations

import structlog

from scene_director.handlers.common import NARRATION_FAILED, call_provider
from scene_director.models.media import NarrationAudio
from scene_director.state.production import GlobalFlag
from scene_director.state.store import ProductionStore
from scene_director.tools.artifact_client import ArtifactClient
from scene_director.tools.wav import pcm_to_wav

logger = structlog.get_logger()


async def generate_narration(store: ProductionStore, client: ArtifactClient) -> bool:
    """Synthesize the whole script with the selected voice, replacing any earlier take."""
    production = store.snapshot
    script = production["script"]
    if not script.strip():
        logger.info("narration.skipped", reason="empty_script")
        return False

    voice = production["voice"]
    logger.info("narration.start", script_len=len(script), voice=voice)
    store.start_operation(GlobalFlag.GENERATING_AUDIO)
    try:
        pcm = await call_provider(client.synthesize_narration(script, voice))
        audio = NarrationAudio(
            wav=pcm_to_wav(pcm.samples, pcm.sample_rate),
            sample_rate=pcm.sample_rate,
            voice=voice,
        )
        store.set_narration(audio)
    except Exception:
        logger.exception("narration.failed")
        store.set_error(NARRATION_FAILED)
        return False
    finally:
        store.set_busy(GlobalFlag.GENERATING_AUDIO, False)

    logger.info("narration.done", bytes=len(audio.wav), sample_rate=audio.sample_rate)
    return True
