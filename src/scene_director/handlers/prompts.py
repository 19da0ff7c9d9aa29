"""Prompt handlers — enhance one scene's image prompt, or every prompt at once."""

from __future__ import annotations

import asyncio
from typing import Literal, Optional

import structlog

from scene_director.config import settings
from scene_director.handlers.common import (
    BULK_ENHANCE_FAILED,
    PROMPT_ENHANCE_FAILED,
    call_provider,
    scenes_replaced,
)
from scene_director.state.production import GlobalFlag, SceneFlag
from scene_director.state.store import ProductionStore
from scene_director.tools.artifact_client import ArtifactClient

logger = structlog.get_logger()

BulkPolicy = Literal["all_or_nothing", "partial"]


async def enhance_scene_prompt(
    store: ProductionStore, client: ArtifactClient, scene_number: int
) -> bool:
    """Enhance one scene's prompt. Failures stay on that scene.

    The prompt and the style descriptor are read from the store when the call
    is made, so edits made since the trigger are picked up. A result that
    lands after the script was re-segmented is dropped.
    """
    store.start_scene_operation(scene_number, SceneFlag.ENHANCING_PROMPT)
    generation = store.snapshot["scene_generation"]
    try:
        prompt = store.scene(scene_number)["prompt"]
        style = store.snapshot["style_descriptor"]
        enhanced = await call_provider(client.enhance_prompt(prompt, style))
    except Exception:
        logger.exception("enhance_prompt.failed", scene_number=scene_number)
        if scenes_replaced(store, generation):
            logger.info("enhance_prompt.stale", scene_number=scene_number)
            return False
        store.set_scene_error(scene_number, PROMPT_ENHANCE_FAILED, SceneFlag.ENHANCING_PROMPT)
        return False

    if scenes_replaced(store, generation):
        logger.info("enhance_prompt.stale", scene_number=scene_number)
        return False

    store.apply_enhanced_prompt(scene_number, enhanced)
    logger.info("enhance_prompt.done", scene_number=scene_number, prompt_len=len(enhanced))
    return True


async def enhance_all_prompts(
    store: ProductionStore,
    client: ArtifactClient,
    policy: Optional[BulkPolicy] = None,
) -> bool:
    """Enhance every scene's prompt concurrently and join before touching the store.

    ``all_or_nothing``: one failure discards the whole batch and raises the
    global banner. ``partial``: successful prompts are applied and each
    failed scene gets its own error, with no per-scene busy flag touched.
    The whole batch is dropped if the script was re-segmented meanwhile.
    """
    policy = policy or settings.bulk_enhance_policy
    production = store.snapshot
    scenes = production["scenes"]
    if not scenes:
        logger.info("enhance_all.skipped", reason="no_scenes")
        return False

    style = production["style_descriptor"]
    generation = production["scene_generation"]
    numbers = [scene["scene_number"] for scene in scenes]

    logger.info("enhance_all.start", num_scenes=len(scenes), policy=policy)
    store.start_operation(GlobalFlag.ENHANCING_ALL)
    try:
        results = await asyncio.gather(
            *[call_provider(client.enhance_prompt(scene["prompt"], style)) for scene in scenes],
            return_exceptions=True,
        )

        enhanced: dict[int, str] = {}
        failed: list[int] = []
        for scene_number, result in zip(numbers, results):
            if isinstance(result, BaseException):
                logger.error(
                    "enhance_all.scene_failed", scene_number=scene_number, error=str(result)
                )
                failed.append(scene_number)
            else:
                enhanced[scene_number] = result

        if scenes_replaced(store, generation):
            logger.info("enhance_all.stale", enhanced=len(enhanced), failed=len(failed))
            return False

        if policy == "all_or_nothing":
            if failed:
                store.set_error(BULK_ENHANCE_FAILED)
                return False
            store.replace_all_prompts(enhanced)
        else:
            if enhanced:
                store.replace_all_prompts(enhanced)
            for scene_number in failed:
                store.set_scene_error(scene_number, PROMPT_ENHANCE_FAILED)
    finally:
        store.set_busy(GlobalFlag.ENHANCING_ALL, False)

    logger.info("enhance_all.done", enhanced=len(enhanced), failed=len(failed))
    return not failed
