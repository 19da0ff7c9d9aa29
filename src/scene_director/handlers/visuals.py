"""Visual handlers — per-scene frames and the composite thumbnail."""

from __future__ import annotations

import structlog

from scene_director.handlers.common import (
    IMAGE_FAILED,
    THUMBNAIL_FAILED,
    THUMBNAIL_NEEDS_IMAGES,
    call_provider,
    scenes_replaced,
)
from scene_director.state.production import GlobalFlag, SceneFlag
from scene_director.state.store import ProductionStore
from scene_director.tools.artifact_client import ArtifactClient

logger = structlog.get_logger()


async def visualize_scene(
    store: ProductionStore, client: ArtifactClient, scene_number: int
) -> bool:
    """Render one scene's current prompt at the production's aspect ratio.

    Callers must not re-trigger a scene whose image is still rendering.
    Prompt enhancement on the same scene may run alongside. A render that
    lands after the script was re-segmented is dropped.
    """
    store.start_scene_operation(scene_number, SceneFlag.GENERATING_IMAGE)
    generation = store.snapshot["scene_generation"]
    try:
        prompt = store.scene(scene_number)["prompt"]
        aspect_ratio = store.snapshot["aspect_ratio"]
        image = await call_provider(client.generate_image(prompt, aspect_ratio))
    except Exception:
        logger.exception("visualize.failed", scene_number=scene_number)
        if scenes_replaced(store, generation):
            logger.info("visualize.stale", scene_number=scene_number)
            return False
        store.set_scene_error(scene_number, IMAGE_FAILED, SceneFlag.GENERATING_IMAGE)
        return False

    if scenes_replaced(store, generation):
        logger.info("visualize.stale", scene_number=scene_number)
        return False

    store.set_scene_image(scene_number, image)
    logger.info("visualize.done", scene_number=scene_number, bytes=len(image.data))
    return True


async def generate_thumbnail(store: ProductionStore, client: ArtifactClient) -> bool:
    """Blend every rendered scene image into one thumbnail.

    With no rendered scene the banner is raised locally and the provider is
    never called.
    """
    production = store.snapshot
    images = [
        scene["generated_image"]
        for scene in production["scenes"]
        if scene["generated_image"] is not None
    ]
    if not images:
        logger.info("thumbnail.skipped", reason="no_scene_images")
        store.set_error(THUMBNAIL_NEEDS_IMAGES)
        return False

    logger.info("thumbnail.start", num_images=len(images))
    store.start_operation(GlobalFlag.GENERATING_THUMBNAIL)
    try:
        thumbnail = await call_provider(
            client.generate_thumbnail(
                images, production["thumbnail_prompt"], production["aspect_ratio"]
            )
        )
        store.set_thumbnail(thumbnail)
    except Exception:
        logger.exception("thumbnail.failed")
        store.set_error(THUMBNAIL_FAILED)
        return False
    finally:
        store.set_busy(GlobalFlag.GENERATING_THUMBNAIL, False)

    logger.info("thumbnail.done", bytes=len(thumbnail.data))
    return True
