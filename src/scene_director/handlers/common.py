"""Shared pieces for handlers — user-facing messages and the provider-call bound."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from scene_director.config import settings
from scene_director.state.store import ProductionStore

T = TypeVar("T")

# Global banner messages
SEGMENT_FAILED = "Production Analysis Failed."
REFINE_FAILED = "Script refinement failed."
BULK_ENHANCE_FAILED = "Bulk enhancement failed."
NARRATION_FAILED = "TTS failed."
THUMBNAIL_NEEDS_IMAGES = "Generate at least one scene image first."
THUMBNAIL_FAILED = "Thumbnail generation failed."
STYLE_IMAGE_FAILED = "Could not extract style from image."
STYLE_QUERY_FAILED = "Failed to fetch style descriptors."

# Scene-scoped messages
PROMPT_ENHANCE_FAILED = "Prompt enhancement failed."
IMAGE_FAILED = "Image failed"


async def call_provider(call: Awaitable[T]) -> T:
    """Await one artifact-client call, bounded by ``operation_timeout_sec`` when configured.

    Expiry raises ``TimeoutError`` and goes down the handler's normal failure path.
    """
    timeout = settings.operation_timeout_sec
    if timeout is None:
        return await call
    return await asyncio.wait_for(call, timeout)


def scenes_replaced(store: ProductionStore, generation: int) -> bool:
    """True once the scene list captured at *generation* has been re-segmented away."""
    return store.snapshot["scene_generation"] != generation
