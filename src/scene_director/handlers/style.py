"""Style handlers — derive the style descriptor from a reference image or a text query.

Both share the one ``ANALYZING_STYLE`` flag; whichever finishes last owns the descriptor.
"""

from __future__ import annotations

import structlog

from scene_director.handlers.common import STYLE_IMAGE_FAILED, STYLE_QUERY_FAILED, call_provider
from scene_director.models.media import ImageArtifact
from scene_director.state.production import GlobalFlag
from scene_director.state.store import ProductionStore
from scene_director.tools.artifact_client import ArtifactClient

logger = structlog.get_logger()


async def extract_style_from_image(
    store: ProductionStore, client: ArtifactClient, image: ImageArtifact
) -> bool:
    """Derive the style descriptor from a reference image.

    The image is shown as the reference as soon as analysis starts and stays
    there even if the analysis fails.
    """
    store.start_operation(GlobalFlag.ANALYZING_STYLE)
    store.set_style_reference(image)
    try:
        descriptor = await call_provider(
            client.extract_style_from_image(image.data, image.mime_type)
        )
        store.set_style(descriptor, image)
    except Exception:
        logger.exception("style_from_image.failed", mime_type=image.mime_type)
        store.set_error(STYLE_IMAGE_FAILED)
        return False
    finally:
        store.set_busy(GlobalFlag.ANALYZING_STYLE, False)

    logger.info("style_from_image.done", descriptor_len=len(descriptor))
    return True


async def extract_style_from_query(
    store: ProductionStore, client: ArtifactClient, query: str
) -> bool:
    """Derive the style descriptor from a text query such as a film or artist name."""
    if not query.strip():
        return False

    store.start_operation(GlobalFlag.ANALYZING_STYLE)
    try:
        descriptor = await call_provider(client.extract_style_from_query(query))
        store.set_style(descriptor)
    except Exception:
        logger.exception("style_from_query.failed", query=query)
        store.set_error(STYLE_QUERY_FAILED)
        return False
    finally:
        store.set_busy(GlobalFlag.ANALYZING_STYLE, False)

    logger.info("style_from_query.done", descriptor_len=len(descriptor))
    return True
