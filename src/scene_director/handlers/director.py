"""Director handlers — script segmentation and script refinement."""

from __future__ import annotations

import structlog

from scene_director.handlers.common import REFINE_FAILED, SEGMENT_FAILED, call_provider
from scene_director.state.production import GlobalFlag
from scene_director.state.store import ProductionStore
from scene_director.tools.artifact_client import ArtifactClient

logger = structlog.get_logger()


async def segment_script(store: ProductionStore, client: ArtifactClient) -> bool:
    """Run the director: replace the whole scene list with a fresh segmentation.

    A script with no non-whitespace content never reaches the provider. On
    failure the previous scenes stay exactly as they were and only the
    banner changes.
    """
    production = store.snapshot
    script = production["script"]
    if not script.strip():
        logger.info("segment.skipped", reason="empty_script")
        return False

    logger.info("segment.start", script_len=len(script))
    store.start_operation(GlobalFlag.SEGMENTING)
    try:
        scenes = await call_provider(
            client.segment_script(script, production["style_descriptor"])
        )
        store.replace_scenes(scenes)
    except Exception:
        logger.exception("segment.failed")
        store.set_error(SEGMENT_FAILED)
        return False
    finally:
        store.set_busy(GlobalFlag.SEGMENTING, False)

    logger.info("segment.done", num_scenes=len(scenes))
    return True


async def refine_script(store: ProductionStore, client: ArtifactClient) -> bool:
    """Rewrite the script per the pending instructions, then clear the instructions."""
    production = store.snapshot
    script = production["script"]
    instructions = production["refine_instructions"]
    if not script.strip() or not instructions.strip():
        logger.info("refine.skipped", has_script=bool(script.strip()))
        return False

    store.start_operation(GlobalFlag.REFINING_SCRIPT)
    try:
        refined = await call_provider(client.refine_script(script, instructions))
        store.replace_script(refined)
        store.set_refine_instructions("")
    except Exception:
        logger.exception("refine.failed")
        store.set_error(REFINE_FAILED)
        return False
    finally:
        store.set_busy(GlobalFlag.REFINING_SCRIPT, False)

    logger.info("refine.done", script_len=len(refined))
    return True
