"""FastAPI route handlers for production sessions."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, Response, UploadFile

from scene_director.api.dependencies import get_artifact_client, get_sessions
from scene_director.api.schemas import (
    OperationResponse,
    ProductionResponse,
    PromptUpdateRequest,
    ScriptUpdateRequest,
    SessionCreateRequest,
    SessionCreateResponse,
    SettingsUpdateRequest,
    StyleQueryRequest,
    VoiceResponse,
)
from scene_director.errors import UnknownSceneError
from scene_director.handlers.director import refine_script, segment_script
from scene_director.handlers.narration import generate_narration
from scene_director.handlers.prompts import enhance_all_prompts, enhance_scene_prompt
from scene_director.handlers.style import extract_style_from_image, extract_style_from_query
from scene_director.handlers.visuals import generate_thumbnail, visualize_scene
from scene_director.memory.sessions import SessionRegistry
from scene_director.models.media import VOICE_OPTIONS, ImageArtifact
from scene_director.state.production import SceneFlag
from scene_director.state.store import ProductionStore
from scene_director.tools.artifact_client import ArtifactClient

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1")


def _get_store(session_id: str, sessions: SessionRegistry) -> ProductionStore:
    store = sessions.get(session_id)
    if store is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return store


def _require_scene(store: ProductionStore, scene_number: int) -> None:
    try:
        store.scene(scene_number)
    except UnknownSceneError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


def _snapshot(session_id: str, store: ProductionStore) -> ProductionResponse:
    return ProductionResponse.from_production(session_id, store.snapshot)


# ---------------------------------------------------------------------------
# Sessions and direct edits
# ---------------------------------------------------------------------------


@router.get("/voices", response_model=list[VoiceResponse])
async def list_voices():
    """List the narration voices a production can select."""
    return [VoiceResponse(id=v.id, name=v.name, gender=v.gender) for v in VOICE_OPTIONS]


@router.post("/sessions", response_model=SessionCreateResponse)
async def create_session(
    request: SessionCreateRequest | None = None,
    sessions: SessionRegistry = Depends(get_sessions),
):
    """Start a new, empty production."""
    request = request or SessionCreateRequest()
    try:
        session_id, _ = sessions.create(
            script=request.script, aspect_ratio=request.aspect_ratio, voice=request.voice
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    logger.info("session.created", session_id=session_id)
    return SessionCreateResponse(session_id=session_id)


@router.get("/sessions/{session_id}", response_model=ProductionResponse)
async def get_session(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    """Return the current production snapshot."""
    return _snapshot(session_id, _get_store(session_id, sessions))


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    if not sessions.delete(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    logger.info("session.deleted", session_id=session_id)
    return Response(status_code=204)


@router.put("/sessions/{session_id}/script", response_model=ProductionResponse)
async def update_script(
    session_id: str,
    request: ScriptUpdateRequest,
    sessions: SessionRegistry = Depends(get_sessions),
):
    store = _get_store(session_id, sessions)
    store.replace_script(request.script)
    return _snapshot(session_id, store)


@router.patch("/sessions/{session_id}/settings", response_model=ProductionResponse)
async def update_settings(
    session_id: str,
    request: SettingsUpdateRequest,
    sessions: SessionRegistry = Depends(get_sessions),
):
    """Replace aspect ratio, voice, refine instructions or thumbnail prompt."""
    store = _get_store(session_id, sessions)
    try:
        if request.aspect_ratio is not None:
            store.set_aspect_ratio(request.aspect_ratio)
        if request.voice is not None:
            store.set_voice(request.voice)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    if request.refine_instructions is not None:
        store.set_refine_instructions(request.refine_instructions)
    if request.thumbnail_prompt is not None:
        store.set_thumbnail_prompt(request.thumbnail_prompt)
    return _snapshot(session_id, store)


@router.put("/sessions/{session_id}/scenes/{scene_number}/prompt", response_model=ProductionResponse)
async def update_scene_prompt(
    session_id: str,
    scene_number: int,
    request: PromptUpdateRequest,
    sessions: SessionRegistry = Depends(get_sessions),
):
    store = _get_store(session_id, sessions)
    _require_scene(store, scene_number)
    store.update_scene_prompt(scene_number, request.prompt)
    return _snapshot(session_id, store)


@router.delete("/sessions/{session_id}/style", response_model=ProductionResponse)
async def clear_style(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    """Drop the reference image and descriptor, back to the default aesthetic."""
    store = _get_store(session_id, sessions)
    store.clear_style()
    return _snapshot(session_id, store)


@router.delete("/sessions/{session_id}/error", response_model=ProductionResponse)
async def dismiss_error(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    """Dismiss the production-wide error banner. Scene errors are left alone."""
    store = _get_store(session_id, sessions)
    store.set_error(None)
    return _snapshot(session_id, store)


# ---------------------------------------------------------------------------
# Orchestrated operations (run in the background; poll the snapshot)
# ---------------------------------------------------------------------------


def _started(session_id: str, operation: str) -> OperationResponse:
    logger.info("operation.scheduled", session_id=session_id, operation=operation)
    return OperationResponse(session_id=session_id, operation=operation)


@router.post("/sessions/{session_id}/segment", response_model=OperationResponse)
async def run_segmentation(
    session_id: str,
    background_tasks: BackgroundTasks,
    sessions: SessionRegistry = Depends(get_sessions),
    client: ArtifactClient = Depends(get_artifact_client),
):
    """Run the director over the current script."""
    store = _get_store(session_id, sessions)
    background_tasks.add_task(segment_script, store, client)
    return _started(session_id, "segment")


@router.post("/sessions/{session_id}/refine", response_model=OperationResponse)
async def run_refinement(
    session_id: str,
    background_tasks: BackgroundTasks,
    sessions: SessionRegistry = Depends(get_sessions),
    client: ArtifactClient = Depends(get_artifact_client),
):
    store = _get_store(session_id, sessions)
    background_tasks.add_task(refine_script, store, client)
    return _started(session_id, "refine")


@router.post("/sessions/{session_id}/enhance-all", response_model=OperationResponse)
async def run_enhance_all(
    session_id: str,
    background_tasks: BackgroundTasks,
    sessions: SessionRegistry = Depends(get_sessions),
    client: ArtifactClient = Depends(get_artifact_client),
):
    store = _get_store(session_id, sessions)
    background_tasks.add_task(enhance_all_prompts, store, client)
    return _started(session_id, "enhance_all")


@router.post(
    "/sessions/{session_id}/scenes/{scene_number}/enhance", response_model=OperationResponse
)
async def run_enhance_scene(
    session_id: str,
    scene_number: int,
    background_tasks: BackgroundTasks,
    sessions: SessionRegistry = Depends(get_sessions),
    client: ArtifactClient = Depends(get_artifact_client),
):
    store = _get_store(session_id, sessions)
    _require_scene(store, scene_number)
    background_tasks.add_task(enhance_scene_prompt, store, client, scene_number)
    return _started(session_id, "enhance_prompt")


@router.post(
    "/sessions/{session_id}/scenes/{scene_number}/visualize", response_model=OperationResponse
)
async def run_visualize(
    session_id: str,
    scene_number: int,
    background_tasks: BackgroundTasks,
    sessions: SessionRegistry = Depends(get_sessions),
    client: ArtifactClient = Depends(get_artifact_client),
):
    """Render one scene. Rejected while that scene's previous render is in flight."""
    store = _get_store(session_id, sessions)
    _require_scene(store, scene_number)
    if store.scene(scene_number)["busy"][SceneFlag.GENERATING_IMAGE]:
        raise HTTPException(
            status_code=409, detail=f"Scene {scene_number} is already generating an image"
        )

    # Flag is up before the task is scheduled
    store.start_scene_operation(scene_number, SceneFlag.GENERATING_IMAGE)
    background_tasks.add_task(visualize_scene, store, client, scene_number)
    return _started(session_id, "visualize")


@router.post("/sessions/{session_id}/narration", response_model=OperationResponse)
async def run_narration(
    session_id: str,
    background_tasks: BackgroundTasks,
    sessions: SessionRegistry = Depends(get_sessions),
    client: ArtifactClient = Depends(get_artifact_client),
):
    store = _get_store(session_id, sessions)
    background_tasks.add_task(generate_narration, store, client)
    return _started(session_id, "narration")


@router.post("/sessions/{session_id}/thumbnail", response_model=OperationResponse)
async def run_thumbnail(
    session_id: str,
    background_tasks: BackgroundTasks,
    sessions: SessionRegistry = Depends(get_sessions),
    client: ArtifactClient = Depends(get_artifact_client),
):
    store = _get_store(session_id, sessions)
    background_tasks.add_task(generate_thumbnail, store, client)
    return _started(session_id, "thumbnail")


@router.post("/sessions/{session_id}/style/query", response_model=OperationResponse)
async def run_style_query(
    session_id: str,
    request: StyleQueryRequest,
    background_tasks: BackgroundTasks,
    sessions: SessionRegistry = Depends(get_sessions),
    client: ArtifactClient = Depends(get_artifact_client),
):
    store = _get_store(session_id, sessions)
    background_tasks.add_task(extract_style_from_query, store, client, request.query)
    return _started(session_id, "style_query")


@router.post("/sessions/{session_id}/style/image", response_model=OperationResponse)
async def run_style_image(
    session_id: str,
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    sessions: SessionRegistry = Depends(get_sessions),
    client: ArtifactClient = Depends(get_artifact_client),
):
    """Upload a reference image and derive the style descriptor from it."""
    store = _get_store(session_id, sessions)
    mime_type = file.content_type or "image/png"
    if not mime_type.startswith("image/"):
        raise HTTPException(status_code=415, detail=f"Expected an image upload, got {mime_type}")

    image = ImageArtifact(data=await file.read(), mime_type=mime_type)
    background_tasks.add_task(extract_style_from_image, store, client, image)
    return _started(session_id, "style_image")


# ---------------------------------------------------------------------------
# Downloads
# ---------------------------------------------------------------------------


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get("/sessions/{session_id}/narration.wav")
async def download_narration(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    narration = _get_store(session_id, sessions).snapshot["narration"]
    if narration is None:
        raise HTTPException(status_code=404, detail="No narration generated yet")
    return Response(
        content=narration.wav, media_type="audio/wav", headers=_attachment("voiceover.wav")
    )


@router.get("/sessions/{session_id}/thumbnail.png")
async def download_thumbnail(session_id: str, sessions: SessionRegistry = Depends(get_sessions)):
    thumbnail = _get_store(session_id, sessions).snapshot["thumbnail"]
    if thumbnail is None:
        raise HTTPException(status_code=404, detail="No thumbnail generated yet")
    return Response(
        content=thumbnail.data,
        media_type=thumbnail.mime_type,
        headers=_attachment("MASTER_THUMBNAIL.png"),
    )


@router.get("/sessions/{session_id}/scenes/{scene_number}/image.png")
async def download_scene_image(
    session_id: str, scene_number: int, sessions: SessionRegistry = Depends(get_sessions)
):
    store = _get_store(session_id, sessions)
    _require_scene(store, scene_number)
    image = store.scene(scene_number)["generated_image"]
    if image is None:
        raise HTTPException(status_code=404, detail=f"Scene {scene_number} has no image yet")
    return Response(
        content=image.data,
        media_type=image.mime_type,
        headers=_attachment(f"scene-{scene_number}.png"),
    )
