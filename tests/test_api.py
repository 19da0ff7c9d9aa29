import pytest
from fastapi.testclient import TestClient

from conftest import FakeArtifactClient
from scene_director.api.dependencies import get_artifact_client, get_sessions
from scene_director.main import app
from scene_director.memory.sessions import SessionRegistry
from scene_director.state.production import SceneFlag


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def artifact_client() -> FakeArtifactClient:
    return FakeArtifactClient()


@pytest.fixture
def client(registry, artifact_client):
    app.dependency_overrides[get_sessions] = lambda: registry
    app.dependency_overrides[get_artifact_client] = lambda: artifact_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_id(client) -> str:
    response = client.post("/api/v1/sessions", json={"script": "Hello world."})
    assert response.status_code == 200
    return response.json()["session_id"]


@pytest.fixture
def segmented(client, session_id) -> str:
    assert client.post(f"/api/v1/sessions/{session_id}/segment").status_code == 200
    return session_id


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_voices(client):
    voices = client.get("/api/v1/voices").json()
    assert [v["id"] for v in voices] == ["Kore", "Puck", "Fenrir", "Aoede", "Leda", "Zephyr"]


def test_new_session_is_idle(client, session_id):
    body = client.get(f"/api/v1/sessions/{session_id}").json()

    assert body["phase"] == "idle"
    assert body["script"] == "Hello world."
    assert body["scenes"] == []
    assert body["aspect_ratio"] == "16:9"
    assert body["voice"] == "Kore"
    assert not any(body["busy"].values())


def test_session_without_body(client, registry):
    response = client.post("/api/v1/sessions")
    assert response.status_code == 200
    assert len(registry) == 1


def test_invalid_voice_is_rejected(client, session_id):
    assert client.post("/api/v1/sessions", json={"voice": "Nobody"}).status_code == 422
    response = client.patch(f"/api/v1/sessions/{session_id}/settings", json={"voice": "Nobody"})
    assert response.status_code == 422


def test_settings_update(client, session_id):
    response = client.patch(
        f"/api/v1/sessions/{session_id}/settings",
        json={"aspect_ratio": "9:16", "voice": "Leda", "thumbnail_prompt": "bold text"},
    )

    body = response.json()
    assert body["aspect_ratio"] == "9:16"
    assert body["voice"] == "Leda"
    assert body["thumbnail_prompt"] == "bold text"


def test_unknown_session(client):
    assert client.get("/api/v1/sessions/missing").status_code == 404
    assert client.post("/api/v1/sessions/missing/segment").status_code == 404


def test_delete_session(client, session_id, registry):
    assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 204
    assert registry.get(session_id) is None
    assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 404


def test_segment_then_snapshot(client, segmented):
    body = client.get(f"/api/v1/sessions/{segmented}").json()

    assert body["phase"] == "producing"
    assert [s["scene_number"] for s in body["scenes"]] == [1, 2]
    assert body["scenes"][0]["is_generating_image"] is False
    assert body["busy"]["segmenting"] is False


def test_segment_failure_sets_banner(client, session_id, artifact_client):
    artifact_client.fail.add("segment_script")

    client.post(f"/api/v1/sessions/{session_id}/segment")

    body = client.get(f"/api/v1/sessions/{session_id}").json()
    assert body["error"] == "Production Analysis Failed."
    assert body["phase"] == "idle"


def test_edit_scene_prompt(client, segmented):
    response = client.put(
        f"/api/v1/sessions/{segmented}/scenes/2/prompt", json={"prompt": "a red balloon"}
    )

    assert response.json()["scenes"][1]["prompt"] == "a red balloon"
    missing = client.put(f"/api/v1/sessions/{segmented}/scenes/9/prompt", json={"prompt": "x"})
    assert missing.status_code == 404


def test_visualize_and_download(client, segmented):
    response = client.post(f"/api/v1/sessions/{segmented}/scenes/1/visualize")
    assert response.json() == {"session_id": segmented, "operation": "visualize", "status": "started"}

    scene = client.get(f"/api/v1/sessions/{segmented}").json()["scenes"][0]
    assert scene["generated_image"].startswith("data:image/png;base64,")
    assert scene["is_generating_image"] is False

    download = client.get(f"/api/v1/sessions/{segmented}/scenes/1/image.png")
    assert download.content == b"img:prompt 1"
    assert 'filename="scene-1.png"' in download.headers["content-disposition"]


def test_visualize_unknown_scene(client, segmented):
    assert client.post(f"/api/v1/sessions/{segmented}/scenes/7/visualize").status_code == 404


def test_visualize_rejected_while_rendering(client, segmented, registry, artifact_client):
    registry.get(segmented).set_scene_busy(1, SceneFlag.GENERATING_IMAGE, True)

    response = client.post(f"/api/v1/sessions/{segmented}/scenes/1/visualize")

    assert response.status_code == 409
    assert "generate_image" not in artifact_client.call_names()


def test_image_download_before_render(client, segmented):
    assert client.get(f"/api/v1/sessions/{segmented}/scenes/1/image.png").status_code == 404


def test_enhance_endpoints(client, segmented):
    client.post(f"/api/v1/sessions/{segmented}/scenes/1/enhance")
    body = client.get(f"/api/v1/sessions/{segmented}").json()
    assert body["scenes"][0]["prompt"] == "prompt 1 [enhanced]"

    client.post(f"/api/v1/sessions/{segmented}/enhance-all")
    body = client.get(f"/api/v1/sessions/{segmented}").json()
    assert [s["prompt"] for s in body["scenes"]] == [
        "prompt 1 [enhanced] [enhanced]",
        "prompt 2 [enhanced]",
    ]


def test_refine(client, session_id):
    client.patch(f"/api/v1/sessions/{session_id}/settings", json={"refine_instructions": "shorter"})

    client.post(f"/api/v1/sessions/{session_id}/refine")

    body = client.get(f"/api/v1/sessions/{session_id}").json()
    assert body["script"] == "Hello world. (refined: shorter)"
    assert body["refine_instructions"] == ""


def test_narration_download(client, session_id):
    assert client.get(f"/api/v1/sessions/{session_id}/narration.wav").status_code == 404

    client.post(f"/api/v1/sessions/{session_id}/narration")

    body = client.get(f"/api/v1/sessions/{session_id}").json()
    assert body["narration_url"] == f"/api/v1/sessions/{session_id}/narration.wav"
    download = client.get(body["narration_url"])
    assert download.headers["content-type"] == "audio/wav"
    assert 'filename="voiceover.wav"' in download.headers["content-disposition"]
    assert download.content[:4] == b"RIFF"
    assert len(download.content) == 44 + 200


def test_thumbnail_needs_rendered_scenes(client, segmented, artifact_client):
    client.post(f"/api/v1/sessions/{segmented}/thumbnail")

    body = client.get(f"/api/v1/sessions/{segmented}").json()
    assert body["error"] == "Generate at least one scene image first."
    assert "generate_thumbnail" not in artifact_client.call_names()


def test_thumbnail_download(client, segmented):
    client.post(f"/api/v1/sessions/{segmented}/scenes/2/visualize")
    client.post(f"/api/v1/sessions/{segmented}/thumbnail")

    download = client.get(f"/api/v1/sessions/{segmented}/thumbnail.png")
    assert download.content == b"thumbnail"
    assert 'filename="MASTER_THUMBNAIL.png"' in download.headers["content-disposition"]


def test_style_from_query_and_clear(client, session_id):
    client.post(f"/api/v1/sessions/{session_id}/style/query", json={"query": "film noir"})
    assert client.get(f"/api/v1/sessions/{session_id}").json()["style_descriptor"] == "film noir keywords"

    body = client.delete(f"/api/v1/sessions/{session_id}/style").json()
    assert body["style_descriptor"] == ""
    assert body["style_reference_image"] is None


def test_style_from_uploaded_image(client, session_id, artifact_client):
    response = client.post(
        f"/api/v1/sessions/{session_id}/style/image",
        files={"file": ("ref.jpg", b"jpeg-bytes", "image/jpeg")},
    )
    assert response.status_code == 200

    body = client.get(f"/api/v1/sessions/{session_id}").json()
    assert body["style_descriptor"] == artifact_client.style_descriptor
    assert body["style_reference_image"].startswith("data:image/jpeg;base64,")


def test_style_upload_must_be_an_image(client, session_id):
    response = client.post(
        f"/api/v1/sessions/{session_id}/style/image",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 415


def test_dismiss_error_banner(client, session_id, artifact_client, registry):
    artifact_client.fail.add("segment_script")
    client.post(f"/api/v1/sessions/{session_id}/segment")
    assert client.get(f"/api/v1/sessions/{session_id}").json()["error"] is not None

    response = client.delete(f"/api/v1/sessions/{session_id}/error")

    assert response.status_code == 200
    assert response.json()["error"] is None
    assert registry.get(session_id).snapshot["error"] is None
    assert client.delete("/api/v1/sessions/missing/error").status_code == 404
