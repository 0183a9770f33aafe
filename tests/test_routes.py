from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from conftest import StubProvider, script_row
from scriptreel.dependencies import (
    get_orchestrator,
    get_script_generator,
    get_script_store,
    get_settings_store,
)
from scriptreel.errors import ScriptGenerationError
from scriptreel.main import app
from scriptreel.orchestrator import VideoOrchestrator
from scriptreel.poller import CompletionPoller
from scriptreel.schemas import ProviderResponse


class StubGenerator:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def generate(self, product_features, count, platforms):
        self.calls.append((product_features, count, platforms))
        if self.error:
            raise self.error
        return [script_row(hook=f"hook {i}", platform=platforms[i % len(platforms)]) for i in range(count)]


@pytest.fixture(name="provider")
def provider_fixture():
    # Long interval keeps detached jobs in `generating` for the duration of a request
    return StubProvider(statuses=[ProviderResponse(job_id="job-1", status="processing")])


@pytest.fixture(name="generator")
def generator_fixture():
    return StubGenerator()


@pytest.fixture(name="client")
def client_fixture(store, settings_store, provider, generator):
    orchestrator = VideoOrchestrator(
        store,
        settings_store,
        providers={"arcads": provider, "wav2lip": provider},
        poller=CompletionPoller(max_attempts=2, interval=30),
    )
    app.dependency_overrides[get_script_store] = lambda: store
    app.dependency_overrides[get_settings_store] = lambda: settings_store
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_script_generator] = lambda: generator
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_list_and_get_scripts(client, script):
    response = client.get("/api/scripts")
    assert response.status_code == 200
    assert [s["id"] for s in response.json()] == [script.id]

    response = client.get(f"/api/scripts/{script.id}")
    assert response.status_code == 200
    assert response.json()["video_status"] == "none"

    assert client.get("/api/scripts/missing").status_code == 404


def test_recent_scripts_limit(client, store):
    store.create_scripts([script_row() for _ in range(4)])
    response = client.get("/api/scripts/recent", params={"limit": 2})
    assert response.status_code == 200
    assert len(response.json()) == 2


def test_update_script_status(client, script):
    response = client.patch(f"/api/scripts/{script.id}/status", json={"status": "used"})
    assert response.status_code == 200
    assert response.json()["status"] == "used"

    assert client.patch(f"/api/scripts/{script.id}/status", json={"status": "deleted"}).status_code == 422
    assert client.patch("/api/scripts/missing/status", json={"status": "used"}).status_code == 404


def test_delete_script(client, script):
    assert client.delete(f"/api/scripts/{script.id}").status_code == 200
    assert client.delete(f"/api/scripts/{script.id}").status_code == 404


def test_export_csv(client, script):
    response = client.get("/api/scripts/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=scripts-export-" in response.headers["content-disposition"]
    assert script.id in response.text


def test_stats(client, script):
    response = client.get("/api/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["total_scripts"] == 1
    assert data["videos_generating"] == 0


def test_settings_roundtrip(client):
    response = client.get("/api/settings")
    assert response.status_code == 200
    assert response.json()["daily_script_count"] == 8
    assert "admin_email" not in response.json()

    response = client.put("/api/settings", json={"daily_script_count": 4, "preferred_provider": "wav2lip"})
    assert response.status_code == 200
    data = response.json()
    assert data["daily_script_count"] == 4
    assert data["preferred_provider"] == "wav2lip"
    assert data["auto_generate_enabled"] is True


@pytest.mark.parametrize("body", [
    {"daily_script_count": 30},
    {"wav2lip_api_url": "gpu-box:8080"},
    {"preferred_provider": "sora"},
])
def test_settings_validation(client, body):
    assert client.put("/api/settings", json=body).status_code == 422


def test_generate_video_acknowledges_accepted_job(client, script, provider, monkeypatch):
    monkeypatch.setenv("ARCADS_API_KEY", "test-key")

    response = client.post(f"/api/scripts/{script.id}/generate-video", json={"provider": "arcads"})

    assert response.status_code == 200
    assert response.json() == {"started": True, "job_id": "job-1"}
    job = client.get(f"/api/scripts/{script.id}/video").json()
    assert job["status"] == "generating"
    assert job["provider_job_id"] == "job-1"
    assert job["provider"] == "arcads"


def test_generate_video_uses_preferred_provider_by_default(client, script, settings_store):
    settings_store.update_settings({"preferred_provider": "wav2lip", "wav2lip_api_url": "http://gpu-box:8080"})

    response = client.post(f"/api/scripts/{script.id}/generate-video", json={"avatar_image_url": "https://img.test/a.png"})

    assert response.status_code == 200
    assert client.get(f"/api/scripts/{script.id}/video").json()["provider"] == "wav2lip"


def test_generate_video_rejects_duplicate(client, script, store, monkeypatch):
    monkeypatch.setenv("ARCADS_API_KEY", "test-key")
    store.claim_video_job(script.id, "arcads")

    response = client.post(f"/api/scripts/{script.id}/generate-video", json={"provider": "arcads"})

    assert response.status_code == 409
    assert store.get_script(script.id).video_status == "pending"


def test_generate_video_without_key(client, script, provider):
    response = client.post(f"/api/scripts/{script.id}/generate-video", json={"provider": "arcads"})

    assert response.status_code == 400
    assert "not configured" in response.json()["detail"]
    assert client.get(f"/api/scripts/{script.id}/video").json()["status"] == "none"
    assert provider.start_calls == []


def test_generate_video_unknown_script(client, monkeypatch):
    monkeypatch.setenv("ARCADS_API_KEY", "test-key")
    assert client.post("/api/scripts/missing/generate-video", json={"provider": "arcads"}).status_code == 404


def test_video_job_unknown_script(client):
    assert client.get("/api/scripts/missing/video").status_code == 404


def test_provider_status(client, monkeypatch):
    assert client.get("/api/providers/arcads/status").json() == {"configured": False, "enabled": True}
    monkeypatch.setenv("ARCADS_API_KEY", "test-key")
    assert client.get("/api/providers/arcads/status").json()["configured"] is True
    assert client.get("/api/providers/wav2lip/status").json() == {"configured": False, "enabled": False}
    assert client.get("/api/providers/sora/status").status_code == 422


def test_generate_scripts(client, generator):
    response = client.post(
        "/api/scripts/generate",
        json={"product_features": "zero fees", "count": 3, "platforms": ["twitter", "tiktok"]},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert len(data["scripts"]) == 3
    assert data["batch_id"] == "batch-1"
    assert data["videos_started"] == 0
    assert generator.calls == [("zero fees", 3, ["twitter", "tiktok"])]
    assert len(client.get("/api/scripts").json()) == 3


def test_generate_scripts_starts_videos_when_enabled(client, settings_store, monkeypatch):
    monkeypatch.setenv("ARCADS_API_KEY", "test-key")
    settings_store.update_settings({"auto_generate_videos": True})

    response = client.post(
        "/api/scripts/generate",
        json={"product_features": "zero fees", "count": 2, "platforms": ["tiktok"]},
    )

    data = response.json()
    assert data["videos_started"] == 2
    assert {s["video_status"] for s in data["scripts"]} == {"generating"}


def test_generate_scripts_validation(client):
    body = {"product_features": "zero fees", "count": 0, "platforms": ["tiktok"]}
    assert client.post("/api/scripts/generate", json=body).status_code == 422
    body = {"product_features": "zero fees", "count": 2, "platforms": []}
    assert client.post("/api/scripts/generate", json=body).status_code == 422


def test_generate_scripts_model_failure(client, generator):
    generator.error = ScriptGenerationError("No scripts in response")
    response = client.post(
        "/api/scripts/generate",
        json={"product_features": "zero fees", "count": 2, "platforms": ["tiktok"]},
    )
    assert response.status_code == 502


def test_trigger_daily_generation(client, monkeypatch):
    queued = []

    def fake_delay():
        queued.append(True)
        return SimpleNamespace(id="task-123")

    monkeypatch.setattr("scriptreel.routers.scripts.generate_scheduled_scripts", SimpleNamespace(delay=fake_delay))

    response = client.post("/api/trigger-daily-generation")

    assert response.status_code == 200
    assert response.json() == {"task_id": "task-123", "status": "queued"}
    assert queued == [True]
