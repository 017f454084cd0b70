"""Tests for POST /api/process, GET/DELETE /api/download and GET /api/jobs/{id}."""

from pathlib import Path

import httpx
import pytest

from app.main import create_app
from conftest import FakeRunner, exited
from services.store import jobs


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def client_factory(make_pipeline, runner: FakeRunner):
    def _client(**overrides) -> httpx.AsyncClient:
        app = create_app(make_pipeline(runner, **overrides))
        transport = httpx.ASGITransport(app=app)
        return httpx.AsyncClient(transport=transport, base_url="http://test")

    return _client


PAYLOAD = {"url": "https://example/video", "start": 30, "end": 40, "title": "Hi: there"}


@pytest.mark.anyio
async def test_process_then_download_with_cleanup(client_factory, runner: FakeRunner) -> None:
    async with client_factory() as client:
        response = await client.post("/api/process", json=PAYLOAD)
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        artifact = Path(body["artifact_path"])
        workspace = Path(body["workspace_handle"])
        assert artifact.parent == workspace
        assert artifact.exists()

        render = runner.args_for("render")
        assert "text='Hi\\: there'" in render[render.index("-vf") + 1]

        download = await client.get(
            "/api/download",
            params={"artifact_path": str(artifact), "workspace_handle": str(workspace), "cleanup": "1"},
        )

    assert download.status_code == 200
    assert download.headers["content-type"] == "video/mp4"
    assert download.headers["content-disposition"] == "attachment; filename=output_1080x1920.mp4"
    assert download.content == b"fake render output"
    assert not artifact.exists()
    assert not workspace.exists()


@pytest.mark.anyio
async def test_download_without_cleanup_keeps_files(client_factory) -> None:
    async with client_factory() as client:
        body = (await client.post("/api/process", json=PAYLOAD)).json()
        response = await client.get("/api/download", params={"artifact_path": body["artifact_path"]})
    assert response.status_code == 200
    assert Path(body["artifact_path"]).exists()


@pytest.mark.anyio
async def test_missing_title_is_400_without_workspace(client_factory, workspace_root: Path, runner) -> None:
    payload = {k: v for k, v in PAYLOAD.items() if k != "title"}
    async with client_factory() as client:
        response = await client.post("/api/process", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing required fields: url, start, end, title"
    assert runner.calls == []
    assert not workspace_root.exists() or list(workspace_root.iterdir()) == []


@pytest.mark.anyio
async def test_inverted_range_is_400(client_factory) -> None:
    async with client_factory() as client:
        response = await client.post("/api/process", json={**PAYLOAD, "start": 40, "end": 30})
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid time range")


@pytest.mark.anyio
async def test_retrieval_failure_is_500_with_excerpt(make_pipeline) -> None:
    runner = FakeRunner({"fetch": [exited(1, stderr="ERROR: Unsupported URL")]})
    app = create_app(make_pipeline(runner))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.post("/api/process", json=PAYLOAD)
        assert response.status_code == 500
        assert response.json()["detail"] == "yt-dlp failed (code 1): ERROR: Unsupported URL"

        (job_id,) = jobs.keys()
        job = await client.get(f"/api/jobs/{job_id}")
    assert job.status_code == 200
    assert job.json()["status"] == "failed"
    assert job.json()["workspace_handle"]


@pytest.mark.anyio
async def test_download_requires_artifact_path(client_factory) -> None:
    async with client_factory() as client:
        response = await client.get("/api/download")
    assert response.status_code == 400


@pytest.mark.anyio
async def test_download_of_missing_file_is_500(client_factory, make_pipeline, runner) -> None:
    workspace = make_pipeline(runner).workspace.allocate()
    async with client_factory() as client:
        response = await client.get(
            "/api/download", params={"artifact_path": str(workspace / "output_1080x1920.mp4")}
        )
    assert response.status_code == 500
    assert response.json()["detail"].startswith("Failed to create file stream")


@pytest.mark.anyio
async def test_delete_is_204_and_idempotent(client_factory) -> None:
    async with client_factory() as client:
        body = (await client.post("/api/process", json=PAYLOAD)).json()
        params = {"artifact_path": body["artifact_path"], "workspace_handle": body["workspace_handle"]}
        first = await client.delete("/api/download", params=params)
        second = await client.delete("/api/download", params=params)
    assert first.status_code == 204
    assert second.status_code == 204
    assert not Path(body["workspace_handle"]).exists()


@pytest.mark.anyio
async def test_delete_requires_both_params(client_factory) -> None:
    async with client_factory() as client:
        response = await client.delete("/api/download", params={"artifact_path": "/tmp/x.mp4"})
    assert response.status_code == 400


@pytest.mark.anyio
async def test_get_job_completed_and_unknown(client_factory) -> None:
    async with client_factory() as client:
        body = (await client.post("/api/process", json=PAYLOAD)).json()
        found = await client.get(f"/api/jobs/{body['job_id']}")
        missing = await client.get("/api/jobs/nope")
    assert found.json()["status"] == "completed"
    assert found.json()["artifact_path"] == body["artifact_path"]
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Job not found"


@pytest.mark.anyio
async def test_numeric_title_is_accepted(client_factory, runner: FakeRunner) -> None:
    async with client_factory() as client:
        response = await client.post("/api/process", json={**PAYLOAD, "title": 2024})
    assert response.status_code == 200
    render = runner.args_for("render")
    assert "text='2024'" in render[render.index("-vf") + 1]


@pytest.mark.anyio
async def test_missing_url_with_numeric_title_is_400(client_factory, runner: FakeRunner) -> None:
    async with client_factory() as client:
        response = await client.post("/api/process", json={**PAYLOAD, "url": None, "title": 7})
    assert response.status_code == 400
    assert runner.calls == []


@pytest.mark.anyio
async def test_negative_zero_start_downloads_from_beginning(client_factory, runner: FakeRunner) -> None:
    async with client_factory() as client:
        response = await client.post("/api/process", json={**PAYLOAD, "start": "-0", "end": 5})
    assert response.status_code == 200
    fetch = runner.args_for("fetch")
    assert fetch[fetch.index("--download-sections") + 1] == "*0-5"


@pytest.mark.anyio
async def test_delete_forgets_the_job(client_factory) -> None:
    async with client_factory() as client:
        body = (await client.post("/api/process", json=PAYLOAD)).json()
        assert body["job_id"] in jobs
        await client.delete(
            "/api/download",
            params={"artifact_path": body["artifact_path"], "workspace_handle": body["workspace_handle"]},
        )
        found = await client.get(f"/api/jobs/{body['job_id']}")
    assert body["job_id"] not in jobs
    assert found.status_code == 404
