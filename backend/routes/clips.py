"""Clip REST API: submit a job, download the result, tear down its workspace."""

import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request, Response
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from models import ClipJob, JobStatus
from services.delivery import ArtifactDelivery
from services.errors import ClipError
from services.pipeline import ClipPipeline
from services.store import forget_workspace, jobs, remember_job

router = APIRouter(tags=["clips"])
logger = logging.getLogger(__name__)


class ProcessRequest(BaseModel):
    """Fields are optional here so missing ones surface as a 400 from validation, not a 422."""

    model_config = ConfigDict(populate_by_name=True)

    url: Any = None
    start: Any = None
    end: Any = None
    title: Any = None
    start_time: str | None = Field(default=None, alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")


class ProcessResponse(BaseModel):
    ok: bool = True
    job_id: str
    artifact_path: str
    workspace_handle: str


class JobReadResponse(BaseModel):
    job_id: str
    status: JobStatus
    error: str | None = None
    workspace_handle: str | None = None
    artifact_path: str | None = None


def get_pipeline(request: Request) -> ClipPipeline:
    return request.app.state.pipeline


def get_delivery(request: Request) -> ArtifactDelivery:
    return request.app.state.delivery


@router.post("/process", response_model=ProcessResponse)
async def process_clip(body: ProcessRequest, request: Request) -> ProcessResponse:
    """Run the whole pipeline and return where the rendered clip lives."""
    job = ClipJob(
        id=uuid.uuid4().hex,
        url=body.url,
        start=body.start,
        end=body.end,
        title=body.title,
        start_label=body.start_time,
        end_label=body.end_time,
    )
    remember_job(job)
    logger.info("[clips] POST /api/process job_id=%s url=%s", job.id, body.url)
    try:
        artifact = await get_pipeline(request).run(job)
    except ClipError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return ProcessResponse(
        job_id=job.id,
        artifact_path=str(artifact.file_path),
        workspace_handle=str(artifact.workspace),
    )


@router.get("/download")
def download_clip(
    request: Request,
    artifact_path: str | None = Query(None, description="Rendered file returned by /process"),
    workspace_handle: str | None = Query(None, description="Workspace returned by /process"),
    cleanup: bool = Query(False, description="Delete file and workspace once streamed"),
) -> StreamingResponse:
    logger.info("[clips] GET /api/download file=%s cleanup=%s", artifact_path, cleanup)
    if not artifact_path:
        raise HTTPException(status_code=400, detail="Missing artifact_path parameter")
    try:
        return get_delivery(request).stream(artifact_path, workspace_handle, cleanup=cleanup)
    except ClipError as exc:
        logger.error("[clips] Download failed for %s: %s", artifact_path, exc)
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.delete("/download", status_code=204)
def delete_clip(
    request: Request,
    artifact_path: str | None = Query(None),
    workspace_handle: str | None = Query(None),
) -> Response:
    logger.info("[clips] DELETE /api/download file=%s workspace=%s", artifact_path, workspace_handle)
    if not artifact_path or not workspace_handle:
        raise HTTPException(status_code=400, detail="Missing artifact_path or workspace_handle parameters")
    get_delivery(request).delete_explicit(artifact_path, workspace_handle)
    forget_workspace(workspace_handle)
    return Response(status_code=204)


@router.get("/jobs/{job_id}", response_model=JobReadResponse)
def get_job(job_id: str) -> JobReadResponse:
    """Job status, mainly for inspecting failed runs whose workspace was kept."""
    job = jobs.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobReadResponse(
        job_id=job.id,
        status=job.status,
        error=job.error,
        workspace_handle=str(job.workspace) if job.workspace else None,
        artifact_path=str(job.artifact.file_path) if job.artifact else None,
    )
