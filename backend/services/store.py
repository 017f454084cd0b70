"""In-memory job registry. Keyed by job ID, oldest entries evicted first."""

from pathlib import Path

from models.job import ClipJob

MAX_JOBS = 500

jobs: dict[str, ClipJob] = {}


def remember_job(job: ClipJob, *, limit: int = MAX_JOBS) -> None:
    jobs[job.id] = job
    while len(jobs) > limit:
        # dicts keep insertion order, so the first key is the oldest job
        jobs.pop(next(iter(jobs)))


def forget_workspace(workspace: Path | str) -> None:
    """Drop every job whose workspace is ``workspace``."""
    target = Path(workspace)
    for job_id in [j.id for j in jobs.values() if j.workspace is not None and j.workspace == target]:
        jobs.pop(job_id, None)
