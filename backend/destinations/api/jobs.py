"""
Job API Endpoints

Status polling for background jobs.
"""

from fastapi import APIRouter, Depends, Request

from destinations.api.deps import get_base_url, get_job_tracker
from destinations.core.exceptions import JobNotFoundException
from destinations.schemas.job import JobResponse
from destinations.services.job_tracker import JobStatus, JobTracker
from destinations.utils.hateoas import job_links

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("/{job_id}", response_model=JobResponse, response_model_exclude_none=True)
async def get_job_status(
    job_id: str,
    request: Request,
    tracker: JobTracker = Depends(get_job_tracker),
):
    """Get the status of a background job; result and error appear once it finishes."""
    job = tracker.get_job(job_id)
    if job is None:
        raise JobNotFoundException(job_id)

    body = {
        "id": job.id,
        "type": job.type,
        "status": job.status.value,
        "created_at": job.created_at,
        "updated_at": job.updated_at,
        "_links": job_links(job.id, get_base_url(request)),
    }
    if job.status == JobStatus.COMPLETED:
        body["result"] = job.result
    if job.status == JobStatus.FAILED:
        body["error"] = job.error
    return body
