from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from fieldops.api.deps import get_jobs_repository, get_page_request
from fieldops.core.auth import ADMIN_ROLES, FIELD_ROLES, MANAGER_ROLES, Principal
from fieldops.core.security import require_roles
from fieldops.schemas.common import Envelope, PageEnvelope
from fieldops.schemas.jobs import (
    JobCreate,
    JobOut,
    JobStatus,
    JobTaskCreate,
    JobTaskOut,
    JobUpdate,
    JobWorkerOut,
    Priority,
)
from fieldops.services.jobs import JobFilters, JobsRepository
from fieldops.services.query import PageRequest

router = APIRouter()


@router.get("", response_model=PageEnvelope[JobOut])
async def list_jobs(
    principal: Principal = Depends(require_roles(FIELD_ROLES)),
    repository: JobsRepository = Depends(get_jobs_repository),
    page: PageRequest = Depends(get_page_request),
    status_filter: JobStatus | None = Query(default=None, alias="status"),
    priority: Priority | None = Query(default=None),
    site_id: UUID | None = Query(default=None, alias="siteId"),
    assigned_to: UUID | None = Query(default=None, alias="assignedTo"),
    job_type: str | None = Query(default=None, alias="jobType"),
    search: str | None = Query(default=None),
) -> PageEnvelope[JobOut]:
    filters = JobFilters(
        status=status_filter,
        priority=priority,
        site_id=str(site_id) if site_id else None,
        assigned_to=str(assigned_to) if assigned_to else None,
        job_type=job_type,
        search=search,
    )
    result = await repository.list_jobs(principal.company_id, filters, page)
    return PageEnvelope[JobOut](**result)


@router.get("/summary/status-counts", response_model=Envelope[dict[str, int]])
async def job_status_counts(
    principal: Principal = Depends(require_roles(FIELD_ROLES)),
    repository: JobsRepository = Depends(get_jobs_repository),
) -> Envelope[dict[str, int]]:
    counts = await repository.count_jobs_by_status(principal.company_id)
    return Envelope[dict[str, int]](data=counts)


@router.post("", response_model=Envelope[JobOut], status_code=status.HTTP_201_CREATED)
async def create_job(
    payload: JobCreate,
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: JobsRepository = Depends(get_jobs_repository),
) -> Envelope[JobOut]:
    row = await repository.create_job(principal.company_id, principal.user_id, payload.model_dump())
    return Envelope[JobOut](data=JobOut(**row), message="Job created")


@router.get("/{job_id}", response_model=Envelope[JobOut])
async def get_job(
    job_id: UUID,
    principal: Principal = Depends(require_roles(FIELD_ROLES)),
    repository: JobsRepository = Depends(get_jobs_repository),
) -> Envelope[JobOut]:
    row = await repository.get_job(principal.company_id, str(job_id))
    return Envelope[JobOut](data=JobOut(**row))


@router.patch("/{job_id}", response_model=Envelope[JobOut])
async def update_job(
    job_id: UUID,
    payload: JobUpdate,
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: JobsRepository = Depends(get_jobs_repository),
) -> Envelope[JobOut]:
    row = await repository.update_job(principal.company_id, str(job_id), payload.model_dump(exclude_unset=True))
    return Envelope[JobOut](data=JobOut(**row), message="Job updated")


@router.delete("/{job_id}", response_model=Envelope[None])
async def delete_job(
    job_id: UUID,
    principal: Principal = Depends(require_roles(ADMIN_ROLES)),
    repository: JobsRepository = Depends(get_jobs_repository),
) -> Envelope[None]:
    await repository.delete_job(principal.company_id, str(job_id))
    return Envelope[None](data=None, message="Job deleted")


@router.get("/{job_id}/tasks", response_model=Envelope[list[JobTaskOut]])
async def list_job_tasks(
    job_id: UUID,
    principal: Principal = Depends(require_roles(FIELD_ROLES)),
    repository: JobsRepository = Depends(get_jobs_repository),
) -> Envelope[list[JobTaskOut]]:
    rows = await repository.list_job_tasks(principal.company_id, str(job_id))
    return Envelope[list[JobTaskOut]](data=[JobTaskOut(**row) for row in rows])


@router.post("/{job_id}/tasks", response_model=Envelope[JobTaskOut], status_code=status.HTTP_201_CREATED)
async def create_job_task(
    job_id: UUID,
    payload: JobTaskCreate,
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: JobsRepository = Depends(get_jobs_repository),
) -> Envelope[JobTaskOut]:
    row = await repository.create_job_task(principal.company_id, str(job_id), payload.model_dump())
    return Envelope[JobTaskOut](data=JobTaskOut(**row), message="Task created")


@router.get("/{job_id}/workers", response_model=Envelope[list[JobWorkerOut]])
async def list_job_workers(
    job_id: UUID,
    principal: Principal = Depends(require_roles(FIELD_ROLES)),
    repository: JobsRepository = Depends(get_jobs_repository),
) -> Envelope[list[JobWorkerOut]]:
    rows = await repository.list_job_workers(principal.company_id, str(job_id))
    return Envelope[list[JobWorkerOut]](data=[JobWorkerOut(**row) for row in rows])
