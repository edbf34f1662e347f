from datetime import datetime

from pydantic import Field

from fieldops.schemas.common import ApiModel


class WorkerProfileOut(ApiModel):
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    role: str
    phone: str | None = None
    hourly_rate: float | None = None
    company_id: str
    company_name: str | None = None
    is_active: bool = True
    created_at: datetime


class WorkerProfileUpdate(ApiModel):
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=50)


class WorkerStatisticsOut(ApiModel):
    total_jobs_assigned: int = 0
    completed_jobs: int = 0
    active_jobs: int = 0
    safety_incidents_reported: int = 0
    tasks_completed: int = 0
