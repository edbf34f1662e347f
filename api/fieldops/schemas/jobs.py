from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from fieldops.schemas.common import ApiModel

JobStatus = Literal["draft", "planned", "in_progress", "on_hold", "completed", "cancelled", "archived"]
Priority = Literal["low", "medium", "high", "urgent", "critical"]
TaskStatus = Literal["pending", "in_progress", "completed", "cancelled", "blocked"]


class JobOut(ApiModel):
    id: str
    name: str
    description: str | None = None
    job_number: str | None = None
    job_type: str | None = None
    status: JobStatus | None = None
    priority: Priority | None = None
    start_date: date | datetime | None = None
    end_date: date | datetime | None = None
    completed_date: date | datetime | None = None
    assigned_to: str | None = None
    assigned_to_name: str | None = None
    site_id: str | None = None
    site_name: str | None = None
    site_address: str | None = None
    created_by: str | None = None
    created_by_name: str | None = None
    created_at: datetime
    updated_at: datetime


class JobCreate(ApiModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    job_number: str | None = Field(default=None, max_length=100)
    job_type: str | None = Field(default=None, max_length=100)
    status: JobStatus = "draft"
    priority: Priority = "medium"
    site_id: UUID | None = None
    assigned_to: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None


class JobUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    job_number: str | None = Field(default=None, max_length=100)
    job_type: str | None = Field(default=None, max_length=100)
    status: JobStatus | None = None
    priority: Priority | None = None
    site_id: UUID | None = None
    assigned_to: UUID | None = None
    start_date: date | None = None
    end_date: date | None = None
    completed_date: datetime | None = None


class JobTaskOut(ApiModel):
    id: str
    job_id: str
    title: str
    description: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    due_date: date | None = None
    assigned_to: str | None = None
    assigned_to_name: str | None = None
    created_at: datetime
    updated_at: datetime


class JobTaskCreate(ApiModel):
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus = "pending"
    priority: Priority = "medium"
    due_date: date | None = None
    assigned_to: UUID | None = None


class JobWorkerOut(ApiModel):
    id: str
    name: str | None = None
    email: str
    role: str
    phone: str | None = None
    assigned_at: datetime | None = None
