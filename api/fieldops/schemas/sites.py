from datetime import date, datetime
from typing import Literal

from fieldops.schemas.common import ApiModel

SiteStatus = Literal["planning", "active", "on_hold", "completed", "archived"]


class SiteListItemOut(ApiModel):
    id: str
    site_name: str
    location: str
    latitude: float | None = None
    longitude: float | None = None
    status: str
    jobs: int = 0
    workers: int = 0


class SiteOut(ApiModel):
    id: str
    site_name: str
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    radius: float | None = None
    status: SiteStatus | None = None
    created_at: datetime
    updated_at: datetime


class SiteJobOut(ApiModel):
    id: str
    job_title: str
    job_type: str | None = None
    status: str | None = None
    priority: str | None = None
    start_time: date | datetime | None = None
    end_time: date | datetime | None = None
    address: str | None = None


class SiteWorkerOut(ApiModel):
    id: str
    name: str | None = None
    role: str
    phone: str | None = None
