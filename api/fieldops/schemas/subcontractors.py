from datetime import date, datetime
from typing import Literal

from fieldops.schemas.common import ApiModel

ContractStatus = Literal["draft", "active", "completed", "terminated", "expired"]


class SubcontractorOut(ApiModel):
    id: str
    name: str
    business_name: str | None = None
    abn: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    trade: str | None = None
    description: str | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime


class SubcontractorDetailOut(SubcontractorOut):
    active_contracts: int = 0
    active_contract_value: float = 0.0


class ContractOut(ApiModel):
    id: str
    subcontractor_id: str
    job_id: str | None = None
    job_name: str | None = None
    contract_number: str | None = None
    title: str
    description: str | None = None
    contract_value: float | None = None
    start_date: date | None = None
    end_date: date | None = None
    completion_date: date | None = None
    status: ContractStatus | None = None
    progress_percentage: float | None = None
    payment_terms: str | None = None
    notes: str | None = None
    total_paid: float = 0.0
    created_at: datetime
    updated_at: datetime
