from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field, model_validator

from fieldops.schemas.common import ApiModel

VariationStatus = Literal["draft", "submitted", "approved", "rejected", "completed"]
VariationPriority = Literal["low", "medium", "high"]


class VariationOut(ApiModel):
    id: str
    job_id: str | None = None
    contract_id: str | None = None
    variation_number: str | None = None
    title: str | None = None
    description: str | None = None
    amount: float | None = None
    status: VariationStatus | None = None
    priority: str | None = None
    assigned_to: str | None = None
    pricing_model: str | None = None
    subcontractor_amount: float | None = None
    labor_cost: float | None = None
    materials_client_charge: float | None = None
    materials_actual_cost: float | None = None
    is_chargeable: bool | None = None
    requires_subcontractor: bool | None = None
    client_approval_required: bool | None = None
    job_name: str | None = None
    job_address: str | None = None
    contract_title: str | None = None
    subcontractor_name: str | None = None
    created_by: str | None = None
    created_by_name: str | None = None
    assigned_to_name: str | None = None
    created_at: datetime
    updated_at: datetime


class _VariationFields(ApiModel):
    variation_number: str | None = Field(default=None, max_length=100)
    title: str | None = Field(default=None, max_length=255)
    description: str | None = None
    amount: float | None = Field(default=None, ge=0)
    priority: VariationPriority | None = None
    assigned_to: UUID | None = None
    pricing_model: str | None = Field(default=None, max_length=100)
    subcontractor_amount: float | None = Field(default=None, ge=0)
    labor_cost: float | None = Field(default=None, ge=0)
    materials_client_charge: float | None = Field(default=None, ge=0)
    materials_actual_cost: float | None = Field(default=None, ge=0)
    is_chargeable: bool | None = None
    requires_subcontractor: bool | None = None
    client_approval_required: bool | None = None


class VariationCreate(_VariationFields):
    job_id: UUID | None = None
    contract_id: UUID | None = None
    status: VariationStatus = "draft"
    priority: VariationPriority = "medium"
    is_chargeable: bool = True
    requires_subcontractor: bool = False
    client_approval_required: bool = False

    @model_validator(mode="after")
    def _require_parent(self) -> "VariationCreate":
        if self.job_id is None and self.contract_id is None:
            raise ValueError("either jobId or contractId is required")
        return self


class VariationUpdate(_VariationFields):
    status: VariationStatus | None = None
