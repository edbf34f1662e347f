from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from fieldops.api.deps import get_page_request, get_variations_repository
from fieldops.core.auth import ADMIN_ROLES, MANAGER_ROLES, Principal
from fieldops.core.security import require_roles
from fieldops.schemas.common import Envelope, PageEnvelope
from fieldops.schemas.variations import (
    VariationCreate,
    VariationOut,
    VariationPriority,
    VariationStatus,
    VariationUpdate,
)
from fieldops.services.query import PageRequest
from fieldops.services.variations import VariationFilters, VariationsRepository

router = APIRouter()


@router.get("", response_model=PageEnvelope[VariationOut])
async def list_variations(
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: VariationsRepository = Depends(get_variations_repository),
    page: PageRequest = Depends(get_page_request),
    status_filter: VariationStatus | None = Query(default=None, alias="status"),
    priority: VariationPriority | None = Query(default=None),
    job_id: UUID | None = Query(default=None, alias="jobId"),
    contract_id: UUID | None = Query(default=None, alias="contractId"),
    assigned_to: UUID | None = Query(default=None, alias="assignedTo"),
    search: str | None = Query(default=None),
) -> PageEnvelope[VariationOut]:
    filters = VariationFilters(
        status=status_filter,
        priority=priority,
        job_id=str(job_id) if job_id else None,
        contract_id=str(contract_id) if contract_id else None,
        assigned_to=str(assigned_to) if assigned_to else None,
        search=search,
    )
    result = await repository.list_variations(principal.company_id, filters, page)
    return PageEnvelope[VariationOut](**result)


@router.post("", response_model=Envelope[VariationOut], status_code=status.HTTP_201_CREATED)
async def create_variation(
    payload: VariationCreate,
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: VariationsRepository = Depends(get_variations_repository),
) -> Envelope[VariationOut]:
    row = await repository.create_variation(principal.company_id, principal.user_id, payload.model_dump())
    return Envelope[VariationOut](data=VariationOut(**row), message="Variation created")


@router.get("/{variation_id}", response_model=Envelope[VariationOut])
async def get_variation(
    variation_id: UUID,
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: VariationsRepository = Depends(get_variations_repository),
) -> Envelope[VariationOut]:
    row = await repository.get_variation(principal.company_id, str(variation_id))
    return Envelope[VariationOut](data=VariationOut(**row))


@router.patch("/{variation_id}", response_model=Envelope[VariationOut])
async def update_variation(
    variation_id: UUID,
    payload: VariationUpdate,
    principal: Principal = Depends(require_roles(MANAGER_ROLES)),
    repository: VariationsRepository = Depends(get_variations_repository),
) -> Envelope[VariationOut]:
    row = await repository.update_variation(
        principal.company_id,
        str(variation_id),
        payload.model_dump(exclude_unset=True),
    )
    return Envelope[VariationOut](data=VariationOut(**row), message="Variation updated")


@router.delete("/{variation_id}", response_model=Envelope[None])
async def delete_variation(
    variation_id: UUID,
    principal: Principal = Depends(require_roles(ADMIN_ROLES)),
    repository: VariationsRepository = Depends(get_variations_repository),
) -> Envelope[None]:
    await repository.delete_variation(principal.company_id, str(variation_id))
    return Envelope[None](data=None, message="Variation deleted")
