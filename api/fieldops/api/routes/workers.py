from fastapi import APIRouter, Depends

from fieldops.api.deps import get_workers_repository
from fieldops.core.auth import Principal, UserRole
from fieldops.core.security import require_role
from fieldops.schemas.common import Envelope
from fieldops.schemas.workers import WorkerProfileOut, WorkerProfileUpdate, WorkerStatisticsOut
from fieldops.services.workers import WorkersRepository

router = APIRouter()


@router.get("/profile", response_model=Envelope[WorkerProfileOut])
async def get_profile(
    principal: Principal = Depends(require_role(UserRole.WORKER)),
    repository: WorkersRepository = Depends(get_workers_repository),
) -> Envelope[WorkerProfileOut]:
    row = await repository.get_profile(principal.company_id, principal.user_id)
    return Envelope[WorkerProfileOut](data=WorkerProfileOut(**row))


@router.patch("/profile", response_model=Envelope[WorkerProfileOut])
async def update_profile(
    payload: WorkerProfileUpdate,
    principal: Principal = Depends(require_role(UserRole.WORKER)),
    repository: WorkersRepository = Depends(get_workers_repository),
) -> Envelope[WorkerProfileOut]:
    row = await repository.update_profile(
        principal.company_id,
        principal.user_id,
        payload.model_dump(exclude_unset=True),
    )
    return Envelope[WorkerProfileOut](data=WorkerProfileOut(**row), message="Profile updated")


@router.get("/profile/stats", response_model=Envelope[WorkerStatisticsOut])
async def get_statistics(
    principal: Principal = Depends(require_role(UserRole.WORKER)),
    repository: WorkersRepository = Depends(get_workers_repository),
) -> Envelope[WorkerStatisticsOut]:
    stats = await repository.get_statistics(principal.company_id, principal.user_id)
    return Envelope[WorkerStatisticsOut](data=WorkerStatisticsOut(**stats))
