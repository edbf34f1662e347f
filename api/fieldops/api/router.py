from fastapi import APIRouter

from fieldops.api.routes import health, jobs, sites, subcontractors, variations, workers

api_router = APIRouter()
api_router.include_router(health.router, tags=["health"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
api_router.include_router(sites.router, prefix="/sites", tags=["sites"])
api_router.include_router(variations.router, prefix="/variations", tags=["variations"])
api_router.include_router(subcontractors.router, prefix="/subcontractors", tags=["subcontractors"])
api_router.include_router(workers.router, prefix="/worker", tags=["worker"])
