from __future__ import annotations

from fieldops.migrations.registry import Migration, MigrationRegistry
from fieldops.migrations.versions import (
    v000_baseline,
    v001_add_created_by_to_jobs,
    v002_add_job_type_to_jobs,
    v003_ensure_jobs_columns,
    v004_add_radius_to_sites,
    v005_create_job_workers_and_managers,
    v006_create_site_budgets,
    v007_create_subcontractors,
    v008_add_company_id_to_subcontractor_contracts,
    v009_create_job_variations,
    v010_add_hourly_rate_to_users,
)

MIGRATIONS: tuple[Migration, ...] = (
    v000_baseline.migration,
    v001_add_created_by_to_jobs.migration,
    v002_add_job_type_to_jobs.migration,
    v003_ensure_jobs_columns.migration,
    v004_add_radius_to_sites.migration,
    v005_create_job_workers_and_managers.migration,
    v006_create_site_budgets.migration,
    v007_create_subcontractors.migration,
    v008_add_company_id_to_subcontractor_contracts.migration,
    v009_create_job_variations.migration,
    v010_add_hourly_rate_to_users.migration,
)


def build_registry() -> MigrationRegistry:
    return MigrationRegistry(MIGRATIONS)
