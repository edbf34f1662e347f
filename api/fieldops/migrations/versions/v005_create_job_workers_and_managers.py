from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import CreateEnum, CreateIndex, CreateTable
from fieldops.migrations.versions.v000_baseline import (
    JOB_STATUSES,
    PRIORITY_LEVELS,
    SITE_STATUSES,
    TASK_STATUSES,
    TEAM_MEMBER_ROLES,
    USER_ROLES,
)

JOB_INDEXES = (
    ("idx_jobs_company_id", "company_id"),
    ("idx_jobs_site_id", "site_id"),
    ("idx_jobs_assigned_to", "assigned_to"),
    ("idx_jobs_created_by", "created_by"),
    ("idx_jobs_status", "status"),
    ("idx_jobs_priority", "priority"),
    ("idx_jobs_job_type", "job_type"),
    ("idx_jobs_job_number", "job_number"),
    ("idx_jobs_deleted_at", "deleted_at"),
)


def _assignment_table(table: str) -> CreateTable:
    return CreateTable(
        table,
        [
            "id uuid primary key default gen_random_uuid()",
            "job_id uuid not null references jobs(id) on delete cascade",
            "user_id uuid not null references users(id) on delete cascade",
            "created_at timestamp default current_timestamp",
            "unique (job_id, user_id)",
        ],
        indexes=[
            (f"idx_{table}_job_id", "job_id"),
            (f"idx_{table}_user_id", "user_id"),
        ],
    )


migration = Migration(
    id="005_create_job_workers_and_managers",
    name="create job_workers and job_managers",
    description="Job assignment tables, teams, and the job lookup indexes",
    steps=[
        # Shared enums are owned by the baseline and survive a rollback of this migration.
        CreateEnum("user_role", USER_ROLES, keep_on_revert=True),
        CreateEnum("team_member_role", TEAM_MEMBER_ROLES, keep_on_revert=True),
        CreateEnum("site_status", SITE_STATUSES, keep_on_revert=True),
        CreateEnum("job_status", JOB_STATUSES, keep_on_revert=True),
        CreateEnum("priority_level", PRIORITY_LEVELS, keep_on_revert=True),
        CreateEnum("task_status", TASK_STATUSES, keep_on_revert=True),
        CreateTable(
            "teams",
            [
                "id uuid primary key default gen_random_uuid()",
                "company_id uuid not null references companies(id) on delete cascade",
                "name varchar(255) not null",
                "description text",
                "deleted_at timestamp null",
                "created_at timestamp default current_timestamp",
                "updated_at timestamp default current_timestamp",
            ],
            indexes=[
                ("idx_teams_company_id", "company_id"),
                ("idx_teams_deleted_at", "deleted_at"),
            ],
        ),
        CreateTable(
            "team_members",
            [
                "id uuid primary key default gen_random_uuid()",
                "team_id uuid not null references teams(id) on delete cascade",
                "user_id uuid not null references users(id) on delete cascade",
                "role team_member_role",
                "deleted_at timestamp null",
                "created_at timestamp default current_timestamp",
                "unique (team_id, user_id)",
            ],
            indexes=[
                ("idx_team_members_team_id", "team_id"),
                ("idx_team_members_user_id", "user_id"),
                ("idx_team_members_deleted_at", "deleted_at"),
            ],
        ),
        _assignment_table("job_workers"),
        _assignment_table("job_managers"),
        *(CreateIndex(name, "jobs", columns, keep_on_revert=True) for name, columns in JOB_INDEXES),
    ],
)
