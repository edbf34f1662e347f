from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import CreateEnum, CreateTable

USER_ROLES = (
    "super_admin",
    "company_admin",
    "project_manager",
    "site_supervisor",
    "foreman",
    "worker",
    "subcontractor",
    "viewer",
)
TEAM_MEMBER_ROLES = ("lead", "member", "viewer")
SITE_STATUSES = ("planning", "active", "on_hold", "completed", "archived")
JOB_STATUSES = ("draft", "planned", "in_progress", "on_hold", "completed", "cancelled", "archived")
TASK_STATUSES = ("pending", "in_progress", "completed", "cancelled", "blocked")
PRIORITY_LEVELS = ("low", "medium", "high", "urgent", "critical")
SEVERITY_LEVELS = ("minor", "moderate", "major", "critical", "fatal")
SAFETY_STATUSES = ("open", "investigating", "resolved", "closed")

TIMESTAMPS = (
    "deleted_at timestamp null",
    "created_at timestamp not null default current_timestamp",
    "updated_at timestamp not null default current_timestamp",
)

migration = Migration(
    id="000_baseline",
    name="baseline",
    description="Core enums and tables: companies, users, sites, jobs, job_tasks, safety_incidents",
    steps=[
        CreateEnum("user_role", USER_ROLES),
        CreateEnum("team_member_role", TEAM_MEMBER_ROLES),
        CreateEnum("site_status", SITE_STATUSES),
        CreateEnum("job_status", JOB_STATUSES),
        CreateEnum("task_status", TASK_STATUSES),
        CreateEnum("priority_level", PRIORITY_LEVELS),
        CreateEnum("severity_level", SEVERITY_LEVELS),
        CreateEnum("safety_status", SAFETY_STATUSES),
        CreateTable(
            "companies",
            [
                "id uuid primary key default gen_random_uuid()",
                "name varchar(255) not null",
                "email varchar(255)",
                "phone varchar(50)",
                "address text",
                *TIMESTAMPS,
            ],
        ),
        CreateTable(
            "users",
            [
                "id uuid primary key default gen_random_uuid()",
                "company_id uuid not null references companies(id) on delete cascade",
                "email varchar(255) unique not null",
                "password_hash varchar(255) not null",
                "first_name varchar(100)",
                "last_name varchar(100)",
                "phone varchar(50)",
                "role user_role not null",
                "is_active boolean default true",
                *TIMESTAMPS,
            ],
            indexes=[
                ("idx_users_company_id", "company_id"),
                ("idx_users_role", "role"),
            ],
        ),
        CreateTable(
            "sites",
            [
                "id uuid primary key default gen_random_uuid()",
                "company_id uuid not null references companies(id) on delete cascade",
                "name varchar(255) not null",
                "address text",
                "latitude decimal(10, 8)",
                "longitude decimal(11, 8)",
                "status site_status",
                *TIMESTAMPS,
            ],
            indexes=[("idx_sites_company_id", "company_id")],
        ),
        CreateTable(
            "jobs",
            [
                "id uuid primary key default gen_random_uuid()",
                "company_id uuid not null references companies(id) on delete cascade",
                "site_id uuid references sites(id) on delete set null",
                "job_number varchar(100)",
                "name varchar(255) not null",
                "description text",
                "status job_status",
                "start_date date",
                "end_date date",
                *TIMESTAMPS,
            ],
        ),
        CreateTable(
            "job_tasks",
            [
                "id uuid primary key default gen_random_uuid()",
                "job_id uuid not null references jobs(id) on delete cascade",
                "assigned_to uuid references users(id) on delete set null",
                "title varchar(255) not null",
                "description text",
                "status task_status",
                "priority priority_level",
                "due_date date",
                *TIMESTAMPS,
            ],
            indexes=[
                ("idx_job_tasks_job_id", "job_id"),
                ("idx_job_tasks_assigned_to", "assigned_to"),
            ],
        ),
        CreateTable(
            "safety_incidents",
            [
                "id uuid primary key default gen_random_uuid()",
                "job_id uuid references jobs(id) on delete set null",
                "site_id uuid references sites(id) on delete set null",
                "reported_by uuid references users(id) on delete set null",
                "incident_date timestamp not null",
                "description text not null",
                "severity severity_level",
                "status safety_status",
                *TIMESTAMPS,
            ],
            indexes=[("idx_safety_incidents_reported_by", "reported_by")],
        ),
    ],
)
