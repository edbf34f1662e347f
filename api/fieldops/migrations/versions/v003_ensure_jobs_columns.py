from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import AddColumn, AddRequiredColumn
from fieldops.migrations.versions.v001_add_created_by_to_jobs import JOB_CREATOR_DEFAULT_SQL

migration = Migration(
    id="003_ensure_jobs_columns",
    name="ensure jobs columns",
    description="Add any jobs column an older schema is missing",
    steps=[
        # Columns owned by 000 and 002 survive a rollback of this migration.
        AddColumn("jobs", "job_number", "varchar(100)", keep_on_revert=True),
        AddColumn("jobs", "description", "text", keep_on_revert=True),
        AddColumn("jobs", "job_type", "varchar(100)", keep_on_revert=True),
        AddColumn("jobs", "status", "job_status", keep_on_revert=True),
        AddColumn("jobs", "priority", "priority_level"),
        AddColumn("jobs", "start_date", "timestamp", keep_on_revert=True),
        AddColumn("jobs", "end_date", "timestamp", keep_on_revert=True),
        AddColumn("jobs", "completed_date", "timestamp"),
        AddColumn("jobs", "assigned_to", "uuid references users(id) on delete set null"),
        AddRequiredColumn(
            table="jobs",
            column="created_by",
            column_type="uuid",
            default_sql=JOB_CREATOR_DEFAULT_SQL,
            references="users(id)",
            keep_on_revert=True,
        ),
        AddColumn("jobs", "deleted_at", "timestamp", keep_on_revert=True),
        AddColumn("jobs", "created_at", "timestamp not null default current_timestamp", keep_on_revert=True),
        AddColumn("jobs", "updated_at", "timestamp not null default current_timestamp", keep_on_revert=True),
    ],
)
