from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import AddColumn

migration = Migration(
    id="002_add_job_type_to_jobs",
    name="add job_type to jobs",
    steps=[
        AddColumn("jobs", "job_type", "varchar(100)"),
    ],
)
