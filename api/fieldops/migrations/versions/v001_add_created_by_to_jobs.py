from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import AddRequiredColumn, CreateIndex

# Earliest-created privileged user of the job's company.
JOB_CREATOR_DEFAULT_SQL = """
select u.id
from users u
where u.company_id = jobs.company_id
  and u.role in ('company_admin', 'project_manager', 'super_admin')
order by u.created_at asc
limit 1
"""

CREATED_BY = AddRequiredColumn(
    table="jobs",
    column="created_by",
    column_type="uuid",
    default_sql=JOB_CREATOR_DEFAULT_SQL,
    references="users(id)",
)

migration = Migration(
    id="001_add_created_by_to_jobs",
    name="add created_by to jobs",
    description="Track the creator of each job; existing jobs are attributed to their company's first admin",
    steps=[
        CREATED_BY,
        CreateIndex("idx_jobs_created_by", "jobs", "created_by"),
    ],
)
