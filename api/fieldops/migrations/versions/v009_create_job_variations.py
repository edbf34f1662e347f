from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import AddColumn, AddConstraint, CreateEnum, CreateIndex, CreateTable, ExecuteSql

VARIATION_STATUSES = ("draft", "submitted", "approved", "rejected", "completed")

JOB_ID_NULLABLE_PROBE = """
select is_nullable = 'YES'
from information_schema.columns
where table_schema = current_schema()
  and table_name = 'job_variations'
  and column_name = 'job_id'
"""

# Columns added to variations after the first release; no-ops on a table created by this migration.
EXPANDED_COLUMNS = (
    ("contract_id", "uuid references subcontractor_contracts(id) on delete cascade"),
    ("title", "varchar(255)"),
    ("priority", "varchar(50) default 'medium'"),
    ("assigned_to", "uuid references users(id)"),
    ("pricing_model", "varchar(100)"),
    ("subcontractor_amount", "decimal(15, 2)"),
    ("labor_cost", "decimal(15, 2)"),
    ("materials_client_charge", "decimal(15, 2)"),
    ("materials_actual_cost", "decimal(15, 2)"),
    ("is_chargeable", "boolean default true"),
    ("requires_subcontractor", "boolean default false"),
    ("client_approval_required", "boolean default false"),
)

migration = Migration(
    id="009_create_job_variations",
    name="create job variations",
    description="Variations against a job, a subcontractor contract, or both",
    steps=[
        CreateEnum("variation_status", VARIATION_STATUSES),
        CreateTable(
            "job_variations",
            [
                "id uuid primary key default gen_random_uuid()",
                "job_id uuid references jobs(id) on delete cascade",
                "contract_id uuid references subcontractor_contracts(id) on delete cascade",
                "created_by uuid references users(id) on delete set null",
                "assigned_to uuid references users(id)",
                "variation_number varchar(100)",
                "title varchar(255)",
                "description text",
                "amount decimal(15, 2)",
                "status variation_status default 'draft'",
                "priority varchar(50) default 'medium'",
                "pricing_model varchar(100)",
                "subcontractor_amount decimal(15, 2)",
                "labor_cost decimal(15, 2)",
                "materials_client_charge decimal(15, 2)",
                "materials_actual_cost decimal(15, 2)",
                "is_chargeable boolean default true",
                "requires_subcontractor boolean default false",
                "client_approval_required boolean default false",
                "deleted_at timestamp null",
                "created_at timestamp default current_timestamp",
                "updated_at timestamp default current_timestamp",
            ],
            indexes=[("idx_job_variations_job_id", "job_id")],
        ),
        *(AddColumn("job_variations", column, definition) for column, definition in EXPANDED_COLUMNS),
        ExecuteSql(
            "job_variations_job_id_nullable",
            "alter table job_variations alter column job_id drop not null",
            probe_sql=JOB_ID_NULLABLE_PROBE,
        ),
        AddConstraint(
            "job_variations",
            "check_job_or_contract",
            "check (job_id is not null or contract_id is not null)",
        ),
        CreateIndex("idx_job_variations_contract_id", "job_variations", "contract_id"),
        CreateIndex("idx_job_variations_assigned_to", "job_variations", "assigned_to"),
        CreateIndex("idx_job_variations_priority", "job_variations", "priority"),
        CreateIndex("idx_job_variations_status", "job_variations", "status"),
    ],
)
