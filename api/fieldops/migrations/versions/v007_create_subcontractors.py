from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import CreateEnum, CreateTable

CONTRACT_STATUSES = ("draft", "active", "completed", "terminated", "expired")
PAYMENT_METHODS = ("cash", "check", "bank_transfer", "credit_card", "eft", "other")

migration = Migration(
    id="007_create_subcontractors",
    name="create subcontractors",
    description="Subcontractors, their contracts, and contract payments",
    steps=[
        CreateEnum("contract_status", CONTRACT_STATUSES),
        CreateEnum("payment_method", PAYMENT_METHODS),
        CreateTable(
            "subcontractors",
            [
                "id uuid primary key default gen_random_uuid()",
                "company_id uuid not null references companies(id) on delete cascade",
                "name varchar(255) not null",
                "business_name varchar(255)",
                "abn varchar(50)",
                "email varchar(255)",
                "phone varchar(50)",
                "address text",
                "trade varchar(100)",
                "description text",
                "is_active boolean default true",
                "deleted_at timestamp null",
                "created_at timestamp default current_timestamp",
                "updated_at timestamp default current_timestamp",
            ],
            indexes=[
                ("idx_subcontractors_company_id", "company_id"),
                ("idx_subcontractors_name", "name"),
                ("idx_subcontractors_trade", "trade"),
                ("idx_subcontractors_is_active", "is_active"),
                ("idx_subcontractors_deleted_at", "deleted_at"),
            ],
        ),
        CreateTable(
            "subcontractor_contracts",
            [
                "id uuid primary key default gen_random_uuid()",
                "company_id uuid not null references companies(id) on delete cascade",
                "subcontractor_id uuid not null references subcontractors(id) on delete cascade",
                "job_id uuid references jobs(id) on delete set null",
                "contract_number varchar(100)",
                "title varchar(255) not null",
                "description text",
                "contract_value decimal(15, 2)",
                "start_date date",
                "end_date date",
                "completion_date date",
                "status contract_status default 'draft'",
                "progress_percentage decimal(5, 2) default 0",
                "payment_terms text",
                "notes text",
                "deleted_at timestamp null",
                "created_at timestamp default current_timestamp",
                "updated_at timestamp default current_timestamp",
            ],
            indexes=[
                ("idx_subcontractor_contracts_company_id", "company_id"),
                ("idx_subcontractor_contracts_subcontractor_id", "subcontractor_id"),
                ("idx_subcontractor_contracts_job_id", "job_id"),
                ("idx_subcontractor_contracts_status", "status"),
                ("idx_subcontractor_contracts_contract_number", "contract_number"),
                ("idx_subcontractor_contracts_deleted_at", "deleted_at"),
            ],
        ),
        CreateTable(
            "contract_payments",
            [
                "id uuid primary key default gen_random_uuid()",
                "contract_id uuid not null references subcontractor_contracts(id) on delete cascade",
                "amount decimal(15, 2) not null",
                "payment_date date",
                "payment_method payment_method",
                "reference_number varchar(255)",
                "notes text",
                "created_at timestamp default current_timestamp",
            ],
            indexes=[
                ("idx_contract_payments_contract_id", "contract_id"),
                ("idx_contract_payments_payment_date", "payment_date"),
            ],
        ),
    ],
)
