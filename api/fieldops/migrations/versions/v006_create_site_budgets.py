from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import CreateTable

migration = Migration(
    id="006_create_site_budgets",
    name="create site budgets",
    steps=[
        CreateTable(
            "site_budgets",
            [
                "id uuid primary key default gen_random_uuid()",
                "site_id uuid unique not null references sites(id) on delete cascade",
                "company_id uuid not null references companies(id) on delete cascade",
                "total_budget decimal(15, 2) not null default 0",
                "allocated_budget decimal(15, 2) default 0",
                "spent_budget decimal(15, 2) default 0",
                "created_by uuid references users(id) on delete set null",
                "deleted_at timestamp null",
                "created_at timestamp default current_timestamp",
                "updated_at timestamp default current_timestamp",
            ],
            indexes=[
                ("idx_site_budgets_site_id", "site_id"),
                ("idx_site_budgets_company_id", "company_id"),
                ("idx_site_budgets_deleted_at", "deleted_at"),
            ],
        ),
        CreateTable(
            "site_budget_categories",
            [
                "id uuid primary key default gen_random_uuid()",
                "site_budget_id uuid not null references site_budgets(id) on delete cascade",
                "category_name varchar(255) not null",
                "description text",
                "allocated_amount decimal(15, 2) not null default 0",
                "spent_amount decimal(15, 2) default 0",
                "is_custom boolean default false",
                "deleted_at timestamp null",
                "created_at timestamp default current_timestamp",
                "updated_at timestamp default current_timestamp",
            ],
            indexes=[
                ("idx_site_budget_categories_site_budget_id", "site_budget_id"),
                ("idx_site_budget_categories_deleted_at", "deleted_at"),
            ],
        ),
        CreateTable(
            "site_budget_expenses",
            [
                "id uuid primary key default gen_random_uuid()",
                "site_budget_id uuid not null references site_budgets(id) on delete cascade",
                "category_id uuid references site_budget_categories(id) on delete set null",
                "expense_name varchar(255) not null",
                "description text",
                "amount decimal(15, 2) not null",
                "expense_date date not null",
                "vendor varchar(255)",
                "receipt_url text",
                "created_by uuid references users(id) on delete set null",
                "deleted_at timestamp null",
                "created_at timestamp default current_timestamp",
                "updated_at timestamp default current_timestamp",
            ],
            indexes=[
                ("idx_site_budget_expenses_site_budget_id", "site_budget_id"),
                ("idx_site_budget_expenses_category_id", "category_id"),
                ("idx_site_budget_expenses_expense_date", "expense_date"),
                ("idx_site_budget_expenses_deleted_at", "deleted_at"),
            ],
        ),
    ],
)
