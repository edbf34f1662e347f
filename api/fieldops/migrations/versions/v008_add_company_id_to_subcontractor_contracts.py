from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import AddConstraint, AddRequiredColumn, CreateIndex

# 007 declares the column, its foreign key and its index inline; reverting this
# migration leaves them in place.
migration = Migration(
    id="008_add_company_id_to_subcontractor_contracts",
    name="add company_id to subcontractor_contracts",
    description="Contracts created before tenant scoping inherit their subcontractor's company",
    steps=[
        AddRequiredColumn(
            table="subcontractor_contracts",
            column="company_id",
            column_type="uuid",
            default_sql=(
                "select s.company_id from subcontractors s "
                "where s.id = subcontractor_contracts.subcontractor_id"
            ),
            keep_on_revert=True,
        ),
        AddConstraint(
            "subcontractor_contracts",
            "subcontractor_contracts_company_id_fkey",
            "foreign key (company_id) references companies(id) on delete cascade",
            keep_on_revert=True,
        ),
        CreateIndex(
            "idx_subcontractor_contracts_company_id",
            "subcontractor_contracts",
            "company_id",
            keep_on_revert=True,
        ),
    ],
)
