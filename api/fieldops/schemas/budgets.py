from datetime import datetime

from fieldops.schemas.common import ApiModel


class SiteBudgetOut(ApiModel):
    id: str
    site_id: str
    total_budget: float = 0.0
    allocated_budget: float = 0.0
    spent_budget: float = 0.0
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BudgetCategoryOut(ApiModel):
    id: str
    category_name: str
    description: str | None = None
    allocated_amount: float = 0.0
    spent_amount: float = 0.0
    is_custom: bool = False


class BudgetSummaryOut(ApiModel):
    budget: SiteBudgetOut
    categories: list[BudgetCategoryOut]
    total_expenses: float = 0.0
    remaining_budget: float = 0.0
    budget_utilization_percentage: float = 0.0
