from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import AddColumn

migration = Migration(
    id="010_add_hourly_rate_to_users",
    name="add hourly_rate to users",
    steps=[
        AddColumn("users", "hourly_rate", "decimal(10, 2)"),
    ],
)
