from fieldops.migrations.registry import Migration
from fieldops.migrations.steps import AddColumn

migration = Migration(
    id="004_add_radius_to_sites",
    name="add radius to sites",
    description="Geofence radius in metres for location-based check-ins",
    steps=[
        AddColumn(
            "sites",
            "radius",
            "decimal(10, 2) default 100.00",
            backfill_sql="update sites set radius = 100.00 where radius is null",
        ),
    ],
)
