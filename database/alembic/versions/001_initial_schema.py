"""Initial schema for the motorcycle component catalog

Revision ID: 001_initial
Revises:
Create Date: 2026-01-12 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


COMPONENT_TYPES = ("engine", "brake_system", "frame", "suspension", "wheel")

COMPONENT_TABLES = {
    "engine": "engines",
    "brake_system": "brake_systems",
    "frame": "frames",
    "suspension": "suspensions",
    "wheel": "wheels",
}


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # Create brands table
    op.create_table(
        "brands",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    # Create component catalog tables
    op.create_table(
        "engines",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("displacement_cc", sa.Integer(), nullable=True),
        sa.Column("engine_type", sa.String(50), nullable=True, comment="inline-four, v-twin, parallel-twin, single, ..."),
        sa.Column("cylinder_count", sa.Integer(), nullable=True),
        sa.Column("power_hp", sa.Float(), nullable=True),
        sa.Column("torque_nm", sa.Float(), nullable=True),
        sa.Column("cooling", sa.String(30), nullable=True),
        sa.Column("fuel_system", sa.String(100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "brake_systems",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(50), nullable=True),
        sa.Column("front_type", sa.String(100), nullable=True),
        sa.Column("rear_type", sa.String(100), nullable=True),
        sa.Column("front_disc_size_mm", sa.Float(), nullable=True),
        sa.Column("rear_disc_size_mm", sa.Float(), nullable=True),
        sa.Column("has_abs", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("has_traction_control", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "frames",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(50), nullable=True, comment="trellis, twin-spar, perimeter, cradle, ..."),
        sa.Column("material", sa.String(50), nullable=True),
        sa.Column("rake_degrees", sa.Float(), nullable=True),
        sa.Column("trail_mm", sa.Float(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "suspensions",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("front_type", sa.String(100), nullable=True),
        sa.Column("rear_type", sa.String(100), nullable=True),
        sa.Column("front_travel_mm", sa.Float(), nullable=True),
        sa.Column("rear_travel_mm", sa.Float(), nullable=True),
        sa.Column("adjustability", sa.String(100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "wheels",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(50), nullable=True, comment="spoked, cast, forged"),
        sa.Column("front_size", sa.String(50), nullable=True),
        sa.Column("rear_size", sa.String(50), nullable=True),
        sa.Column("rim_material", sa.String(50), nullable=True),
        sa.Column("tire_specs", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    # Create motorcycle_models table
    op.create_table(
        "motorcycle_models",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("brand_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("type", sa.String(50), nullable=True, comment="Riding style: sport, touring, cruiser, adventure, naked, ..."),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("production_start_year", sa.Integer(), nullable=True),
        sa.Column("production_end_year", sa.Integer(), nullable=True),
        sa.Column("production_status", sa.String(30), nullable=True, comment="active, discontinued, concept"),
        sa.Column("base_description", sa.Text(), nullable=True),
        sa.Column("is_draft", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("engine_size", sa.Integer(), nullable=True, comment="cc"),
        sa.Column("horsepower", sa.Float(), nullable=True),
        sa.Column("torque_nm", sa.Float(), nullable=True),
        sa.Column("top_speed_kph", sa.Float(), nullable=True),
        sa.Column("has_abs", sa.Boolean(), nullable=True),
        sa.Column("weight_kg", sa.Float(), nullable=True),
        sa.Column("seat_height_mm", sa.Float(), nullable=True),
        sa.Column("wheelbase_mm", sa.Float(), nullable=True),
        sa.Column("ground_clearance_mm", sa.Float(), nullable=True),
        sa.Column("fuel_capacity_l", sa.Float(), nullable=True),
        sa.Column("default_image_url", sa.String(500), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["brand_id"], ["brands.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("ix_motorcycle_models_name", "motorcycle_models", ["name"])
    op.create_index("ix_motorcycle_models_brand_id", "motorcycle_models", ["brand_id"])

    # Create model_years table
    op.create_table(
        "model_years",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("motorcycle_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("marketing_tagline", sa.String(300), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["motorcycle_id"], ["motorcycle_models.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("motorcycle_id", "year", name="uq_model_years_motorcycle_year"),
    )
    op.create_index("ix_model_years_motorcycle_id", "model_years", ["motorcycle_id"])

    # Create model_configurations table with one override pair per component type
    override_columns = []
    override_fks = []
    for component_type in COMPONENT_TYPES:
        override_columns.extend([
            sa.Column(f"{component_type}_id", postgresql.UUID(as_uuid=True), nullable=True),
            sa.Column(f"{component_type}_override", sa.Boolean(), nullable=False, server_default=sa.false()),
        ])
        override_fks.append(
            sa.ForeignKeyConstraint(
                [f"{component_type}_id"],
                [f"{COMPONENT_TABLES[component_type]}.id"],
                ondelete="SET NULL",
            )
        )

    op.create_table(
        "model_configurations",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("model_year_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(200), nullable=False, server_default="Standard"),
        sa.Column("trim_level", sa.String(100), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("market_region", sa.String(20), nullable=True),
        sa.Column("msrp_usd", sa.Float(), nullable=True),
        sa.Column("special_features", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("weight_kg", sa.Float(), nullable=True),
        sa.Column("seat_height_mm", sa.Float(), nullable=True),
        sa.Column("wheelbase_mm", sa.Float(), nullable=True),
        sa.Column("ground_clearance_mm", sa.Float(), nullable=True),
        sa.Column("fuel_capacity_l", sa.Float(), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        *override_columns,
        *_timestamps(),
        sa.ForeignKeyConstraint(["model_year_id"], ["model_years.id"], ondelete="CASCADE"),
        *override_fks,
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("model_year_id", "name", name="uq_model_configurations_year_name"),
    )
    op.create_index("ix_model_configurations_model_year_id", "model_configurations", ["model_year_id"])

    # Create model_component_assignments table
    op.create_table(
        "model_component_assignments",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("model_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("component_type", sa.String(30), nullable=False),
        sa.Column("component_id", postgresql.UUID(as_uuid=True), nullable=False, comment="Row id in the table for component_type"),
        sa.Column("assignment_type", sa.String(30), nullable=False, server_default="standard"),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("effective_from_year", sa.Integer(), nullable=True),
        sa.Column("effective_to_year", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["model_id"], ["motorcycle_models.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("model_id", "component_type", name="uq_model_component_assignments_model_type"),
        sa.CheckConstraint(
            "component_type IN ('engine', 'brake_system', 'frame', 'suspension', 'wheel')",
            name="ck_model_component_assignments_type",
        ),
    )
    op.create_index(
        "ix_model_component_assignments_component",
        "model_component_assignments",
        ["component_type", "component_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_model_component_assignments_component", table_name="model_component_assignments")
    op.drop_table("model_component_assignments")
    op.drop_index("ix_model_configurations_model_year_id", table_name="model_configurations")
    op.drop_table("model_configurations")
    op.drop_index("ix_model_years_motorcycle_id", table_name="model_years")
    op.drop_table("model_years")
    op.drop_index("ix_motorcycle_models_brand_id", table_name="motorcycle_models")
    op.drop_index("ix_motorcycle_models_name", table_name="motorcycle_models")
    op.drop_table("motorcycle_models")
    for table in ("wheels", "suspensions", "frames", "brake_systems", "engines"):
        op.drop_table(table)
    op.drop_table("brands")
