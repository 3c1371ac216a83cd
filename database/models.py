"""
Moto Catalog - Database models.

This module defines SQLAlchemy ORM models for the catalog.
All models use UUIDs as primary keys and include timestamps.

Hierarchy: MotorcycleModel -> ModelYear -> ModelConfiguration (trim level).
Components live in one table per kind; a model points at its defaults through
ModelComponentAssignment, a configuration overrides them through the
``<type>_id`` / ``<type>_override`` column pairs.
"""

import uuid
from datetime import datetime, UTC
from enum import Enum
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class ComponentType(str, Enum):
    """Kinds of hardware component a motorcycle is assembled from."""

    ENGINE = "engine"
    BRAKE_SYSTEM = "brake_system"
    FRAME = "frame"
    SUSPENSION = "suspension"
    WHEEL = "wheel"


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """created_at / updated_at columns shared by every table."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )


# =============================================================================
# Brand / Model / Year / Configuration
# =============================================================================


class Brand(TimestampMixin, Base):
    """Motorcycle manufacturer."""

    __tablename__ = "brands"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)

    models: Mapped[list["MotorcycleModel"]] = relationship(
        "MotorcycleModel",
        back_populates="brand",
    )

    def __repr__(self) -> str:
        return f"<Brand(id={self.id}, name={self.name})>"


class MotorcycleModel(TimestampMixin, Base):
    """
    Motorcycle model - the root of the product hierarchy.

    Carries the model-wide basic info, specifications and media that the
    completeness score tracks. Component defaults are stored separately in
    ModelComponentAssignment.
    """

    __tablename__ = "motorcycle_models"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    brand_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("brands.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Riding style: sport, touring, cruiser, adventure, naked, ...",
    )
    category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    production_start_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    production_end_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    production_status: Mapped[str | None] = mapped_column(
        String(30),
        nullable=True,
        comment="active, discontinued, concept",
    )
    base_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_draft: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Specifications
    engine_size: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="cc")
    horsepower: Mapped[float | None] = mapped_column(Float, nullable=True)
    torque_nm: Mapped[float | None] = mapped_column(Float, nullable=True)
    top_speed_kph: Mapped[float | None] = mapped_column(Float, nullable=True)
    has_abs: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)
    seat_height_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    wheelbase_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    ground_clearance_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    fuel_capacity_l: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Media
    default_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Relationships
    brand: Mapped["Brand | None"] = relationship(
        "Brand",
        back_populates="models",
        lazy="selectin",
    )
    years: Mapped[list["ModelYear"]] = relationship(
        "ModelYear",
        back_populates="motorcycle",
        cascade="all, delete-orphan",
    )
    component_assignments: Mapped[list["ModelComponentAssignment"]] = relationship(
        "ModelComponentAssignment",
        back_populates="model",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<MotorcycleModel(id={self.id}, name={self.name})>"


class ModelYear(TimestampMixin, Base):
    """One production year of a model."""

    __tablename__ = "model_years"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    motorcycle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("motorcycle_models.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    marketing_tagline: Mapped[str | None] = mapped_column(String(300), nullable=True)

    motorcycle: Mapped["MotorcycleModel"] = relationship(
        "MotorcycleModel",
        back_populates="years",
    )
    configurations: Mapped[list["ModelConfiguration"]] = relationship(
        "ModelConfiguration",
        back_populates="model_year",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("motorcycle_id", "year", name="uq_model_years_motorcycle_year"),
    )

    def __repr__(self) -> str:
        return f"<ModelYear(id={self.id}, year={self.year})>"


class ModelConfiguration(TimestampMixin, Base):
    """
    Configuration (trim level) of a model year.

    For every component type there is an override pair: ``<type>_id`` and
    ``<type>_override``. While the flag is false the stored id is inert and
    the model default applies.
    """

    __tablename__ = "model_configurations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    model_year_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("model_years.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False, default="Standard")
    trim_level: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    market_region: Mapped[str | None] = mapped_column(String(20), nullable=True)
    msrp_usd: Mapped[float | None] = mapped_column(Float, nullable=True)
    special_features: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Trim-specific specifications (take precedence over the model's)
    weight_kg: Mapped[float | None] = mapped_column(Float, nullable=True)
    seat_height_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    wheelbase_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    ground_clearance_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    fuel_capacity_l: Mapped[float | None] = mapped_column(Float, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Component override pairs
    engine_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("engines.id", ondelete="SET NULL"), nullable=True
    )
    engine_override: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    brake_system_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("brake_systems.id", ondelete="SET NULL"), nullable=True
    )
    brake_system_override: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    frame_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("frames.id", ondelete="SET NULL"), nullable=True
    )
    frame_override: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    suspension_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("suspensions.id", ondelete="SET NULL"), nullable=True
    )
    suspension_override: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    wheel_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("wheels.id", ondelete="SET NULL"), nullable=True
    )
    wheel_override: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    model_year: Mapped["ModelYear"] = relationship(
        "ModelYear",
        back_populates="configurations",
    )

    __table_args__ = (
        UniqueConstraint("model_year_id", "name", name="uq_model_configurations_year_name"),
    )

    def __repr__(self) -> str:
        return f"<ModelConfiguration(id={self.id}, name={self.name})>"


# (id column, flag column) per component type on model_configurations
OVERRIDE_COLUMNS: dict[ComponentType, tuple[str, str]] = {
    component_type: (f"{component_type.value}_id", f"{component_type.value}_override")
    for component_type in ComponentType
}


# =============================================================================
# Component catalog
# =============================================================================


class Engine(TimestampMixin, Base):
    """Engine catalog entry."""

    __tablename__ = "engines"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    displacement_cc: Mapped[int | None] = mapped_column(Integer, nullable=True)
    engine_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="inline-four, v-twin, parallel-twin, single, ...",
    )
    cylinder_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    power_hp: Mapped[float | None] = mapped_column(Float, nullable=True)
    torque_nm: Mapped[float | None] = mapped_column(Float, nullable=True)
    cooling: Mapped[str | None] = mapped_column(String(30), nullable=True)
    fuel_system: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Engine(id={self.id}, name={self.name})>"


class BrakeSystem(TimestampMixin, Base):
    """Brake system catalog entry."""

    __tablename__ = "brake_systems"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    front_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    rear_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    front_disc_size_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    rear_disc_size_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    has_abs: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    has_traction_control: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<BrakeSystem(id={self.id}, name={self.name})>"


class Frame(TimestampMixin, Base):
    """Frame catalog entry."""

    __tablename__ = "frames"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="trellis, twin-spar, perimeter, cradle, ...",
    )
    material: Mapped[str | None] = mapped_column(String(50), nullable=True)
    rake_degrees: Mapped[float | None] = mapped_column(Float, nullable=True)
    trail_mm: Mapped[float | None] = mapped_column(Float, nullable=True)

    def __repr__(self) -> str:
        return f"<Frame(id={self.id}, name={self.name})>"


class Suspension(TimestampMixin, Base):
    """Suspension catalog entry."""

    __tablename__ = "suspensions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    front_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    rear_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    front_travel_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    rear_travel_mm: Mapped[float | None] = mapped_column(Float, nullable=True)
    adjustability: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return f"<Suspension(id={self.id}, name={self.name})>"


class Wheel(TimestampMixin, Base):
    """Wheel set catalog entry."""

    __tablename__ = "wheels"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str | None] = mapped_column(String(50), nullable=True, comment="spoked, cast, forged")
    front_size: Mapped[str | None] = mapped_column(String(50), nullable=True)
    rear_size: Mapped[str | None] = mapped_column(String(50), nullable=True)
    rim_material: Mapped[str | None] = mapped_column(String(50), nullable=True)
    tire_specs: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<Wheel(id={self.id}, name={self.name})>"


COMPONENT_MODELS: dict[ComponentType, type[Base]] = {
    ComponentType.ENGINE: Engine,
    ComponentType.BRAKE_SYSTEM: BrakeSystem,
    ComponentType.FRAME: Frame,
    ComponentType.SUSPENSION: Suspension,
    ComponentType.WHEEL: Wheel,
}


class ModelComponentAssignment(TimestampMixin, Base):
    """
    Model-level default component for one component type.

    At most one row per (model_id, component_type); writes go through the
    assignment store's upsert.
    """

    __tablename__ = "model_component_assignments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    model_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("motorcycle_models.id", ondelete="CASCADE"),
        nullable=False,
    )
    component_type: Mapped[str] = mapped_column(String(30), nullable=False)
    component_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
        comment="Row id in the table for component_type",
    )
    assignment_type: Mapped[str] = mapped_column(String(30), default="standard", nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    effective_from_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    effective_to_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    model: Mapped["MotorcycleModel"] = relationship(
        "MotorcycleModel",
        back_populates="component_assignments",
    )

    __table_args__ = (
        UniqueConstraint(
            "model_id",
            "component_type",
            name="uq_model_component_assignments_model_type",
        ),
        Index("ix_model_component_assignments_component", "component_type", "component_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<ModelComponentAssignment(model_id={self.model_id}, "
            f"type={self.component_type}, component_id={self.component_id})>"
        )
