"""
Catalog admin Pydantic models.

Request bodies for the default-assignment and override endpoints, and the
affected-entity envelope every mutating endpoint returns.
"""

from uuid import UUID

from pydantic import Field, field_validator

from catalog.schemas import AffectedEntity, CamelModel

ASSIGNMENT_TYPES = {"standard", "optional", "upgrade"}


class DefaultAssignmentUpdate(CamelModel):
    """Schema for setting a model's default component of one type."""

    component_id: UUID
    assignment_type: str = Field(default="standard")
    notes: str | None = Field(None, max_length=2000)

    @field_validator("assignment_type")
    @classmethod
    def validate_assignment_type(cls, v):
        """Validate assignment_type is one of allowed values."""
        if v not in ASSIGNMENT_TYPES:
            raise ValueError(f"assignment_type must be one of {sorted(ASSIGNMENT_TYPES)}")
        return v


class OverrideUpdate(CamelModel):
    """
    Schema for writing a configuration override pair.

    ``override_flag=false`` clears any stored component; ``true`` without a
    component means the trim level explicitly has none.
    """

    override_flag: bool
    component_id: UUID | None = None


class MutationResponse(CamelModel):
    """Affected (entity kind, id) pairs of a write."""

    affected: list[AffectedEntity] = Field(default_factory=list)

    @classmethod
    def from_set(cls, affected: set[AffectedEntity]) -> "MutationResponse":
        return cls(affected=sorted(affected, key=lambda e: (e.kind.value, e.id)))


class ComponentDeleted(MutationResponse):
    deleted: bool = True


class ResolvedComponentView(CamelModel):
    """Resolved component with its display name."""

    component_type: str
    component_id: str | None = None
    provenance: str
    name: str | None = None


class ConfigurationComponents(CamelModel):
    configuration_id: str
    components: list[ResolvedComponentView]
