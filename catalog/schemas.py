"""
Result types returned by the catalog services.

Attribute names are snake_case; JSON output uses camelCase aliases
(``model_dump(by_alias=True)``) because the admin front end reads
``componentId``, ``completionPercentage`` and friends.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from database.models import ComponentType


class CamelModel(BaseModel):
    """Base for results serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EntityKind(str, Enum):
    """Kinds of record a mutation can affect."""

    COMPONENT = "component"
    MODEL = "model"
    CONFIGURATION = "configuration"


class AffectedEntity(CamelModel):
    """One (entity kind, id) pair touched by a mutation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    kind: EntityKind
    id: str


def affected(kind: EntityKind, record_id) -> AffectedEntity:
    return AffectedEntity(kind=kind, id=str(record_id))


class Provenance(str, Enum):
    """How a resolved component id was derived."""

    OVERRIDE = "override"
    OVERRIDE_EMPTY = "override-empty"
    INHERITED = "inherited"
    NONE = "none"


class OverridePair(CamelModel):
    """Override state of one component type on a configuration."""

    override_flag: bool = False
    override_component_id: str | None = None


class ResolvedComponent(CamelModel):
    """Effective component of one type, with its provenance."""

    component_type: ComponentType
    component_id: str | None = None
    provenance: Provenance = Provenance.NONE


class UsageRecord(CamelModel):
    """A single reference to a catalog component."""

    referenced_by: Literal["model", "configuration"]
    id: str
    display_name: str


class UsageResult(CamelModel):
    """Every live reference to one catalog component."""

    count: int = 0
    models: list[str] = Field(default_factory=list)
    configurations: list[str] = Field(default_factory=list)
    records: list[UsageRecord] = Field(default_factory=list)


class DeletionCheck(CamelModel):
    """Verdict of the deletion guard."""

    can_delete: bool
    usage: UsageResult


class SectionScore(CamelModel):
    """Completeness of one weighted section."""

    percentage: int
    weight: int
    completed: int
    total: int


class CompletenessResult(CamelModel):
    """Weighted completeness score of a motorcycle (optionally a trim level)."""

    completion_percentage: int
    breakdown: dict[str, SectionScore]
    completed_fields: list[str] = Field(default_factory=list)
    missing_fields: list[str] = Field(default_factory=list)
    missing_critical_fields: list[str] = Field(default_factory=list)
    has_engine: bool = False
    has_brakes: bool = False
    has_frame: bool = False
    has_suspension: bool = False
    has_wheels: bool = False
    mode: Literal["full", "fallback"] = "full"
    status: Literal["excellent", "good", "fair", "poor"] = "poor"


class CategoryCompletion(CamelModel):
    total: int
    average_completion: int


class CompletenessSummary(CamelModel):
    """Curation dashboard aggregate over many scored motorcycles."""

    total: int
    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0
    average_completion: int = 0
    section_averages: dict[str, int] = Field(default_factory=dict)
    top_missing_fields: list[tuple[str, int]] = Field(default_factory=list)
    category_breakdown: dict[str, CategoryCompletion] = Field(default_factory=dict)


class BatchDeletionItem(CamelModel):
    """Outcome of one usage check in a batch."""

    # Raw string when the requested type is not a known component type
    component_type: ComponentType | str
    component_id: str
    check: DeletionCheck | None = None
    error: str | None = None
    retryable: bool = False


class DeletionBatchReport(CamelModel):
    """Results of a batch usage check, in input order."""

    total: int
    items: list[BatchDeletionItem] = Field(default_factory=list)

    @property
    def deletable(self) -> list[BatchDeletionItem]:
        return [item for item in self.items if item.check is not None and item.check.can_delete]

    @property
    def failures(self) -> list[BatchDeletionItem]:
        return [item for item in self.items if item.check is None]
