"""
Moto Catalog - Completeness Scorer.

Weighted data-completeness score of a motorcycle, optionally scored as one
of its configurations (trim levels). Used by the admin views for progress
bars and badges; never persisted, always recomputed.

Sections and weights (see SECTION_WEIGHTS):
- basicInfo (30): Name, Brand, Type, Production Start Year,
  Production Status, Description
- specifications (35): Engine Size, Horsepower, Torque, Top Speed, Weight,
  Seat Height, Wheelbase, Ground Clearance, Fuel Capacity
- components (25): one field per component type
- media (10): Main Image, Trim Image

Two entry points share the algorithm:
- score(): full mode; resolves the five component types through the
  ResolutionService, bounded by a timeout.
- score_sync(): fallback mode; no I/O. A component counts only when the
  in-memory configuration overrides it with an id, so this mode may
  under-report component presence.
"""

import asyncio
import logging
from collections import Counter, defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from catalog.schemas import (
    CategoryCompletion,
    CompletenessResult,
    CompletenessSummary,
    SectionScore,
)
from catalog.services.override_store import read_override_pair
from catalog.services.resolution_service import ResolutionService, get_resolution_service
from database.models import ComponentType
from shared.config import COMPLETION_STATUS_THRESHOLDS, SECTION_WEIGHTS, get_settings

logger = logging.getLogger(__name__)

CRITICAL_FIELDS = ("Name", "Brand", "Type")

COMPONENT_LABELS: dict[ComponentType, str] = {
    ComponentType.ENGINE: "Engine",
    ComponentType.BRAKE_SYSTEM: "Brake System",
    ComponentType.FRAME: "Frame",
    ComponentType.SUSPENSION: "Suspension",
    ComponentType.WHEEL: "Wheels",
}

TOP_MISSING_FIELDS_LIMIT = 8


def _read(record: Any, attribute: str) -> Any:
    """Read an attribute from an ORM row or a plain mapping."""
    if record is None:
        return None
    if isinstance(record, dict):
        return record.get(attribute)
    return getattr(record, attribute, None)


def is_present(value: Any) -> bool:
    """
    Whether a tracked value counts as filled in.

    None, blank strings, empty collections and numeric zero are missing;
    booleans are present whenever they are set.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return True
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


@dataclass(frozen=True)
class TrackedField:
    """A labelled field of a non-component section."""

    label: str
    section: str
    model_attribute: str
    # Configuration column that takes precedence when a trim level is scored
    configuration_attribute: str | None = None
    # Replaces the plain attribute read when the value needs a lookup
    reader: Callable[[Any], Any] | None = None

    def value(self, motorcycle: Any, configuration: Any = None) -> Any:
        if self.reader is not None:
            return self.reader(motorcycle)
        if configuration is not None and self.configuration_attribute:
            trim_value = _read(configuration, self.configuration_attribute)
            if is_present(trim_value):
                return trim_value
        return _read(motorcycle, self.model_attribute)


def _brand_value(motorcycle: Any) -> Any:
    # Rows carry brand_id; API payloads and fixtures may carry a brand name
    brand_id = _read(motorcycle, "brand_id")
    if is_present(brand_id):
        return brand_id
    if isinstance(motorcycle, dict):
        return motorcycle.get("brand")
    return None


TRACKED_FIELDS: tuple[TrackedField, ...] = (
    # basicInfo
    TrackedField("Name", "basicInfo", "name"),
    TrackedField("Brand", "basicInfo", "brand_id", reader=_brand_value),
    TrackedField("Type", "basicInfo", "type"),
    TrackedField("Production Start Year", "basicInfo", "production_start_year"),
    TrackedField("Production Status", "basicInfo", "production_status"),
    TrackedField("Description", "basicInfo", "base_description"),
    # specifications
    TrackedField("Engine Size", "specifications", "engine_size"),
    TrackedField("Horsepower", "specifications", "horsepower"),
    TrackedField("Torque", "specifications", "torque_nm"),
    TrackedField("Top Speed", "specifications", "top_speed_kph"),
    TrackedField("Weight", "specifications", "weight_kg", "weight_kg"),
    TrackedField("Seat Height", "specifications", "seat_height_mm", "seat_height_mm"),
    TrackedField("Wheelbase", "specifications", "wheelbase_mm", "wheelbase_mm"),
    TrackedField("Ground Clearance", "specifications", "ground_clearance_mm", "ground_clearance_mm"),
    TrackedField("Fuel Capacity", "specifications", "fuel_capacity_l", "fuel_capacity_l"),
    # media
    TrackedField("Main Image", "media", "default_image_url"),
    TrackedField("Trim Image", "media", "image_url", "image_url"),
)


def completion_status(percentage: int) -> str:
    """Dashboard bucket of a completion percentage."""
    for status, lower_bound in COMPLETION_STATUS_THRESHOLDS:
        if percentage >= lower_bound:
            return status
    return "poor"


def build_result(
    motorcycle: Any,
    configuration: Any,
    present_components: dict[ComponentType, bool],
    mode: str,
) -> CompletenessResult:
    """Score already-known field values and component presence."""
    completed: dict[str, list[str]] = defaultdict(list)
    missing: dict[str, list[str]] = defaultdict(list)

    for field in TRACKED_FIELDS:
        value = field.value(motorcycle, configuration)
        bucket = completed if is_present(value) else missing
        bucket[field.section].append(field.label)

    for component_type, label in COMPONENT_LABELS.items():
        bucket = completed if present_components.get(component_type) else missing
        bucket["components"].append(label)

    breakdown: dict[str, SectionScore] = {}
    weighted_total = 0.0
    for section, weight in SECTION_WEIGHTS.items():
        done = len(completed[section])
        total = done + len(missing[section])
        raw_percentage = 100 * done / total if total else 0.0
        weighted_total += raw_percentage * weight / 100
        breakdown[section] = SectionScore(
            percentage=round(raw_percentage),
            weight=weight,
            completed=done,
            total=total,
        )

    completed_fields = [label for section in SECTION_WEIGHTS for label in completed[section]]
    missing_fields = [label for section in SECTION_WEIGHTS for label in missing[section]]
    completion_percentage = round(weighted_total)

    return CompletenessResult(
        completion_percentage=completion_percentage,
        breakdown=breakdown,
        completed_fields=completed_fields,
        missing_fields=missing_fields,
        missing_critical_fields=[label for label in CRITICAL_FIELDS if label in missing_fields],
        has_engine=bool(present_components.get(ComponentType.ENGINE)),
        has_brakes=bool(present_components.get(ComponentType.BRAKE_SYSTEM)),
        has_frame=bool(present_components.get(ComponentType.FRAME)),
        has_suspension=bool(present_components.get(ComponentType.SUSPENSION)),
        has_wheels=bool(present_components.get(ComponentType.WHEEL)),
        mode=mode,
        status=completion_status(completion_percentage),
    )


class CompletenessService:
    """Computes completeness scores for admin views."""

    def __init__(
        self,
        resolution_service: ResolutionService | None = None,
        timeout: float | None = None,
    ):
        self.resolution_service = resolution_service or get_resolution_service()
        self.timeout = timeout or get_settings().COMPLETENESS_RESOLUTION_TIMEOUT_SECONDS

    async def score(self, motorcycle: Any, configuration: Any = None) -> CompletenessResult:
        """
        Full-mode score with resolved components.

        Falls back to score_sync() when resolution fails or exceeds the
        timeout; the result's ``mode`` tells which path produced it.
        """
        try:
            present = await asyncio.wait_for(
                self._resolve_presence(motorcycle, configuration),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning(
                f"Component resolution unavailable for completeness of model "
                f"{_read(motorcycle, 'id')} ({type(e).__name__}: {e}); using fallback scoring",
                extra={
                    "model_id": str(_read(motorcycle, "id")),
                    "configuration_id": str(_read(configuration, "id")) if configuration is not None else None,
                },
            )
            return self.score_sync(motorcycle, configuration)

        return build_result(motorcycle, configuration, present, mode="full")

    def score_sync(self, motorcycle: Any, configuration: Any = None) -> CompletenessResult:
        """Fallback-mode score from in-memory data only."""
        present = {
            component_type: bool(read_override_pair(configuration, component_type).override_component_id)
            if configuration is not None
            else False
            for component_type in ComponentType
        }
        return build_result(motorcycle, configuration, present, mode="fallback")

    async def _resolve_presence(self, motorcycle: Any, configuration: Any) -> dict[ComponentType, bool]:
        if configuration is not None:
            configuration_id = _read(configuration, "id")
            if configuration_id is None:
                raise ValueError("configuration has no id")
            resolved = await self.resolution_service.resolve_all(configuration_id)
        else:
            model_id = _read(motorcycle, "id")
            if model_id is None:
                raise ValueError("motorcycle has no id")
            resolved = await self.resolution_service.resolve_all_for_model(model_id)

        return {component_type: r.component_id is not None for component_type, r in resolved.items()}


def summarize_completeness(
    scored: Iterable[tuple[Any, CompletenessResult]],
    category_of: Callable[[Any], str | None] | None = None,
) -> CompletenessSummary:
    """
    Aggregate scored motorcycles for the curation dashboard.

    Args:
        scored: (motorcycle, result) pairs
        category_of: Grouping key per motorcycle, defaults to its ``type``

    Returns:
        CompletenessSummary with bucket counts, averages and the most
        frequently missing fields
    """
    category_of = category_of or (lambda motorcycle: _read(motorcycle, "type"))
    pairs = list(scored)
    if not pairs:
        return CompletenessSummary(total=0)

    buckets: Counter[str] = Counter()
    missing_counter: Counter[str] = Counter()
    section_totals: dict[str, int] = defaultdict(int)
    categories: dict[str, list[int]] = defaultdict(list)

    for motorcycle, result in pairs:
        buckets[result.status] += 1
        missing_counter.update(result.missing_fields)
        for section, section_score in result.breakdown.items():
            section_totals[section] += section_score.percentage
        categories[category_of(motorcycle) or "uncategorized"].append(result.completion_percentage)

    total = len(pairs)
    return CompletenessSummary(
        total=total,
        excellent=buckets["excellent"],
        good=buckets["good"],
        fair=buckets["fair"],
        poor=buckets["poor"],
        average_completion=round(sum(r.completion_percentage for _, r in pairs) / total),
        section_averages={section: round(value / total) for section, value in section_totals.items()},
        top_missing_fields=missing_counter.most_common(TOP_MISSING_FIELDS_LIMIT),
        category_breakdown={
            category: CategoryCompletion(total=len(values), average_completion=round(sum(values) / len(values)))
            for category, values in sorted(categories.items())
        },
    )


# Singleton instance
_completeness_service: CompletenessService | None = None


def get_completeness_service() -> CompletenessService:
    """Get or create the CompletenessService singleton."""
    global _completeness_service
    if _completeness_service is None:
        _completeness_service = CompletenessService()
    return _completeness_service
