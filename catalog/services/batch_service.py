"""
Moto Catalog - Batch operations.

Runs deletion checks and completeness scoring over many items with bounded
concurrency so the catalog store is never flooded. Progress is reported as
(completed, total) after each item, in completion order.

A per-item infrastructure failure is recorded on that item; it never turns
into a positive deletion verdict and never aborts the rest of the batch.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

from catalog.schemas import BatchDeletionItem, CompletenessResult, DeletionBatchReport
from catalog.services.completeness_service import CompletenessService, get_completeness_service
from catalog.services.component_catalog import parse_component_type
from catalog.services.deletion_guard import DeletionGuard, get_deletion_guard
from database.models import ComponentType
from shared.config import get_settings
from shared.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[int, int], None]


async def run_bounded(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    max_concurrency: int,
    on_progress: ProgressCallback | None = None,
) -> list[R]:
    """
    Apply an async worker to every item with at most ``max_concurrency`` in flight.

    Results come back in input order. The first worker exception cancels the
    remaining tasks and is re-raised once they have all stopped; callers that
    need per-item isolation catch inside the worker.
    """
    total = len(items)
    semaphore = asyncio.Semaphore(max(1, max_concurrency))
    completed = 0

    async def run_one(item: T) -> R:
        nonlocal completed
        async with semaphore:
            try:
                return await worker(item)
            finally:
                completed += 1
                if on_progress:
                    try:
                        on_progress(completed, total)
                    except Exception as e:
                        logger.warning(f"Progress callback failed: {e}")

    tasks = [asyncio.create_task(run_one(item)) for item in items]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        # Collect the cancelled siblings so none is left running detached
        await asyncio.gather(*pending, return_exceptions=True)
        if pending:
            logger.warning(f"Batch aborted: cancelled {len(pending)}/{total} unfinished items")
        raise


class BatchService:
    """Bounded-concurrency wrappers over the deletion guard and the scorer."""

    def __init__(
        self,
        deletion_guard: DeletionGuard | None = None,
        completeness_service: CompletenessService | None = None,
        max_concurrency: int | None = None,
    ):
        self.deletion_guard = deletion_guard or get_deletion_guard()
        self.completeness_service = completeness_service or get_completeness_service()
        self.max_concurrency = max_concurrency or get_settings().BATCH_MAX_CONCURRENCY

    async def check_deletions(
        self,
        items: Sequence[tuple["ComponentType | str", Any]],
        on_progress: ProgressCallback | None = None,
    ) -> DeletionBatchReport:
        """
        Run the deletion guard over many components.

        Args:
            items: (component_type, component_id) pairs
            on_progress: Called with (completed, total) after each item

        Returns:
            DeletionBatchReport; items whose usage could not be computed, or
            whose component type is unknown, carry ``error`` and no ``check``
        """

        async def check(item: tuple["ComponentType | str", Any]) -> BatchDeletionItem:
            raw_type, component_id = item
            try:
                component_type = parse_component_type(raw_type)
            except ValueError as e:
                return BatchDeletionItem(
                    component_type=str(getattr(raw_type, "value", raw_type)),
                    component_id=str(component_id),
                    error=str(e),
                )
            try:
                verdict = await self.deletion_guard.can_delete(component_id, component_type)
            except CatalogUnavailableError as e:
                return BatchDeletionItem(
                    component_type=component_type,
                    component_id=str(component_id),
                    error=e.message,
                    retryable=e.retryable,
                )
            return BatchDeletionItem(
                component_type=component_type,
                component_id=str(component_id),
                check=verdict,
            )

        results = await run_bounded(
            items,
            check,
            max_concurrency=self.max_concurrency,
            on_progress=on_progress,
        )
        report = DeletionBatchReport(total=len(items), items=results)

        if report.failures:
            logger.warning(f"Batch usage check: {len(report.failures)}/{report.total} items could not be checked")
        return report

    async def score_many(
        self,
        motorcycles: Sequence[Any],
        on_progress: ProgressCallback | None = None,
    ) -> list[tuple[Any, CompletenessResult]]:
        """
        Score many motorcycles (model-level, no trim) with bounded concurrency.

        Returns:
            (motorcycle, result) pairs in input order
        """

        async def score(motorcycle: Any) -> tuple[Any, CompletenessResult]:
            return motorcycle, await self.completeness_service.score(motorcycle)

        return await run_bounded(
            motorcycles,
            score,
            max_concurrency=self.max_concurrency,
            on_progress=on_progress,
        )


# Singleton instance
_batch_service: BatchService | None = None


def get_batch_service() -> BatchService:
    """Get or create the BatchService singleton."""
    global _batch_service
    if _batch_service is None:
        _batch_service = BatchService()
    return _batch_service
