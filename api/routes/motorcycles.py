"""
Moto Catalog - Motorcycle completeness API routes.

Completeness of a single motorcycle (optionally as one of its trim levels)
and the curation dashboard summary over the whole catalog.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from api.dependencies import get_batch, get_scorer, get_session_factory
from catalog.schemas import CompletenessResult, CompletenessSummary
from catalog.services.batch_service import BatchService
from catalog.services.completeness_service import CompletenessService, summarize_completeness
from database.connection import SessionFactory
from database.models import ModelConfiguration, MotorcycleModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Motorcycles"])


@router.get(
    "/motorcycles/completeness/summary",
    response_model=CompletenessSummary,
    summary="Catalog completeness dashboard",
    description="Status buckets, averages and most frequently missing fields over all motorcycle models",
)
async def get_completeness_summary(
    include_drafts: bool = Query(True, description="Include models still marked as draft"),
    session_factory: SessionFactory = Depends(get_session_factory),
    batch: BatchService = Depends(get_batch),
):
    async with session_factory() as session:
        query = select(MotorcycleModel).order_by(MotorcycleModel.name)
        if not include_drafts:
            query = query.where(MotorcycleModel.is_draft.is_(False))
        result = await session.execute(query)
        motorcycles = list(result.scalars().all())

    scored = await batch.score_many(motorcycles)
    summary = summarize_completeness(scored)

    logger.info(
        f"Completeness summary: {summary.total} models, average {summary.average_completion}%"
    )
    return summary


@router.get(
    "/motorcycles/{model_id}/completeness",
    response_model=CompletenessResult,
    summary="Completeness of a motorcycle",
    description="Weighted completeness score; pass configuration_id to score a specific trim level",
)
async def get_motorcycle_completeness(
    model_id: UUID,
    configuration_id: UUID | None = Query(None, description="Score as this configuration (trim level)"),
    session_factory: SessionFactory = Depends(get_session_factory),
    scorer: CompletenessService = Depends(get_scorer),
):
    async with session_factory() as session:
        motorcycle = await session.get(MotorcycleModel, model_id)
        if motorcycle is None:
            raise HTTPException(status_code=404, detail=f"Model {model_id} not found")

        configuration = None
        if configuration_id is not None:
            configuration = await session.get(
                ModelConfiguration,
                configuration_id,
                options=[selectinload(ModelConfiguration.model_year)],
            )
            owner_id = None
            if configuration is not None and configuration.model_year is not None:
                owner_id = configuration.model_year.motorcycle_id
            if owner_id != model_id:
                raise HTTPException(
                    status_code=404,
                    detail=f"Configuration {configuration_id} not found for model {model_id}",
                )

    return await scorer.score(motorcycle, configuration)
