"""FastAPI server exposing the community statistics documents."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from .config import StatsSettings, load_settings
from .repository import RepositoryConfig, StatsDataRepository, build_repository_from_env
from .service import CommunityStatsService

logger = logging.getLogger(__name__)


def create_app(
    repository: Optional[StatsDataRepository] = None,
    settings: Optional[StatsSettings] = None,
) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level)
    if repository is None:
        repository = build_repository_from_env(RepositoryConfig(database_url=settings.database_url))

    app = FastAPI(title="Community Statistics API", version="0.1.0")
    app.state.stats_service = (
        None
        if repository is None
        else CommunityStatsService(repository, per_month_window_months=settings.per_month_window_months)
    )

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/communities/{community_id}/stats")
    async def community_stats(community_id: UUID, request: Request) -> Dict[str, Any]:
        service = _get_service(request)
        stats = await _run_store_call(service.build_report, community_id)
        return stats.as_dict()

    @app.get("/communities/{community_id}/groups/{group_id}/stats")
    async def group_stats(community_id: UUID, group_id: UUID, request: Request) -> Dict[str, Any]:
        service = _get_service(request)
        stats = await _run_store_call(service.build_group_report, community_id, group_id)
        return stats.as_dict()

    return app


def _get_service(request: Request) -> CommunityStatsService:
    service = request.app.state.stats_service
    if service is None:
        raise HTTPException(
            status_code=503,
            detail="COMMUNITY_STATS_DATABASE_URL is not configured; statistics are unavailable.",
        )
    return service


async def _run_store_call(func, *args):
    try:
        return await asyncio.to_thread(func, *args)
    except SQLAlchemyError as exc:
        logger.exception("Statistics store query failed: %s", exc)
        raise HTTPException(status_code=503, detail="Statistics store unavailable.") from exc


app = create_app()
