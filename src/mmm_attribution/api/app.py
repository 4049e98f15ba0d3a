"""
FastAPI application for mmm-attribution.

Design principles:
  - One endpoint per engine entry point (regression, contributions, charts).
  - Stateless: every request runs the engine against the provider.
  - Engine errors come back as ``{"error": <code>, "message": ...}``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from mmm_attribution import __version__
from mmm_attribution.config import EngineConfig, get_config
from mmm_attribution.connectors.base import DataProvider
from mmm_attribution.connectors.sqlite import SQLiteProvider
from mmm_attribution.core.contracts import ChartType, Target
from mmm_attribution.core.exceptions import (
    ConnectorError,
    DimensionMismatch,
    MMMAttributionError,
)
from mmm_attribution.engine import MMMEngine


def _status_for(error: MMMAttributionError) -> int:
    if isinstance(error, DimensionMismatch):
        return 500
    if isinstance(error, ConnectorError):
        return 503
    return 422


def create_app(
    provider: DataProvider | None = None,
    config: EngineConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    config = config or get_config()
    provider = provider or SQLiteProvider(config.storage.database_path)
    engine = MMMEngine(provider, config)

    application = FastAPI(
        title="mmm-attribution API",
        description="OLS marketing-mix regression and channel contribution decomposition.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.exception_handler(MMMAttributionError)
    async def engine_error_handler(request: Request, exc: MMMAttributionError):
        logger.warning(f"{request.url.path} failed: [{exc.code}] {exc.message}")
        return JSONResponse(status_code=_status_for(exc), content=exc.to_dict())

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    @application.get("/health")
    def health():
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "provider": provider.name,
            "version": __version__,
        }

    # ------------------------------------------------------------------
    # Engine
    # ------------------------------------------------------------------

    @application.get("/api/regression")
    def regression(
        target: Target = Query(Target.REVENUE),
        start: Optional[str] = Query(None),
        end: Optional[str] = Query(None),
    ):
        result = engine.run_regression(target, start=start, end=end)
        return result.model_dump(mode="json")

    @application.get("/api/contributions")
    def contributions(
        target: Target = Query(Target.REVENUE),
        start: Optional[str] = Query(None),
        end: Optional[str] = Query(None),
    ):
        result = engine.decompose_contributions(target, start=start, end=end)
        return result.model_dump(mode="json")

    @application.get("/api/charts/{chart_type}")
    def charts(
        chart_type: ChartType,
        target: Target = Query(Target.REVENUE),
        format: str = Query("series", pattern="^(series|plotly)$"),
        start: Optional[str] = Query(None),
        end: Optional[str] = Query(None),
    ):
        chart = engine.generate_chart_series(chart_type, target, start=start, end=end)
        return chart.to_plotly() if format == "plotly" else chart.to_dict()

    return application
