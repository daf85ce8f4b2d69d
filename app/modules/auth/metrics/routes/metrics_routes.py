# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/metrics/routes/metrics_routes.py

Endpoints JSON de métricas de autenticación (memoria del proceso):
- GET /auth/metrics             resumen con tasas formateadas ("xx.xx%")
- GET /auth/metrics/detailed    contadores crudos + población + tasas
- GET /auth/metrics/timeseries  snapshots horarios (?hours=N, default 24)

El scrape Prometheus vive aparte en /metrics.

Autor: Ixchel Beristain
Fecha: 2025-11-07
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.modules.auth.dependencies import get_auth_facade
from app.modules.auth.facades import AuthFacade, AuthFacadeResponse
from app.modules.auth.metrics.schemas.metrics_schemas import (
    MetricsResponse,
    TimeSeriesResponse,
)
from app.shared.utils.json_response import UTF8JSONResponse, json_response_utf8

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth/metrics", tags=["metrics-auth"])


def _to_response(result: AuthFacadeResponse) -> UTF8JSONResponse:
    return json_response_utf8(result.body, status_code=result.status_code)


@router.get("", response_model=MetricsResponse, summary="Resumen de métricas de autenticación")
async def get_auth_metrics(facade: AuthFacade = Depends(get_auth_facade)):
    return _to_response(facade.metrics_snapshot())


@router.get("/detailed", response_model=MetricsResponse, summary="Métricas detalladas")
async def get_auth_metrics_detailed(facade: AuthFacade = Depends(get_auth_facade)):
    return _to_response(facade.metrics_detailed())


@router.get("/timeseries", response_model=TimeSeriesResponse, summary="Serie temporal horaria")
async def get_auth_metrics_timeseries(
    hours: Optional[str] = Query(None, description="Horas hacia atrás (default 24)"),
    facade: AuthFacade = Depends(get_auth_facade),
):
    # `hours` llega como texto: valores no numéricos caen al default
    return _to_response(facade.timeseries(hours))


__all__ = ["router"]

# Fin del archivo backend/app/modules/auth/metrics/routes/metrics_routes.py
