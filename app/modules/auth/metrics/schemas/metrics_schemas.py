# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/metrics/schemas/metrics_schemas.py

Esquemas Pydantic de salida para los endpoints de métricas y seguridad.

Las secciones internas del snapshot se dejan como Dict[str, Any]: su forma
la define AuthMetricsStore y crece con el catálogo de eventos.

Autor: Ixchel Beristain
Fecha: 2025-11-07
"""
from typing import Any, Dict, List

from pydantic import BaseModel, Field


class MetricsResponse(BaseModel):
    success: bool = True
    metrics: Dict[str, Any] = Field(..., description="Resumen o detalle de métricas")


class TimeSeriesResponse(BaseModel):
    success: bool = True
    timeSeries: List[Dict[str, Any]] = Field(default_factory=list)
    hoursBack: int = Field(24, description="Ventana solicitada en horas")


class SecurityStats(BaseModel):
    suspicious_ips: int = 0
    blocked_ips: int = 0
    tracked_failed_attempts: int = 0
    tracked_rate_limit_violations: int = 0
    timestamp: str


class SecurityStatsResponse(BaseModel):
    success: bool = True
    stats: SecurityStats


__all__ = [
    "MetricsResponse",
    "TimeSeriesResponse",
    "SecurityStats",
    "SecurityStatsResponse",
]

# Fin del archivo backend/app/modules/auth/metrics/schemas/metrics_schemas.py
