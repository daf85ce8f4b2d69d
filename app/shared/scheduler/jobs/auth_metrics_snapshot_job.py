# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/jobs/auth_metrics_snapshot_job.py

Job horario de métricas de autenticación.

En cada ejecución (minuto 0 de cada hora, UTC):
    1. Refresca los gauges de población desde la BD
       (pendingLegacyMigrations, totalUsers)
    2. Agrega un snapshot a la serie temporal del AuthMetricsStore

Si el refresco de gauges falla, el snapshot se toma igual con los
últimos valores conocidos.

Autor: Ixchel Beristain
Fecha: 2025-11-07
"""
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from app.modules.auth.dependencies import AuthContainer
    from app.shared.scheduler import SchedulerService

_logger = logging.getLogger("scheduler.auth_metrics")

JOB_ID = "auth_metrics_hourly_snapshot"


async def run_auth_metrics_snapshot(container: Optional["AuthContainer"] = None) -> Dict[str, Any]:
    """Ejecuta un ciclo del job; devuelve el punto capturado."""
    if container is None:
        from app.modules.auth.dependencies import get_auth_container
        container = get_auth_container()

    try:
        population = await container.facade.refresh_population_gauges()
        _logger.debug("auth_population_refreshed: %s", population)
    except Exception as e:
        _logger.warning("auth_population_refresh_error: %s", type(e).__name__)

    point = container.metrics.capture_snapshot()
    _logger.info(
        "auth_metrics_snapshot_captured: points=%d",
        container.metrics.timeseries_length(),
    )
    return point


def register_auth_metrics_snapshot_job(
    scheduler: "SchedulerService",
    container: Optional["AuthContainer"] = None,
) -> str:
    """Registra el job en el minuto 0 de cada hora."""
    kwargs = {"container": container} if container is not None else {}
    return scheduler.add_cron_job(
        run_auth_metrics_snapshot,
        JOB_ID,
        minute="0",
        **kwargs,
    )


__all__ = ["JOB_ID", "run_auth_metrics_snapshot", "register_auth_metrics_snapshot_job"]

# Fin del archivo backend/app/shared/scheduler/jobs/auth_metrics_snapshot_job.py
