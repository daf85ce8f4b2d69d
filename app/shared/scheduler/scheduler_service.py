# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/scheduler_service.py

Programación de tareas periódicas del proceso con APScheduler.

Uso actual: snapshot horario de métricas de autenticación
(ver jobs/auth_metrics_snapshot_job.py). Los jobs corren en el event
loop de la app (AsyncIOExecutor) y en memoria: no hay jobstore
persistente porque las métricas tampoco lo son.

Autor: Ixchel Beristain
Fecha: 2025-11-05
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)


class SchedulerService:
    """Envoltorio delgado sobre AsyncIOScheduler (zona UTC)."""

    def __init__(self, timezone: str = "UTC"):
        self._scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            executors={"default": AsyncIOExecutor()},
            job_defaults={
                "coalesce": True,        # Combinar ejecuciones perdidas
                "max_instances": 1,      # Una instancia por job
                "misfire_grace_time": 300,
            },
            timezone=timezone,
        )
        self._started = False

    def start(self) -> None:
        """Inicia el scheduler (requiere un event loop en ejecución)."""
        if not self._started:
            self._scheduler.start()
            self._started = True
            logger.info("SchedulerService iniciado (%d jobs)", len(self._scheduler.get_jobs()))

    def shutdown(self, wait: bool = False) -> None:
        if self._started:
            self._scheduler.shutdown(wait=wait)
            self._started = False
            logger.info("SchedulerService detenido")

    def add_cron_job(
        self,
        func: Callable,
        job_id: str,
        cron_expression: Optional[str] = None,
        *,
        hour: Optional[str] = None,
        minute: Optional[str] = None,
        **kwargs: Any,
    ) -> str:
        """
        Agrega (o reemplaza) un job por expresión cron de 5 campos o por
        hora/minuto sueltos.
        """
        if cron_expression:
            parts = cron_expression.split()
            if len(parts) != 5:
                raise ValueError("Expresión cron inválida (requiere 5 campos)")
            trigger = CronTrigger.from_crontab(cron_expression, timezone=self._scheduler.timezone)
        else:
            trigger = CronTrigger(hour=hour, minute=minute, timezone=self._scheduler.timezone)

        self._scheduler.add_job(
            func=func,
            trigger=trigger,
            id=job_id,
            name=job_id,
            replace_existing=True,
            kwargs=kwargs,
        )
        logger.info("Job '%s' agregado: %s", job_id, trigger)
        return job_id

    def remove_job(self, job_id: str) -> bool:
        if self._scheduler.get_job(job_id) is None:
            return False
        self._scheduler.remove_job(job_id)
        logger.info("Job '%s' eliminado", job_id)
        return True

    def get_jobs(self) -> List[Dict[str, Any]]:
        return [
            {
                "id": job.id,
                "name": job.name,
                "next_run": getattr(job, "next_run_time", None),
                "trigger": str(job.trigger),
            }
            for job in self._scheduler.get_jobs()
        ]

    @property
    def is_running(self) -> bool:
        return self._started and self._scheduler.running


# Singleton global del scheduler
_scheduler_instance: Optional[SchedulerService] = None


def get_scheduler() -> SchedulerService:
    global _scheduler_instance
    if _scheduler_instance is None:
        _scheduler_instance = SchedulerService()
    return _scheduler_instance


def reset_scheduler() -> None:
    """Descarta el singleton (tests / reinicio del lifespan)."""
    global _scheduler_instance
    if _scheduler_instance is not None:
        _scheduler_instance.shutdown(wait=False)
    _scheduler_instance = None


__all__ = ["SchedulerService", "get_scheduler", "reset_scheduler"]

# Fin del archivo backend/app/shared/scheduler/scheduler_service.py
