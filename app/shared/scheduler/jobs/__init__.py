# -*- coding: utf-8 -*-
"""
backend/app/shared/scheduler/jobs/__init__.py

Jobs programados del sistema.

Autor: Ixchel Beristain
Fecha: 2025-11-05
"""

from .auth_metrics_snapshot_job import (
    JOB_ID as AUTH_METRICS_SNAPSHOT_JOB_ID,
    register_auth_metrics_snapshot_job,
    run_auth_metrics_snapshot,
)

__all__ = [
    "AUTH_METRICS_SNAPSHOT_JOB_ID",
    "register_auth_metrics_snapshot_job",
    "run_auth_metrics_snapshot",
]
