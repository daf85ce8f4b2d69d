# -*- coding: utf-8 -*-
"""
backend/app/routes/health_routes.py

Health check del backend: estado del proceso, conectividad a la BD y
feature flags efectivas de autenticación.

Autor: Ixchel Beristain
Fecha: 2025-11-17
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from app.core.db import check_database_health
from app.core.settings import get_settings
from app.modules.auth.dependencies import get_auth_container

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    summary="Health check del backend",
    description=(
        "Devuelve el estado básico del backend, incluyendo verificación "
        "simple de conectividad a la base de datos."
    ),
)
async def health_check() -> dict:
    settings = get_settings()

    db_ok = await check_database_health(timeout_s=2.0)

    return {
        "status": "ok" if db_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "environment": settings.python_env,
        "database": {
            "reachable": db_ok,
        },
        "auth": {
            "flags": get_auth_container().flags.snapshot(),
        },
        "service": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
    }


@router.get("/health/live", include_in_schema=False)
async def health_live() -> dict:
    return {"live": True}

# Fin del archivo backend/app/routes/health_routes.py
