# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/routes/__init__.py

Ensambla los routers de migración y métricas del módulo Auth.
Se importa desde main.py para montarlos sobre la app.

Autor: Ixchel Beristain
Fecha: 20/11/2025
"""

from fastapi import APIRouter

from .migration_routes import router as migration_router

# Métricas del módulo Auth
from ..metrics.routes import router as metrics_auth_router   # noqa


def get_auth_routers() -> list[APIRouter]:
    """Devuelve todos los routers listos para montar."""
    return [
        migration_router,
        metrics_auth_router,
    ]


__all__ = ["get_auth_routers"]

# Fin del archivo backend/app/modules/auth/routes/__init__.py
