# -*- coding: utf-8 -*-
"""
backend/app/routes/__init__.py

Ensamblador principal de ruteadores de la API.

Responsabilidades:
- Incluir el router de health (/health).
- Incluir los routers del módulo Auth (migración + métricas).

Autor: Ixchel Beristain
Fecha: 2025-11-17
"""

from fastapi import APIRouter

from app.modules.auth.routes import get_auth_routers

from .health_routes import router as health_router

router = APIRouter()

# Health check sin prefijo adicional
router.include_router(health_router)

for _auth_router in get_auth_routers():
    router.include_router(_auth_router)

__all__ = ["router"]

# Fin del archivo backend/app/routes/__init__.py
