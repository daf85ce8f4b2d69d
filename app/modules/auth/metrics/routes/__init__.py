# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/metrics/routes/__init__.py

Router de métricas de autenticación (/auth/metrics*).

    from app.modules.auth.metrics.routes import router as metrics_auth_router

Se monta junto al router de migración desde get_auth_routers().

Autor: Ixchel Beristain
Fecha: 20/11/2025
"""

from .metrics_routes import router

__all__ = ["router"]

# Fin del archivo backend/app/modules/auth/metrics/routes/__init__.py
