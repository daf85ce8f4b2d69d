# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/facades/__init__.py

Punto de entrada de facades del módulo Auth.

Exporta:
    - AuthFacade
    - AuthFacadeResponse

Usados por las rutas de migración y de métricas para orquestar
feature flags, motor de migración, sesiones y observabilidad.

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

from .auth_facade import AuthFacade, AuthFacadeResponse, failure_response, parse_hours

__all__ = [
    "AuthFacade",
    "AuthFacadeResponse",
    "failure_response",
    "parse_hours",
]

# Fin del script backend/app/modules/auth/facades/__init__.py
