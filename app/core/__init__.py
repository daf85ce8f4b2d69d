# -*- coding: utf-8 -*-
"""
backend/app/core/__init__.py

Puntos de entrada estables para los componentes centrales de Campus Auth:
- Configuración (settings)
- Logging
- Motor de base de datos y sesiones

Envuelve la implementación de `app.shared.*` para que los módulos de
dominio no dependan de su ubicación interna.

Autor: Ixchel Beristain
Fecha: 2025-11-17
"""

from .settings import get_settings
from .logging import setup_logging
from .db import (
    Base,
    get_engine,
    get_session_factory,
    dispose_engine,
    check_database_health,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Base",
    "get_engine",
    "get_session_factory",
    "dispose_engine",
    "check_database_health",
]

# Fin del archivo backend/app/core/__init__.py
