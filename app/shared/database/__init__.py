# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: Ixchel Beristain
Fecha: 2025-10-18 (ajustado 2025-11-21)
"""

from __future__ import annotations

from .base import Base, NAMING_CONVENTION, as_db_enum
from .database import (
    get_engine,
    get_session_factory,
    set_session_factory,
    dispose_engine,
    check_database_health,
)

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_db_enum",
    "get_engine",
    "get_session_factory",
    "set_session_factory",
    "dispose_engine",
    "check_database_health",
]

# Fin del archivo backend/app/shared/database/__init__.py
