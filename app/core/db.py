# -*- coding: utf-8 -*-
"""
backend/app/core/db.py

Fachada para la capa de acceso a datos basada en SQLAlchemy async.
Envuelve `app.shared.database.database`.

Autor: Ixchel Beristain
Fecha: 2025-11-17
"""

from app.shared.database.database import (
    Base,
    get_engine,
    get_session_factory,
    dispose_engine,
    check_database_health,
)

__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "dispose_engine",
    "check_database_health",
]

# Fin del archivo backend/app/core/db.py
