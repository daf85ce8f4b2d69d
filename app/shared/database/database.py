# -*- coding: utf-8 -*-
"""
backend/app/shared/database/database.py

SQLAlchemy 2.0 async + asyncpg.

Provee:
- get_engine() / get_session_factory(): construcción perezosa (no conecta al importar)
- Base (DeclarativeBase con naming convention)
- check_database_health()

Notas:
- La fábrica de sesiones usa expire_on_commit=False para que los servicios
  puedan seguir leyendo atributos después del commit.
- El motor se crea la primera vez que alguien lo pide; los tests sustituyen
  la fábrica con set_session_factory() apuntando a SQLite en memoria.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.shared.config import settings
from app.shared.database.base import Base  # reutilizamos la Base única

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Devuelve el engine global, creándolo en el primer uso."""
    global _engine
    if _engine is None:
        echo = bool(getattr(settings, "db_echo_sql", False))
        _engine = create_async_engine(
            settings.database_url,
            echo=echo,
            pool_pre_ping=True,
        )
        logger.info(
            "[DB] Engine creado → %s:%s/%s (asyncpg, echo=%s)",
            settings.db_host,
            settings.db_port,
            settings.db_name,
            echo,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Devuelve la fábrica de sesiones asíncronas (singleton perezoso)."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            bind=get_engine(),
            expire_on_commit=False,
            class_=AsyncSession,
            autoflush=False,
        )
    return _session_factory


def set_session_factory(factory: Optional[async_sessionmaker[AsyncSession]]) -> None:
    """Reemplaza la fábrica de sesiones (tests / scripts)."""
    global _session_factory
    _session_factory = factory


async def dispose_engine() -> None:
    """Cierra el pool del engine (shutdown)."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


# ── Health check
async def check_database_health(timeout_s: float = 3.0, sql: str = "SELECT 1") -> bool:
    """
    Verifica conectividad a la base de datos.

    Args:
        timeout_s: Tiempo máximo de espera en segundos
        sql: Query SQL a ejecutar (default: "SELECT 1")

    Returns:
        True si la conexión es exitosa, False en caso contrario
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with get_session_factory()() as session:
                await session.execute(text(sql))
        return True
    except Exception as e:
        logger.warning("[DB] health check falló: %s", e)
        return False


__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "set_session_factory",
    "dispose_engine",
    "check_database_health",
]
# Fin del archivo backend/app/shared/database/database.py
