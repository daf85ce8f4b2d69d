# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/repositories/legacy_user_repository.py

Repositorio de acceso a la tabla heredada `users`.

Solo lectura salvo por el "claim" de migración: un UPDATE condicional que
voltea migrated_to_modern_auth de false a true. Si otro proceso ganó la
carrera, el UPDATE afecta 0 filas y el llamador lo trata como ya migrado.

Ningún método hace commit; la transacción la controla el servicio.

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth.models.legacy_user_models import LegacyUser


def _normalize(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class LegacyUserRepository:
    """Repositorio de usuarios legacy (tabla users)."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    # ------------------------------------------------------------------
    # Lecturas
    # ------------------------------------------------------------------
    async def get_by_email(self, email: str) -> Optional[LegacyUser]:
        """
        Obtiene un usuario legacy por email (normalizado en minúsculas).
        Devuelve None si no existe.
        """
        norm_email = _normalize(email)
        if not norm_email:
            return None

        stmt = select(LegacyUser).where(func.lower(LegacyUser.email) == norm_email)
        result = await self._db.execute(stmt)
        return result.scalars().first()

    async def exists_by_email(self, email: str) -> bool:
        norm_email = _normalize(email)
        if not norm_email:
            return False

        stmt = select(func.count()).select_from(LegacyUser).where(
            func.lower(LegacyUser.email) == norm_email
        )
        result = await self._db.execute(stmt)
        return (result.scalar_one() or 0) > 0

    async def count_pending(self) -> int:
        """Número de usuarios legacy aún no migrados."""
        stmt = select(func.count()).select_from(LegacyUser).where(
            LegacyUser.migrated_to_modern_auth.is_(False)
        )
        result = await self._db.execute(stmt)
        return int(result.scalar_one() or 0)

    # ------------------------------------------------------------------
    # Escrituras
    # ------------------------------------------------------------------
    async def claim_for_migration(
        self,
        legacy_id: str,
        modern_user_id: str,
        now: datetime,
    ) -> bool:
        """
        Claim atómico de la migración.

        Ejecuta:
            UPDATE users
            SET migrated_to_modern_auth = true,
                modern_user_id = :modern_user_id,
                migrated_at = :now,
                last_login_at = :now,
                updated_at = :now
            WHERE id = :legacy_id
              AND migrated_to_modern_auth = false

        Retorna True si este proceso ganó la carrera.

        Importante: NO hace commit; el servicio maneja la transacción.
        """
        stmt = (
            update(LegacyUser)
            .where(
                LegacyUser.id == legacy_id,
                LegacyUser.migrated_to_modern_auth.is_(False),
            )
            .values(
                migrated_to_modern_auth=True,
                modern_user_id=modern_user_id,
                migrated_at=now,
                last_login_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._db.execute(stmt)
        return (result.rowcount or 0) == 1


__all__ = ["LegacyUserRepository"]

# Fin del archivo backend/app/modules/auth/repositories/legacy_user_repository.py
