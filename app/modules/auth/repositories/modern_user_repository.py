# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/repositories/modern_user_repository.py

Repositorio del almacén de autenticación moderno: usuarios, credenciales
y sesiones (auth_users / auth_accounts / auth_sessions).

Las escrituras hacen flush (para detectar violaciones de unicidad dentro
de la transacción) pero nunca commit.

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.auth.enums import UserRole
from app.modules.auth.models.modern_user_models import (
    PASSWORD_PROVIDER,
    ModernAccount,
    ModernSession,
    ModernUser,
)


class ModernUserRepository:
    """Repositorio de usuarios modernos y sus credenciales/sesiones."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    # ------------------------------------------------------------------
    # Usuarios
    # ------------------------------------------------------------------
    async def get_by_id(self, user_id: str) -> Optional[ModernUser]:
        stmt = select(ModernUser).where(ModernUser.id == user_id)
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[ModernUser]:
        norm_email = (email or "").strip().lower()
        if not norm_email:
            return None

        stmt = select(ModernUser).where(func.lower(ModernUser.email) == norm_email)
        result = await self._db.execute(stmt)
        return result.scalars().first()

    async def exists_by_email(self, email: str) -> bool:
        norm_email = (email or "").strip().lower()
        if not norm_email:
            return False

        stmt = select(func.count()).select_from(ModernUser).where(
            func.lower(ModernUser.email) == norm_email
        )
        result = await self._db.execute(stmt)
        return (result.scalar_one() or 0) > 0

    async def count_users(self) -> int:
        result = await self._db.execute(select(func.count()).select_from(ModernUser))
        return int(result.scalar_one() or 0)

    async def create_user(
        self,
        *,
        user_id: str,
        email: str,
        name: str,
        email_verified: bool,
        role: UserRole,
        chapter_id: Optional[str],
        legacy_user_id: Optional[str] = None,
    ) -> ModernUser:
        user = ModernUser(
            id=user_id,
            email=email.strip().lower(),
            name=name,
            email_verified=email_verified,
            role=UserRole(role),
            chapter_id=chapter_id,
            legacy_user_id=legacy_user_id,
        )
        self._db.add(user)
        await self._db.flush()
        return user

    # ------------------------------------------------------------------
    # Credenciales
    # ------------------------------------------------------------------
    async def create_password_credential(self, user_id: str, password_hash: str) -> ModernAccount:
        """
        Crea la credencial "password" del usuario.
        La unique (user_id, provider_id) impide una segunda credencial.
        """
        account = ModernAccount(
            user_id=user_id,
            provider_id=PASSWORD_PROVIDER,
            account_id=user_id,
            password_hash=password_hash,
        )
        self._db.add(account)
        await self._db.flush()
        return account

    async def get_password_credential(self, user_id: str) -> Optional[ModernAccount]:
        stmt = select(ModernAccount).where(
            ModernAccount.user_id == user_id,
            ModernAccount.provider_id == PASSWORD_PROVIDER,
        )
        result = await self._db.execute(stmt)
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Sesiones
    # ------------------------------------------------------------------
    async def create_session(
        self,
        *,
        user_id: str,
        token_hash: str,
        expires_at: datetime,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> ModernSession:
        session = ModernSession(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            ip_address=ip_address,
            user_agent=(user_agent or "")[:512] or None,
        )
        self._db.add(session)
        await self._db.flush()
        return session


__all__ = ["ModernUserRepository"]

# Fin del archivo backend/app/modules/auth/repositories/modern_user_repository.py
