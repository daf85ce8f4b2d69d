# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/models/modern_user_models.py

Modelos ORM del sistema de autenticación moderno (basado en sesiones).

- ModernUser (auth_users): principal moderno; email único en minúsculas
- ModernAccount (auth_accounts): credenciales por proveedor; como máximo
  una credencial "password" por usuario (unique user_id + provider_id)
- ModernSession (auth_sessions): sesiones opacas; solo se guarda el
  SHA-256 del token

Autor: Ixchel Beristain
Fecha: 25/10/2025
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.shared.database.base import Base
from app.modules.auth.enums import UserRole, user_role_db_enum

PASSWORD_PROVIDER = "password"


def _new_id() -> str:
    return uuid.uuid4().hex


class ModernUser(Base):
    __tablename__ = "auth_users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false(), nullable=False)

    role: Mapped[UserRole] = mapped_column(
        user_role_db_enum(),
        nullable=False,
        default=UserRole.student,
        server_default=UserRole.student.value,
    )
    chapter_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Referencia al registro legacy de origen (si lo hay)
    legacy_user_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    accounts: Mapped[List["ModernAccount"]] = relationship(
        "ModernAccount", back_populates="user", cascade="all, delete-orphan", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<ModernUser id={self.id!r} email={self.email!r}>"


class ModernAccount(Base):
    """Credencial de un usuario moderno para un proveedor dado."""
    __tablename__ = "auth_accounts"
    __table_args__ = (
        UniqueConstraint("user_id", "provider_id", name="uq_auth_accounts_user_provider"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("auth_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    provider_id: Mapped[str] = mapped_column(String(40), nullable=False, default=PASSWORD_PROVIDER)
    account_id: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    user: Mapped["ModernUser"] = relationship("ModernUser", back_populates="accounts")


class ModernSession(Base):
    """Sesión emitida por el proveedor de sesiones moderno."""
    __tablename__ = "auth_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("auth_users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)

    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)  # IPv6
    user_agent: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_auth_sessions_user_active", "user_id", "revoked_at"),
    )


__all__ = ["ModernUser", "ModernAccount", "ModernSession", "PASSWORD_PROVIDER"]
# Fin del archivo backend/app/modules/auth/models/modern_user_models.py
