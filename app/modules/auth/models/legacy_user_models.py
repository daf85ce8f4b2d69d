# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/models/legacy_user_models.py

Modelo de la tabla heredada `users` (sistema de autenticación anterior).

La tabla la crea y alimenta el sistema legacy; este servicio solo agrega
dos columnas propias de la migración:
- migrated_to_modern_auth: bandera booleana (default false)
- modern_user_id: referencia inversa al usuario moderno

Transición válida única: migrated_to_modern_auth false -> true.

Autor: Ixchel Beristáin
Fecha: 18/10/2025
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String, false, func
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base
from app.modules.auth.enums import UserRole, user_role_db_enum


class LegacyUser(Base):
    __tablename__ = "users"

    # Los ids legacy se convirtieron a texto en la migración 024
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True, nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    first_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        user_role_db_enum(),
        nullable=False,
        default=UserRole.student,
        server_default=UserRole.student.value,
    )
    chapter_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false(), nullable=False)

    # --- Columnas de migración ---
    migrated_to_modern_auth: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False, index=True
    )
    modern_user_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    migrated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @property
    def display_name(self) -> str:
        """Nombre visible: nombre + apellido, o la parte local del email."""
        parts = [p.strip() for p in (self.first_name, self.last_name) if p and p.strip()]
        if parts:
            return " ".join(parts)
        return (self.email or "").split("@", 1)[0]

    def __repr__(self) -> str:
        return (
            f"<LegacyUser id={self.id!r} email={self.email!r} "
            f"active={self.is_active} migrated={self.migrated_to_modern_auth}>"
        )


__all__ = ["LegacyUser"]
# Fin del archivo backend/app/modules/auth/models/legacy_user_models.py
