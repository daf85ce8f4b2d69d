# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/enums/role_enum.py

Enum de roles de usuario de la plataforma.
Persistido como VARCHAR (la tabla legacy `users` ya guarda el rol como texto).

Roles disponibles: student, teacher, chapter_admin, regional_coordinator, admin

Autor: Ixchel Beristain
Fecha: 23/10/2025
"""
from enum import StrEnum

from app.shared.database.base import as_db_enum


class UserRole(StrEnum):
    student = "student"
    teacher = "teacher"
    chapter_admin = "chapter_admin"
    regional_coordinator = "regional_coordinator"
    admin = "admin"


def user_role_db_enum(name: str = "user_role_enum"):
    """Tipo SQLAlchemy (VARCHAR validado) para columnas de rol."""
    return as_db_enum(UserRole, name=name)


__all__ = ["UserRole", "user_role_db_enum"]

# Fin del archivo backend/app/modules/auth/enums/role_enum.py
