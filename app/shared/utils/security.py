# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/security.py

Utilidades de seguridad consolidadas para Campus Auth.

Incluye:
- Verificación de contraseñas del sistema legacy (bcrypt / argon2 / pbkdf2)
- Hasheo y verificación de credenciales modernas (Argon2id via passlib)
- Variantes asíncronas que delegan el trabajo CPU-bound a un hilo
- Generación de tokens de sesión opacos y su hash SHA-256

Autor: Ixchel Beristain
Fecha: 2025-10-18
Actualizado: 2025-12-20 - Contexto legacy separado del moderno
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
import secrets

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

# ===== LÍMITES =====
# Límite máximo para prevenir DoS con payloads gigantes
MAX_PASSWORD_LENGTH = 1024

# ===== CONTEXTO MODERNO (Argon2id) =====
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__type="ID",
    argon2__memory_cost=65536,  # 64 MB
    argon2__time_cost=3,
    argon2__parallelism=2,
)

# ===== CONTEXTO LEGACY =====
# La tabla `users` heredada contiene hashes bcrypt ($2a$/$2b$) y, en cuentas
# recientes, argon2 o pbkdf2_sha256. Solo se usa para verificar.
legacy_pwd_context = CryptContext(
    schemes=["bcrypt", "argon2", "pbkdf2_sha256"],
    deprecated="auto",
)


class PasswordTooLongError(ValueError):
    """Contraseña excede el límite máximo permitido."""
    pass


class PasswordHasher:
    """
    Envoltura fina sobre un CryptContext de passlib.

    Los métodos *_async ejecutan el hash en un hilo (asyncio.to_thread)
    para no bloquear el event loop.
    """

    def __init__(self, context: CryptContext, name: str = "modern") -> None:
        self._context = context
        self._name = name

    def hash(self, password: str) -> str:
        if len(password) > MAX_PASSWORD_LENGTH:
            raise PasswordTooLongError(
                f"La contraseña no puede exceder {MAX_PASSWORD_LENGTH} caracteres"
            )
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str | None) -> bool:
        """
        Devuelve False si la contraseña no coincide, es demasiado larga
        o el hash almacenado no es reconocible.
        """
        if not hashed_password or len(plain_password) > MAX_PASSWORD_LENGTH:
            return False
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            # Hash corrupto o esquema desconocido: se trata como no coincidente
            logger.warning("[%s] hash no verificable: %s", self._name, e)
            return False

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, plain_password: str, hashed_password: str | None) -> bool:
        return await asyncio.to_thread(self.verify, plain_password, hashed_password)


modern_hasher = PasswordHasher(pwd_context, name="modern")
legacy_hasher = PasswordHasher(legacy_pwd_context, name="legacy")


# ===== TOKENS DE SESIÓN =====
def generate_session_token(nbytes: int = 32) -> str:
    """Token opaco url-safe para la cookie de sesión."""
    return secrets.token_urlsafe(nbytes)


def hash_token(token: str) -> str:
    """SHA-256 hex del token; solo el hash se persiste."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


__all__ = [
    "MAX_PASSWORD_LENGTH",
    "PasswordTooLongError",
    "PasswordHasher",
    "pwd_context",
    "legacy_pwd_context",
    "modern_hasher",
    "legacy_hasher",
    "generate_session_token",
    "hash_token",
]

# Fin del archivo backend/app/shared/utils/security.py
