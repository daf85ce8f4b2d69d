# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/services/legacy_migration_service.py

Motor de migración transparente de usuarios legacy al almacén moderno.

Se ejecuta en el primer login exitoso de un usuario legacy:

    1. Gate por feature flag (sin efectos ni logs)
    2. Búsqueda del usuario legacy por email normalizado
    3. Idempotencia:
       - migrado + usuario moderno presente  -> ALREADY_MIGRATED
       - migrado + usuario moderno ausente   -> estado inconsistente, error
       - no migrado + usuario moderno con el mismo email -> ALREADY_MIGRATED
         (se dio de alta por el flujo moderno; no se toca nada)
    4. Cuenta activa
    5. Verificación del hash legacy (en hilo, passlib)
    6. Transacción única y protegida contra cancelación:
       claim condicional del registro legacy + usuario moderno +
       credencial "password" re-hasheada con Argon2id + last_login_at
    7. Evento legacy_migration_success

El motor nunca lanza excepciones: devuelve un MigrationResult etiquetado.
Si el commit falla, migrated_to_modern_auth queda en false y el
siguiente intento puede completarse.

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Callable, Dict, Mapping, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.modules.auth.enums import MigrationErrorCode
from app.modules.auth.models.legacy_user_models import LegacyUser
from app.modules.auth.repositories import LegacyUserRepository, ModernUserRepository
from app.modules.auth.services.auth_event_logger import AuthEventLogger
from app.modules.auth.services.feature_flags import FeatureFlags
from app.modules.auth.utils.log_sanitizer import mask_email, normalize_email
from app.shared.utils.security import PasswordHasher, legacy_hasher, modern_hasher

logger = logging.getLogger(__name__)

# Commits en curso; se retienen hasta terminar aunque el llamador se cancele
_PENDING_COMMITS: Set[asyncio.Task] = set()

INCONSISTENT_STATE = "INCONSISTENT_STATE"
COMMIT_FAILED = "COMMIT_FAILED"


class MigrationOutcome(StrEnum):
    MIGRATED = "migrated"
    ALREADY_MIGRATED = "already_migrated"
    FAIL = "fail"


@dataclass(frozen=True)
class MigratedPrincipal:
    """Principal moderno recién creado (datos públicos, sin secretos)."""
    id: str
    legacy_id: str
    email: str
    name: str
    first_name: Optional[str]
    last_name: Optional[str]
    role: str
    chapter_id: Optional[str]
    email_verified: bool
    is_active: bool = True

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "legacyId": self.legacy_id,
            "email": self.email,
            "name": self.name,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role,
            "chapter": self.chapter_id,
            "emailVerified": self.email_verified,
            "isActive": self.is_active,
        }


@dataclass(frozen=True)
class MigrationResult:
    outcome: MigrationOutcome
    principal: Optional[MigratedPrincipal] = None
    code: Optional[MigrationErrorCode] = None

    @classmethod
    def migrated(cls, principal: MigratedPrincipal) -> "MigrationResult":
        return cls(MigrationOutcome.MIGRATED, principal=principal)

    @classmethod
    def already_migrated(cls) -> "MigrationResult":
        return cls(MigrationOutcome.ALREADY_MIGRATED)

    @classmethod
    def fail(cls, code: MigrationErrorCode) -> "MigrationResult":
        return cls(MigrationOutcome.FAIL, code=code)

    @property
    def ok(self) -> bool:
        return self.outcome != MigrationOutcome.FAIL


@dataclass(frozen=True)
class _LegacySnapshot:
    """Copia desacoplada de la fila legacy leída en el paso 2."""
    id: str
    email: str
    password_hash: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    display_name: str
    role: str
    chapter_id: Optional[str]
    is_active: bool
    email_verified: bool
    migrated: bool

    @classmethod
    def from_row(cls, row: LegacyUser) -> "_LegacySnapshot":
        return cls(
            id=row.id,
            email=normalize_email(row.email),
            password_hash=row.password_hash,
            first_name=row.first_name,
            last_name=row.last_name,
            display_name=row.display_name,
            role=str(row.role.value if hasattr(row.role, "value") else row.role),
            chapter_id=row.chapter_id,
            is_active=bool(row.is_active),
            email_verified=bool(row.email_verified),
            migrated=bool(row.migrated_to_modern_auth),
        )


class _AlreadyClaimed(Exception):
    """Otro proceso ganó el claim condicional."""


class LegacyMigrationService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        flags: FeatureFlags,
        events: AuthEventLogger,
        *,
        legacy_password_hasher: PasswordHasher = legacy_hasher,
        modern_password_hasher: PasswordHasher = modern_hasher,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        self._session_factory = session_factory
        self._flags = flags
        self._events = events
        self._legacy_hasher = legacy_password_hasher
        self._modern_hasher = modern_password_hasher
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)

    # ------------------------------------------------------------------
    # Flujo principal
    # ------------------------------------------------------------------
    async def migrate_on_login(
        self,
        email: str,
        password: str,
        request: Optional[Mapping[str, Any]] = None,
    ) -> MigrationResult:
        norm_email = normalize_email(email)

        # 1) Gate
        if not self._flags.legacy_migration:
            return MigrationResult.fail(MigrationErrorCode.MIGRATION_DISABLED)

        # 2) + 3) Lectura (cancelable)
        try:
            async with self._session_factory() as db:
                row = await LegacyUserRepository(db).get_by_email(norm_email)
                if row is None:
                    return MigrationResult.fail(MigrationErrorCode.USER_NOT_FOUND)
                legacy = _LegacySnapshot.from_row(row)
                modern_exists = await ModernUserRepository(db).exists_by_email(norm_email)
        except Exception as e:
            logger.error(
                "[migration] lectura falló para %s: %s",
                mask_email(norm_email),
                type(e).__name__,
            )
            return MigrationResult.fail(MigrationErrorCode.INTERNAL_ERROR)

        if legacy.migrated:
            if modern_exists:
                return MigrationResult.already_migrated()
            # Nunca se "re-migra" en silencio
            self._events.log_legacy_migration_failure(
                norm_email,
                INCONSISTENT_STATE,
                request,
                legacy_user_id=legacy.id,
            )
            return MigrationResult.fail(MigrationErrorCode.INTERNAL_ERROR)

        if modern_exists:
            logger.warning(
                "[migration] %s ya existe en el almacén moderno sin migración legacy; no se modifica",
                mask_email(norm_email),
            )
            return MigrationResult.already_migrated()

        # 4) Cuenta activa
        if not legacy.is_active:
            return MigrationResult.fail(MigrationErrorCode.ACCOUNT_DISABLED)

        # 5) Verificación legacy
        try:
            valid = await self._legacy_hasher.verify_async(password, legacy.password_hash)
        except Exception as e:
            logger.error("[migration] verificación legacy falló: %s", type(e).__name__)
            return MigrationResult.fail(MigrationErrorCode.INTERNAL_ERROR)
        if not valid:
            return MigrationResult.fail(MigrationErrorCode.INVALID_PASSWORD)

        # 6) + 7) Transacción: la cancelación del llamador no la interrumpe
        task = asyncio.ensure_future(self._commit_migration(legacy, password, request))
        _PENDING_COMMITS.add(task)
        task.add_done_callback(_PENDING_COMMITS.discard)
        return await asyncio.shield(task)

    async def _commit_migration(
        self,
        legacy: _LegacySnapshot,
        password: str,
        request: Optional[Mapping[str, Any]],
    ) -> MigrationResult:
        modern_id = self._id_factory()
        now = self._clock()
        try:
            modern_hash = await self._modern_hasher.hash_async(password)

            async with self._session_factory() as db:
                async with db.begin():
                    claimed = await LegacyUserRepository(db).claim_for_migration(
                        legacy.id, modern_id, now
                    )
                    if not claimed:
                        raise _AlreadyClaimed()

                    modern_repo = ModernUserRepository(db)
                    await modern_repo.create_user(
                        user_id=modern_id,
                        email=legacy.email,
                        name=legacy.display_name,
                        email_verified=legacy.email_verified,
                        role=legacy.role,
                        chapter_id=legacy.chapter_id,
                        legacy_user_id=legacy.id,
                    )
                    await modern_repo.create_password_credential(modern_id, modern_hash)
        except _AlreadyClaimed:
            logger.info("[migration] %s migrado por otra solicitud concurrente", mask_email(legacy.email))
            return MigrationResult.already_migrated()
        except Exception as e:
            logger.error(
                "[migration] commit falló para %s: %s",
                mask_email(legacy.email),
                type(e).__name__,
            )
            self._events.log_legacy_migration_failure(
                legacy.email,
                COMMIT_FAILED,
                request,
                legacy_user_id=legacy.id,
                error_type=type(e).__name__,
            )
            return MigrationResult.fail(MigrationErrorCode.INTERNAL_ERROR)

        principal = MigratedPrincipal(
            id=modern_id,
            legacy_id=legacy.id,
            email=legacy.email,
            name=legacy.display_name,
            first_name=legacy.first_name,
            last_name=legacy.last_name,
            role=legacy.role,
            chapter_id=legacy.chapter_id,
            email_verified=legacy.email_verified,
        )
        self._events.log_legacy_migration_success(
            legacy.email,
            modern_id,
            legacy.id,
            request,
        )
        logger.info("[migration] %s migrado (modern_id=%s)", mask_email(legacy.email), modern_id)
        return MigrationResult.migrated(principal)

    # ------------------------------------------------------------------
    # Consultas auxiliares
    # ------------------------------------------------------------------
    async def is_migrated(self, email: str) -> bool:
        """True si existe un usuario moderno con ese email."""
        async with self._session_factory() as db:
            return await ModernUserRepository(db).exists_by_email(email)

    async def is_legacy_known(self, email: str) -> bool:
        async with self._session_factory() as db:
            return await LegacyUserRepository(db).exists_by_email(email)

    async def pending_count(self) -> int:
        async with self._session_factory() as db:
            return await LegacyUserRepository(db).count_pending()

    async def total_users(self) -> int:
        async with self._session_factory() as db:
            return await ModernUserRepository(db).count_users()


__all__ = [
    "LegacyMigrationService",
    "MigrationOutcome",
    "MigrationResult",
    "MigratedPrincipal",
]

# Fin del archivo backend/app/modules/auth/services/legacy_migration_service.py
