# -*- coding: utf-8 -*-
"""
backend/tests/modules/auth/conftest.py

Fixtures del módulo Auth.

- Engine SQLite en memoria (aiosqlite + StaticPool) con el esquema
  legacy + moderno creado en cada test
- Hashers baratos: pbkdf2_sha256 con pocas rondas para el almacén
  moderno y bcrypt rounds=4 para sembrar hashes legacy
- RecordingSink: captura las líneas JSON emitidas por AuthEventLogger
- Helpers para sembrar usuarios legacy/modernos

Autor: Ixchel Beristain
Fecha: 2025-10-18
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import pytest
from passlib.context import CryptContext
from passlib.hash import bcrypt as bcrypt_hash
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.modules.auth.enums import UserRole
from app.modules.auth.metrics.store.auth_metrics_store import AuthMetricsStore
from app.modules.auth.models import LegacyUser, ModernAccount, ModernUser
from app.modules.auth.models.modern_user_models import PASSWORD_PROVIDER
from app.modules.auth.services.auth_event_logger import AuthEventLogger
from app.modules.auth.services.feature_flags import FeatureFlag, FeatureFlags
from app.shared.database.base import Base
from app.shared.utils.security import PasswordHasher, legacy_hasher

FIXED_NOW = datetime(2025, 11, 19, 12, 0, 0, tzinfo=timezone.utc)
LEGACY_PASSWORD = "Correct#Horse9"


# -------------------- Hashing -------------------- #

@pytest.fixture
def fast_modern_hasher() -> PasswordHasher:
    context = CryptContext(schemes=["pbkdf2_sha256"], pbkdf2_sha256__rounds=1000)
    return PasswordHasher(context, name="modern-test")


@pytest.fixture
def legacy_test_hasher() -> PasswordHasher:
    """El verificador legacy real (bcrypt/argon2/pbkdf2_sha256)."""
    return legacy_hasher


def make_legacy_hash(password: str) -> str:
    return bcrypt_hash.using(rounds=4).hash(password)


# -------------------- Base de datos -------------------- #

@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False)


async def seed_legacy_user(
    session_factory,
    *,
    user_id: str = "legacy-1",
    email: str = "alice@example.com",
    password: Optional[str] = LEGACY_PASSWORD,
    first_name: Optional[str] = "Alice",
    last_name: Optional[str] = "Doe",
    role: UserRole = UserRole.teacher,
    chapter_id: Optional[str] = "chapter-7",
    is_active: bool = True,
    email_verified: bool = True,
    migrated: bool = False,
    modern_user_id: Optional[str] = None,
) -> LegacyUser:
    async with session_factory() as db:
        row = LegacyUser(
            id=user_id,
            email=email,
            password_hash=make_legacy_hash(password) if password else None,
            first_name=first_name,
            last_name=last_name,
            role=role,
            chapter_id=chapter_id,
            is_active=is_active,
            email_verified=email_verified,
            migrated_to_modern_auth=migrated,
            modern_user_id=modern_user_id,
        )
        db.add(row)
        await db.commit()
        return row


async def seed_modern_user(
    session_factory,
    *,
    user_id: str = "modern-1",
    email: str = "alice@example.com",
    name: str = "Alice Doe",
    password_hash: Optional[str] = None,
    legacy_user_id: Optional[str] = None,
) -> ModernUser:
    async with session_factory() as db:
        user = ModernUser(
            id=user_id,
            email=email,
            name=name,
            email_verified=True,
            role=UserRole.teacher,
            legacy_user_id=legacy_user_id,
        )
        db.add(user)
        if password_hash:
            db.add(ModernAccount(
                user_id=user_id,
                provider_id=PASSWORD_PROVIDER,
                account_id=user_id,
                password_hash=password_hash,
            ))
        await db.commit()
        return user


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def legacy_password() -> str:
    return LEGACY_PASSWORD


@pytest.fixture
def seed_legacy(session_factory):
    """seed_legacy(**overrides) -> LegacyUser"""
    async def _seed(**kwargs):
        return await seed_legacy_user(session_factory, **kwargs)
    return _seed


@pytest.fixture
def seed_modern(session_factory):
    """seed_modern(**overrides) -> ModernUser"""
    async def _seed(**kwargs):
        return await seed_modern_user(session_factory, **kwargs)
    return _seed


# -------------------- Eventos / métricas -------------------- #

class RecordingSink:
    """LogSink en memoria; guarda (canal, registro decodificado)."""

    def __init__(self) -> None:
        self.lines: List[Tuple[str, Dict[str, Any]]] = []
        self.raw: List[str] = []

    def _record(self, channel: str, msg: str) -> None:
        self.raw.append(msg)
        self.lines.append((channel, json.loads(msg)))

    def info(self, msg: str) -> None:
        self._record("info", msg)

    def warning(self, msg: str) -> None:
        self._record("warning", msg)

    def error(self, msg: str) -> None:
        self._record("error", msg)

    def events(self, name: Optional[str] = None) -> List[Dict[str, Any]]:
        return [entry for _, entry in self.lines if name is None or entry["event"] == name]


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def metrics_store() -> AuthMetricsStore:
    return AuthMetricsStore(clock=lambda: FIXED_NOW)


@pytest.fixture
def event_logger(metrics_store, recording_sink) -> AuthEventLogger:
    return AuthEventLogger(metrics_store, sink=recording_sink, clock=lambda: FIXED_NOW)


@pytest.fixture
def flags_on() -> FeatureFlags:
    return FeatureFlags({FeatureFlag.legacy_migration: "true", FeatureFlag.modern_auth: "true"})


@pytest.fixture
def flags_off() -> FeatureFlags:
    return FeatureFlags({FeatureFlag.legacy_migration: "false", FeatureFlag.modern_auth: "true"})

# Fin del archivo backend/tests/modules/auth/conftest.py
