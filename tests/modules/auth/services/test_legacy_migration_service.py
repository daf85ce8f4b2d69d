# -*- coding: utf-8 -*-
"""
tests/modules/auth/services/test_legacy_migration_service.py

Tests del motor de migración legacy sobre SQLite en memoria.

Cubre:
- Migración en primer login (usuario moderno + credencial + back-reference)
- Idempotencia (ya migrado / usuario moderno preexistente)
- Password inválido, usuario inexistente, cuenta desactivada, flag apagado
- Estado inconsistente (migrado sin usuario moderno)
- Fallo del commit: nada queda a medias y el reintento funciona
- Claim concurrente: solo un proceso crea el usuario moderno
- Cancelación del llamador durante el commit

Autor: Ixchel Beristain
Fecha: 19/11/2025
"""

import asyncio

import pytest
from sqlalchemy import func, select

from app.modules.auth.enums import MigrationErrorCode
from app.modules.auth.models import LegacyUser, ModernAccount, ModernUser
from app.modules.auth.repositories import LegacyUserRepository, ModernUserRepository
from app.modules.auth.services.legacy_migration_service import (
    LegacyMigrationService,
    MigrationOutcome,
    _LegacySnapshot,
    _PENDING_COMMITS,
)


@pytest.fixture
def service(session_factory, flags_on, event_logger, fast_modern_hasher, legacy_test_hasher):
    return LegacyMigrationService(
        session_factory,
        flags_on,
        event_logger,
        legacy_password_hasher=legacy_test_hasher,
        modern_password_hasher=fast_modern_hasher,
        id_factory=lambda: "modern-new",
    )


async def _count(session_factory, model) -> int:
    async with session_factory() as db:
        return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def _legacy_row(session_factory, legacy_id: str = "legacy-1") -> LegacyUser:
    async with session_factory() as db:
        return await db.get(LegacyUser, legacy_id)


class TestMigrateOnLogin:
    """Flujo principal de migrate_on_login"""

    async def test_first_login_migrates_user(
        self, service, seed_legacy, session_factory, legacy_password, fast_modern_hasher,
        metrics_store, recording_sink,
    ):
        """Primer login válido: crea usuario moderno, credencial y marca el legacy"""
        await seed_legacy()
        metrics_store.set_population_gauge("pendingLegacyMigrations", 3)

        result = await service.migrate_on_login("Alice@Example.com ", legacy_password)

        assert result.outcome == MigrationOutcome.MIGRATED
        assert result.ok
        principal = result.principal
        assert principal.id == "modern-new"
        assert principal.legacy_id == "legacy-1"
        assert principal.email == "alice@example.com"
        assert principal.name == "Alice Doe"
        assert principal.role == "teacher"
        assert principal.chapter_id == "chapter-7"
        assert principal.email_verified is True

        legacy = await _legacy_row(session_factory)
        assert legacy.migrated_to_modern_auth is True
        assert legacy.modern_user_id == "modern-new"
        assert legacy.migrated_at is not None
        assert legacy.last_login_at is not None

        async with session_factory() as db:
            repo = ModernUserRepository(db)
            modern = await repo.get_by_email("alice@example.com")
            assert modern is not None
            assert modern.legacy_user_id == "legacy-1"
            credential = await repo.get_password_credential(modern.id)
        assert credential is not None
        # La credencial moderna verifica con el mismo password
        assert fast_modern_hasher.verify(legacy_password, credential.password_hash)

        assert metrics_store.counters()["legacyMigration"]["success"] == 1
        assert metrics_store.population()["pendingLegacyMigrations"] == 2
        events = recording_sink.events("legacy_migration_success")
        assert len(events) == 1
        assert events[0]["user_id"] == "modern-new"
        assert events[0]["email"] == "a***e@example.com"

    async def test_second_call_is_already_migrated(
        self, service, seed_legacy, session_factory, legacy_password, metrics_store,
    ):
        """Dos llamadas seguidas: una migración y luego AlreadyMigrated"""
        await seed_legacy()

        first = await service.migrate_on_login("alice@example.com", legacy_password)
        second = await service.migrate_on_login("alice@example.com", legacy_password)

        assert first.outcome == MigrationOutcome.MIGRATED
        assert second.outcome == MigrationOutcome.ALREADY_MIGRATED
        assert await _count(session_factory, ModernUser) == 1
        assert await _count(session_factory, ModernAccount) == 1
        assert metrics_store.counters()["legacyMigration"] == {"success": 1, "failure": 0}

    async def test_already_migrated_user_without_password_check(
        self, service, seed_legacy, seed_modern, metrics_store,
    ):
        """Usuario ya migrado: no se verifica el password ni se emiten eventos de migración"""
        await seed_legacy(migrated=True, modern_user_id="modern-1")
        await seed_modern(user_id="modern-1", legacy_user_id="legacy-1")

        result = await service.migrate_on_login("alice@example.com", "whatever")

        assert result.outcome == MigrationOutcome.ALREADY_MIGRATED
        assert metrics_store.counters()["legacyMigration"] == {"success": 0, "failure": 0}

    async def test_modern_user_registered_directly_is_not_touched(
        self, service, seed_legacy, seed_modern, session_factory, legacy_password,
    ):
        """Existe usuario moderno con el mismo email pero el legacy no está migrado"""
        await seed_legacy()
        await seed_modern(user_id="modern-direct")

        result = await service.migrate_on_login("alice@example.com", legacy_password)

        assert result.outcome == MigrationOutcome.ALREADY_MIGRATED
        legacy = await _legacy_row(session_factory)
        assert legacy.migrated_to_modern_auth is False
        assert await _count(session_factory, ModernUser) == 1

    async def test_wrong_password(self, service, seed_legacy, session_factory, metrics_store):
        await seed_legacy()

        result = await service.migrate_on_login("alice@example.com", "wrong-password")

        assert result.outcome == MigrationOutcome.FAIL
        assert result.code == MigrationErrorCode.INVALID_PASSWORD
        legacy = await _legacy_row(session_factory)
        assert legacy.migrated_to_modern_auth is False
        assert await _count(session_factory, ModernUser) == 0
        assert metrics_store.counters()["legacyMigration"] == {"success": 0, "failure": 0}

    async def test_unknown_user(self, service, session_factory):
        result = await service.migrate_on_login("nobody@example.com", "pw")

        assert result.code == MigrationErrorCode.USER_NOT_FOUND
        assert await _count(session_factory, ModernUser) == 0

    async def test_disabled_account(self, service, seed_legacy, session_factory, legacy_password):
        await seed_legacy(is_active=False)

        result = await service.migrate_on_login("alice@example.com", legacy_password)

        assert result.code == MigrationErrorCode.ACCOUNT_DISABLED
        assert await _count(session_factory, ModernUser) == 0

    async def test_flag_disabled_does_not_touch_store(
        self, session_factory, flags_off, event_logger, fast_modern_hasher, legacy_test_hasher,
        seed_legacy, legacy_password, recording_sink,
    ):
        """Con el flag apagado no se lee el almacén legacy ni se registra nada"""
        await seed_legacy()
        service = LegacyMigrationService(
            session_factory,
            flags_off,
            event_logger,
            legacy_password_hasher=legacy_test_hasher,
            modern_password_hasher=fast_modern_hasher,
        )

        result = await service.migrate_on_login("alice@example.com", legacy_password)

        assert result.code == MigrationErrorCode.MIGRATION_DISABLED
        assert recording_sink.lines == []
        legacy = await _legacy_row(session_factory)
        assert legacy.migrated_to_modern_auth is False

    async def test_inconsistent_state_reports_internal_error(
        self, service, seed_legacy, session_factory, legacy_password, recording_sink, metrics_store,
    ):
        """Marcado como migrado pero sin usuario moderno: nunca se re-migra"""
        await seed_legacy(migrated=True, modern_user_id="ghost")

        result = await service.migrate_on_login("alice@example.com", legacy_password)

        assert result.code == MigrationErrorCode.INTERNAL_ERROR
        assert await _count(session_factory, ModernUser) == 0
        failures = recording_sink.events("legacy_migration_failure")
        assert len(failures) == 1
        assert failures[0]["reason"] == "INCONSISTENT_STATE"
        assert failures[0]["level"] == "error"
        assert metrics_store.counters()["legacyMigration"]["failure"] == 1

    async def test_legacy_row_without_password_hash(self, service, seed_legacy):
        await seed_legacy(password=None)

        result = await service.migrate_on_login("alice@example.com", "anything")

        assert result.code == MigrationErrorCode.INVALID_PASSWORD

    async def test_read_failure_maps_to_internal_error(self, service, monkeypatch):
        async def boom(self, email):
            raise RuntimeError("db down")

        monkeypatch.setattr(LegacyUserRepository, "get_by_email", boom)

        result = await service.migrate_on_login("alice@example.com", "pw")

        assert result.code == MigrationErrorCode.INTERNAL_ERROR


class TestMigrationAtomicity:
    """Transacción única: todo o nada"""

    async def test_commit_failure_leaves_no_partial_state(
        self, service, seed_legacy, session_factory, legacy_password, monkeypatch,
        recording_sink, metrics_store,
    ):
        await seed_legacy()

        async def fail_credential(self, user_id, password_hash):
            raise RuntimeError("unique violation")

        monkeypatch.setattr(ModernUserRepository, "create_password_credential", fail_credential)

        result = await service.migrate_on_login("alice@example.com", legacy_password)

        assert result.code == MigrationErrorCode.INTERNAL_ERROR
        legacy = await _legacy_row(session_factory)
        assert legacy.migrated_to_modern_auth is False
        assert legacy.modern_user_id is None
        assert await _count(session_factory, ModernUser) == 0
        assert await _count(session_factory, ModernAccount) == 0

        failures = recording_sink.events("legacy_migration_failure")
        assert failures[0]["reason"] == "COMMIT_FAILED"
        assert failures[0]["error_type"] == "RuntimeError"
        assert metrics_store.counters()["legacyMigration"] == {"success": 0, "failure": 1}

        # Reintento con el repositorio sano
        monkeypatch.undo()
        retry = await service.migrate_on_login("alice@example.com", legacy_password)
        assert retry.outcome == MigrationOutcome.MIGRATED

    async def test_lost_claim_returns_already_migrated(
        self, service, seed_legacy, session_factory, legacy_password,
    ):
        """Dos commits con la misma lectura: el segundo pierde el claim"""
        await seed_legacy()
        async with session_factory() as db:
            row = await LegacyUserRepository(db).get_by_email("alice@example.com")
            snapshot = _LegacySnapshot.from_row(row)

        winner = await service._commit_migration(snapshot, legacy_password, None)
        loser = await service._commit_migration(snapshot, legacy_password, None)

        assert winner.outcome == MigrationOutcome.MIGRATED
        assert loser.outcome == MigrationOutcome.ALREADY_MIGRATED
        assert await _count(session_factory, ModernUser) == 1

    async def test_caller_cancellation_does_not_interrupt_commit(
        self, session_factory, flags_on, event_logger, fast_modern_hasher, legacy_test_hasher,
        seed_legacy, legacy_password, recording_sink,
    ):
        await seed_legacy()
        entered = asyncio.Event()
        release = asyncio.Event()

        class GatedHasher:
            async def hash_async(self, password):
                entered.set()
                await release.wait()
                return await fast_modern_hasher.hash_async(password)

        service = LegacyMigrationService(
            session_factory,
            flags_on,
            event_logger,
            legacy_password_hasher=legacy_test_hasher,
            modern_password_hasher=GatedHasher(),
        )

        task = asyncio.create_task(service.migrate_on_login("alice@example.com", legacy_password))
        await entered.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        # La tarea del commit sigue retenida mientras el llamador ya no existe
        assert len(_PENDING_COMMITS) == 1
        commit_task = next(iter(_PENDING_COMMITS))

        release.set()
        # El commit protegido sigue en segundo plano; se espera a su evento
        for _ in range(500):
            if recording_sink.events("legacy_migration_success"):
                break
            await asyncio.sleep(0.01)

        await commit_task
        await asyncio.sleep(0)
        assert commit_task not in _PENDING_COMMITS

        legacy = await _legacy_row(session_factory)
        assert legacy.migrated_to_modern_auth is True
        assert await _count(session_factory, ModernUser) == 1


class TestAuxiliaryQueries:
    async def test_status_and_population_queries(self, service, seed_legacy, legacy_password):
        await seed_legacy()
        await seed_legacy(user_id="legacy-2", email="bob@example.com")

        assert await service.is_legacy_known("ALICE@example.com") is True
        assert await service.is_migrated("alice@example.com") is False
        assert await service.pending_count() == 2
        assert await service.total_users() == 0

        await service.migrate_on_login("alice@example.com", legacy_password)

        assert await service.is_migrated("alice@example.com") is True
        assert await service.pending_count() == 1
        assert await service.total_users() == 1

# Fin del archivo
