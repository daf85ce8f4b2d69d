# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/dependencies.py

Raíz de composición del módulo Auth.

AuthContainer construye una sola vez por proceso:
    - FeatureFlags (inmutables, leídas de settings)
    - AuthMetricsStore (+ espejo Prometheus)
    - AuthEventLogger
    - SecurityMonitor y RateLimitService
    - LegacyMigrationService y ModernSessionProvider
    - AuthFacade

Las rutas obtienen la fachada con Depends(get_auth_facade). En tests se
sustituye el contenedor completo con set_auth_container() o la
dependencia con app.dependency_overrides.

Autor: Ixchel Beristain
Fecha: 2025-12-13
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.modules.auth.facades.auth_facade import AuthFacade
from app.modules.auth.metrics.collectors.auth_collectors import PrometheusAuthMirror
from app.modules.auth.metrics.store.auth_metrics_store import AuthMetricsStore
from app.modules.auth.services.auth_event_logger import AuthEventLogger
from app.modules.auth.services.feature_flags import FeatureFlags
from app.modules.auth.services.legacy_migration_service import LegacyMigrationService
from app.modules.auth.services.security_monitor import SecurityMonitor
from app.modules.auth.services.session_provider import ModernSessionProvider
from app.shared.config import get_settings
from app.shared.database import get_session_factory
from app.shared.security.rate_limit_service import RateLimitService

logger = logging.getLogger(__name__)


@dataclass
class AuthContainer:
    settings: Any
    flags: FeatureFlags
    metrics: AuthMetricsStore
    events: AuthEventLogger
    security_monitor: SecurityMonitor
    rate_limiter: RateLimitService
    migration_service: LegacyMigrationService
    session_provider: ModernSessionProvider
    facade: AuthFacade


def build_auth_container(
    settings: Any = None,
    *,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    flags: Optional[FeatureFlags] = None,
    metrics: Optional[AuthMetricsStore] = None,
    with_prometheus: bool = True,
) -> AuthContainer:
    """Ensambla el grafo de servicios del módulo Auth."""
    settings = settings or get_settings()
    session_factory = session_factory or get_session_factory()
    flags = flags or FeatureFlags.from_settings(settings)

    if metrics is None:
        metrics = AuthMetricsStore(
            capacity=settings.auth_metrics_timeseries_capacity,
            mirror=PrometheusAuthMirror() if with_prometheus else None,
        )
    events = AuthEventLogger(metrics)

    security_monitor = SecurityMonitor(
        events,
        failed_attempts_threshold=settings.security_failed_attempts_threshold,
        window_seconds=settings.security_window_seconds,
    )
    rate_limiter = RateLimitService(
        enabled=settings.rate_limit_enabled,
        default_limit=settings.migrate_login_rate_limit,
        default_window_sec=settings.migrate_login_rate_window_seconds,
    )

    migration_service = LegacyMigrationService(session_factory, flags, events)
    session_provider = ModernSessionProvider(
        session_factory,
        events,
        cookie_name=settings.session_cookie_name,
        ttl_minutes=settings.session_ttl_minutes,
        cookie_secure=settings.session_cookie_secure,
    )

    facade = AuthFacade(
        flags=flags,
        migration_service=migration_service,
        session_provider=session_provider,
        events=events,
        metrics=metrics,
        security_monitor=security_monitor,
        rate_limiter=rate_limiter,
        migrate_login_limit=settings.migrate_login_rate_limit,
        migrate_login_window_sec=settings.migrate_login_rate_window_seconds,
    )

    return AuthContainer(
        settings=settings,
        flags=flags,
        metrics=metrics,
        events=events,
        security_monitor=security_monitor,
        rate_limiter=rate_limiter,
        migration_service=migration_service,
        session_provider=session_provider,
        facade=facade,
    )


# -------------------- Singleton de proceso -------------------- #

_container: Optional[AuthContainer] = None
_container_lock = threading.Lock()


def get_auth_container() -> AuthContainer:
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = build_auth_container()
                logger.info("[auth] contenedor inicializado: flags=%s", _container.flags.snapshot())
    return _container


def set_auth_container(container: Optional[AuthContainer]) -> None:
    """Reemplaza (o limpia con None) el contenedor del proceso."""
    global _container
    with _container_lock:
        _container = container


# -------------------- Dependencias FastAPI -------------------- #

def get_auth_facade() -> AuthFacade:
    return get_auth_container().facade


def get_auth_metrics() -> AuthMetricsStore:
    return get_auth_container().metrics


__all__ = [
    "AuthContainer",
    "build_auth_container",
    "get_auth_container",
    "set_auth_container",
    "get_auth_facade",
    "get_auth_metrics",
]

# Fin del archivo backend/app/modules/auth/dependencies.py
