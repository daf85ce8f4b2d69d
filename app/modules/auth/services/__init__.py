# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/services/__init__.py

Punto de entrada del paquete services de Auth.
Expone los servicios que ensambla dependencies.AuthContainer.

Autor: Ixchel Beristain
Actualizado: 19/11/2025
"""

from .auth_event_logger import AuthEventLogger
from .auth_event_sinks import AuthEventRecord, LoggerSink, LogSink, MetricsSink
from .feature_flags import FeatureFlag, FeatureFlags, FlagValidation
from .legacy_migration_service import (
    LegacyMigrationService,
    MigratedPrincipal,
    MigrationOutcome,
    MigrationResult,
)
from .security_monitor import SecurityMonitor
from .session_provider import (
    ModernSessionProvider,
    SessionCreationError,
    SessionProvider,
    SessionResult,
)

__all__ = [
    "AuthEventLogger",
    "AuthEventRecord",
    "LoggerSink",
    "LogSink",
    "MetricsSink",
    "FeatureFlag",
    "FeatureFlags",
    "FlagValidation",
    "LegacyMigrationService",
    "MigratedPrincipal",
    "MigrationOutcome",
    "MigrationResult",
    "SecurityMonitor",
    "ModernSessionProvider",
    "SessionCreationError",
    "SessionProvider",
    "SessionResult",
]

# Fin del archivo backend/app/modules/auth/services/__init__.py
