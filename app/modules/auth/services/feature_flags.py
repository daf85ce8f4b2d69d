# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/services/feature_flags.py

Registro de feature flags de autenticación.

Los valores se resuelven una sola vez (desde settings o desde el entorno)
y el objeto resultante es inmutable: se construye en la raíz de composición
y se pasa hacia abajo, sin lecturas de os.environ dispersas.

Coerción: solo el texto "true" (sin importar mayúsculas ni espacios) es
True; cualquier otro valor, incluido ausente, es False.

Autor: Ixchel Beristain
Fecha: 2025-11-17
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


class FeatureFlag(StrEnum):
    legacy_migration = "legacyMigration"
    modern_auth = "modernAuth"


# Variable de entorno / atributo de settings de cada flag
FLAG_SOURCES: Dict[FeatureFlag, Tuple[str, str]] = {
    FeatureFlag.legacy_migration: ("ENABLE_LEGACY_MIGRATION", "enable_legacy_migration"),
    FeatureFlag.modern_auth: ("ENABLE_MODERN_AUTH", "enable_modern_auth"),
}

WARN_MODERN_WITHOUT_MIGRATION = (
    "Modern auth is enabled but legacy migration is disabled: "
    "existing legacy users will not be able to log in"
)
WARN_ALL_DISABLED = (
    "Both modern auth and legacy migration are disabled: "
    "authentication is unusable"
)


@dataclass(frozen=True)
class FlagValidation:
    """Resultado consultivo de validate(); nunca bloquea el arranque."""
    ok: bool
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "warnings": list(self.warnings)}


def coerce_flag(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return False
    return str(raw).strip().lower() == "true"


class FeatureFlags:
    """Vista inmutable de flags de autenticación."""

    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[FeatureFlag, Any]] = None) -> None:
        resolved = {flag: False for flag in FeatureFlag}
        for flag, raw in (values or {}).items():
            resolved[FeatureFlag(flag)] = coerce_flag(raw)
        self._values: Mapping[FeatureFlag, bool] = MappingProxyType(resolved)

    # ------------------------------------------------------------------
    # Constructores
    # ------------------------------------------------------------------
    @classmethod
    def from_settings(cls, settings: Any) -> "FeatureFlags":
        values = {
            flag: getattr(settings, attr, None)
            for flag, (_, attr) in FLAG_SOURCES.items()
        }
        return cls(values)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FeatureFlags":
        env = os.environ if environ is None else environ
        values = {flag: env.get(var) for flag, (var, _) in FLAG_SOURCES.items()}
        return cls(values)

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    def is_enabled(self, flag: FeatureFlag | str) -> bool:
        try:
            return self._values[FeatureFlag(flag)]
        except ValueError:
            # Flag desconocido: se considera apagado
            return False

    @property
    def legacy_migration(self) -> bool:
        return self._values[FeatureFlag.legacy_migration]

    @property
    def modern_auth(self) -> bool:
        return self._values[FeatureFlag.modern_auth]

    def snapshot(self) -> Dict[str, bool]:
        return {flag.value: enabled for flag, enabled in self._values.items()}

    def validate(self) -> FlagValidation:
        warnings = []
        if self.modern_auth and not self.legacy_migration:
            warnings.append(WARN_MODERN_WITHOUT_MIGRATION)
        if not self.modern_auth and not self.legacy_migration:
            warnings.append(WARN_ALL_DISABLED)
        return FlagValidation(ok=not warnings, warnings=tuple(warnings))

    def log_validation(self) -> FlagValidation:
        """Valida y deja constancia en logs (se usa al arrancar)."""
        result = self.validate()
        for warning in result.warnings:
            logger.warning("[feature-flags] %s", warning)
        logger.info("[feature-flags] %s", self.snapshot())
        return result

    def __repr__(self) -> str:
        return f"FeatureFlags({self.snapshot()!r})"


__all__ = [
    "FeatureFlag",
    "FeatureFlags",
    "FlagValidation",
    "coerce_flag",
    "FLAG_SOURCES",
]

# Fin del archivo backend/app/modules/auth/services/feature_flags.py
