# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/utils/log_sanitizer.py

Sanitización de registros de eventos de autenticación antes de emitirlos.

Reglas:
- Se eliminan (a cualquier profundidad) las llaves de SENSITIVE_KEYS.
- Cualquier llave "email" se enmascara: se conservan el primer y el último
  carácter de la parte local, el resto se reemplaza por asteriscos y el
  dominio se deja intacto. La longitud de la parte local no cambia.

mask_email es una función pura: misma entrada, misma salida.

Autor: Ixchel Beristain
Fecha: 2025-12-13
"""

from __future__ import annotations

from typing import Any, FrozenSet, Mapping, Optional

SENSITIVE_KEYS: FrozenSet[str] = frozenset({
    "password",
    "token",
    "secret",
    "accessToken",
    "refreshToken",
    "twoFactorSecret",
    "backupCodes",
})

EMAIL_KEYS: FrozenSet[str] = frozenset({"email"})


def normalize_email(email: Optional[str]) -> str:
    """Email recortado y en minúsculas ("" si viene vacío)."""
    return (email or "").strip().lower()


def mask_email(email: Optional[str]) -> Optional[str]:
    """
    Enmascara un email para logging: alice@x -> a***e@x

    - Parte local de 2 caracteres: "ab" -> "a*"
    - Parte local de 1 carácter: "a" -> "*"
    - Valores sin "@" (o con parte local/dominio vacíos) se devuelven tal cual.
    """
    if not isinstance(email, str) or "@" not in email:
        return email
    local, domain = email.split("@", 1)
    if not local or not domain:
        return email

    n = len(local)
    if n == 1:
        masked_local = "*"
    elif n == 2:
        masked_local = local[0] + "*"
    else:
        masked_local = local[0] + "*" * (n - 2) + local[-1]
    return f"{masked_local}@{domain}"


def sanitize(value: Any) -> Any:
    """
    Devuelve una copia sanitizada de `value`.

    Recorre dicts y listas/tuplas; los dicts pierden las llaves sensibles y
    sus llaves "email" con valor str se enmascaran.
    """
    if isinstance(value, Mapping):
        clean = {}
        for key, item in value.items():
            if key in SENSITIVE_KEYS:
                continue
            if key in EMAIL_KEYS and isinstance(item, str):
                clean[key] = mask_email(item)
            else:
                clean[key] = sanitize(item)
        return clean
    if isinstance(value, (list, tuple)):
        return [sanitize(item) for item in value]
    return value


__all__ = [
    "SENSITIVE_KEYS",
    "EMAIL_KEYS",
    "normalize_email",
    "mask_email",
    "sanitize",
]

# Fin del archivo backend/app/modules/auth/utils/log_sanitizer.py
