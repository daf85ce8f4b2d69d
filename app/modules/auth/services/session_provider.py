# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/services/session_provider.py

Proveedor de sesiones del sistema de autenticación moderno.

Contrato (SessionProvider):
    sign_in_with_password(email, password, request) -> SessionResult
    - session: objeto opaco para el llamador ({id, userId, expiresAt})
    - set_cookie: directiva Set-Cookie que la ruta reenvía tal cual

ModernSessionProvider es la implementación por defecto:
- verifica la credencial "password" (Argon2id) del usuario moderno
- genera un token opaco, persiste solo su SHA-256 en auth_sessions
- construye la cookie httpOnly con http.cookies
- registra `session_created`

Autor: Ixchel Beristain
Fecha: 25/10/2025
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from http.cookies import SimpleCookie
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.modules.auth.metrics.store.auth_metrics_store import to_rfc3339
from app.modules.auth.repositories import ModernUserRepository
from app.modules.auth.services.auth_event_logger import AuthEventLogger
from app.modules.auth.utils.log_sanitizer import mask_email, normalize_email
from app.shared.utils.security import (
    PasswordHasher,
    generate_session_token,
    hash_token,
    modern_hasher,
)

logger = logging.getLogger(__name__)


class SessionCreationError(Exception):
    """El proveedor no pudo emitir la sesión."""


@dataclass(frozen=True)
class SessionResult:
    session: Dict[str, Any] = field(default_factory=dict)
    set_cookie: Optional[str] = None


class SessionProvider(Protocol):
    async def sign_in_with_password(
        self,
        email: str,
        password: str,
        request: Optional[Mapping[str, Any]] = None,
    ) -> SessionResult: ...


def build_session_cookie(
    name: str,
    token: str,
    *,
    max_age_seconds: int,
    secure: bool,
    path: str = "/",
    same_site: str = "Lax",
) -> str:
    """Valor de la cabecera Set-Cookie para la sesión."""
    cookie: SimpleCookie = SimpleCookie()
    cookie[name] = token
    morsel = cookie[name]
    morsel["path"] = path
    morsel["max-age"] = str(max_age_seconds)
    morsel["httponly"] = True
    morsel["samesite"] = same_site
    if secure:
        morsel["secure"] = True
    return morsel.OutputString()


class ModernSessionProvider:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        events: AuthEventLogger,
        *,
        cookie_name: str = "campus.session_token",
        ttl_minutes: int = 10080,
        cookie_secure: bool = True,
        password_hasher: PasswordHasher = modern_hasher,
        clock: Optional[Callable[[], datetime]] = None,
        token_factory: Callable[[], str] = generate_session_token,
    ) -> None:
        self._session_factory = session_factory
        self._events = events
        self._cookie_name = cookie_name
        self._ttl = timedelta(minutes=ttl_minutes)
        self._cookie_secure = cookie_secure
        self._hasher = password_hasher
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._token_factory = token_factory

    async def sign_in_with_password(
        self,
        email: str,
        password: str,
        request: Optional[Mapping[str, Any]] = None,
    ) -> SessionResult:
        norm_email = normalize_email(email)
        meta = request or {}

        async with self._session_factory() as db:
            repo = ModernUserRepository(db)
            user = await repo.get_by_email(norm_email)
            if user is None:
                raise SessionCreationError("Usuario moderno no encontrado")

            credential = await repo.get_password_credential(user.id)
            stored_hash = credential.password_hash if credential else None
            if not await self._hasher.verify_async(password, stored_hash):
                raise SessionCreationError("Credenciales inválidas")

            token = self._token_factory()
            expires_at = self._clock() + self._ttl
            row = await repo.create_session(
                user_id=user.id,
                token_hash=hash_token(token),
                expires_at=expires_at,
                ip_address=meta.get("ip_address"),
                user_agent=meta.get("user_agent"),
            )
            await db.commit()
            user_id, session_id = user.id, row.id

        set_cookie = build_session_cookie(
            self._cookie_name,
            token,
            max_age_seconds=int(self._ttl.total_seconds()),
            secure=self._cookie_secure,
        )
        self._events.log_session_created(user_id, session_id, email=norm_email, request=request)
        logger.debug("[session] sesión %s emitida para %s", session_id, mask_email(norm_email))

        return SessionResult(
            session={
                "id": session_id,
                "userId": user_id,
                "expiresAt": to_rfc3339(expires_at),
            },
            set_cookie=set_cookie,
        )


__all__ = [
    "SessionProvider",
    "SessionResult",
    "SessionCreationError",
    "ModernSessionProvider",
    "build_session_cookie",
]

# Fin del archivo backend/app/modules/auth/services/session_provider.py
