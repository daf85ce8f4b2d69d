# -*- coding: utf-8 -*-
"""
backend/app/shared/http_utils/request_meta.py

Helpers para extraer metadatos de request (IP, User-Agent, método, ruta)
de manera segura detrás de proxies (Railway, nginx, etc.).

Los campos que no se pueden determinar se omiten del diccionario; no se
rellenan con marcadores como "unknown".

Autor: Ixchel Beristain
Fecha: 2025-12-18
"""
from __future__ import annotations

import os
import logging
from typing import Any, Dict, Optional

from starlette.requests import Request

logger = logging.getLogger(__name__)


def _trust_proxy_headers() -> bool:
    """
    Verifica si debemos confiar en headers de proxy (X-Forwarded-For).

    Default: false (seguro para producción).
    En Railway/Heroku/etc., configurar TRUST_PROXY_HEADERS=true.
    """
    return os.getenv("TRUST_PROXY_HEADERS", "false").lower() in ("true", "1", "yes")


def get_client_ip(request: Request) -> Optional[str]:
    """
    Extrae la IP real del cliente.

    Si TRUST_PROXY_HEADERS=true:
        1. X-Forwarded-For (primer IP, cliente original)
        2. X-Real-IP (patrón nginx)
        3. request.client.host (fallback)

    Si TRUST_PROXY_HEADERS=false (default):
        Solo usa request.client.host (IP directa del socket)

    Returns:
        IP del cliente, o None si no se puede determinar
    """
    if _trust_proxy_headers():
        xff = request.headers.get("x-forwarded-for")
        if xff:
            # X-Forwarded-For: "client, proxy1, proxy2"
            client_ip = xff.split(",")[0].strip()
            if client_ip:
                return client_ip

        real_ip = request.headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return None


def get_user_agent(request: Request) -> Optional[str]:
    ua = request.headers.get("user-agent")
    return ua.strip() if ua and ua.strip() else None


def get_request_meta(request: Request) -> Dict[str, Any]:
    """
    Extrae metadatos del request para logging/auditoría.

    Returns:
        Dict con ip_address, user_agent, method y path; las llaves sin
        valor se omiten.
    """
    meta = {
        "ip_address": get_client_ip(request),
        "user_agent": get_user_agent(request),
        "method": request.method or None,
        "path": request.url.path or None,
    }
    return {k: v for k, v in meta.items() if v}


def compact_request_meta(meta: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Normaliza un descriptor de request arbitrario (dict) a las llaves
    conocidas, descartando las vacías.
    """
    if not meta:
        return {}
    keys = ("ip_address", "user_agent", "method", "path")
    return {k: meta[k] for k in keys if meta.get(k)}


__all__ = [
    "get_client_ip",
    "get_user_agent",
    "get_request_meta",
    "compact_request_meta",
]

# Fin del archivo backend/app/shared/http_utils/request_meta.py
