# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/json_response.py

Respuestas JSON con charset UTF-8 explícito.

- UTF8JSONResponse: default_response_class de la app
- json_response_utf8: helper para respuestas con status dinámico y,
  opcionalmente, una directiva Set-Cookie ya serializada (la que
  devuelve el proveedor de sesiones)

Autor: Ixchel Beristain
Fecha: 2025-12-20
"""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse


class UTF8JSONResponse(JSONResponse):
    """JSONResponse con Content-Type: application/json; charset=utf-8."""
    media_type = "application/json; charset=utf-8"


def json_response_utf8(
    content: Any,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None,
    set_cookie: Optional[str] = None,
) -> UTF8JSONResponse:
    """
    Crea la respuesta JSON final de un endpoint.

    `set_cookie` se reenvía tal cual en la cabecera Set-Cookie; no se
    re-serializa para no alterar los atributos que fijó el emisor.
    """
    response = UTF8JSONResponse(
        content=content,
        status_code=status_code,
        headers=headers,
    )
    if set_cookie:
        response.headers.append("set-cookie", set_cookie)
    return response


__all__ = ["UTF8JSONResponse", "json_response_utf8"]

# Fin del archivo backend/app/shared/utils/json_response.py
