# -*- coding: utf-8 -*-
"""
backend/app/modules/auth/__init__.py

Auth package public API:

Expone:
- enums
- schemas
- facades
- dependencies (get_auth_facade, get_auth_container)
- get_auth_routers()  ← IMPORTANTE para que app.main pueda montar rutas
"""

from .enums import *            # noqa: F401,F403
from .schemas import *          # noqa: F401,F403
from .facades import *          # noqa: F401,F403

from .dependencies import get_auth_container, get_auth_facade, set_auth_container

# Routers para montar fuera del paquete
from .routes import get_auth_routers

__all__ = [
    "get_auth_routers",
    "get_auth_container",
    "get_auth_facade",
    "set_auth_container",
]
# Fin del archivo backend/app/modules/auth/__init__.py
