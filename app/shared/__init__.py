# -*- coding: utf-8 -*-
"""
backend/app/shared/__init__.py

Infraestructura compartida de Campus Auth: configuración, base de datos,
scheduler, rate limiting y utilidades HTTP/seguridad.

No importa subpaquetes al cargarse; cada consumidor importa lo que usa,
por ejemplo:
    from app.shared.config import get_settings
"""

# Fin del archivo backend/app/shared/__init__.py
