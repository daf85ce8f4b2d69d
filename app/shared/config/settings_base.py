# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_base.py

Base de configuración (Pydantic v2) para Campus Auth.
- Esta clase NO instancia singletons ni resuelve .env; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.

Autor: Ixchel Beristain
Fecha: 24/10/2025
"""

from typing import Literal, Optional
from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="Campus Auth", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=8000, validation_alias="APP_PORT")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # =========================
    # Base de datos (PostgreSQL)
    # =========================
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: SecretStr = Field(default=SecretStr("postgres"), validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="campus", validation_alias="DB_NAME")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_url: Optional[str] = Field(default=None, validation_alias="DB_URL")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        Genera la URL de conexión completa para SQLAlchemy + asyncpg.
        Prioriza DB_URL si existe, sino construye desde componentes individuales.
        """
        from urllib.parse import quote_plus

        # Si se provee DB_URL completa, úsala (normaliza el esquema)
        if self.db_url:
            url = self.db_url
            if url.startswith("postgres://"):
                url = "postgresql+asyncpg://" + url[len("postgres://"):]
            elif url.startswith("postgresql://"):
                url = "postgresql+asyncpg://" + url[len("postgresql://"):]
            return url

        # Construye desde componentes (con password escapado)
        pw = quote_plus(self.db_password.get_secret_value())
        return (
            f"postgresql+asyncpg://{self.db_user}:{pw}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================
    # Feature flags de autenticación
    # =========================
    # Se guardan como texto crudo: FeatureFlags decide la coerción ("true" => True).
    enable_legacy_migration: str = Field(default="false", validation_alias="ENABLE_LEGACY_MIGRATION")
    enable_modern_auth: str = Field(default="false", validation_alias="ENABLE_MODERN_AUTH")

    # =========================
    # Sesiones (proveedor moderno)
    # =========================
    session_cookie_name: str = Field(default="campus.session_token", validation_alias="SESSION_COOKIE_NAME")
    session_ttl_minutes: int = Field(default=10080, validation_alias="SESSION_TTL_MINUTES")
    session_cookie_secure: bool = Field(default=True, validation_alias="SESSION_COOKIE_SECURE")

    # =========================
    # Métricas de Auth
    # =========================
    auth_metrics_timeseries_capacity: int = Field(default=168, validation_alias="AUTH_METRICS_TIMESERIES_CAPACITY")
    auth_metrics_snapshot_enabled: bool = Field(default=True, validation_alias="AUTH_METRICS_SNAPSHOT_ENABLED")

    # =========================
    # Seguridad / rate limiting
    # =========================
    security_failed_attempts_threshold: int = Field(default=5, validation_alias="SECURITY_FAILED_ATTEMPTS_THRESHOLD")
    security_window_seconds: int = Field(default=900, validation_alias="SECURITY_WINDOW_SECONDS")
    rate_limit_enabled: bool = Field(default=True, validation_alias="RATE_LIMIT_ENABLED")
    migrate_login_rate_limit: int = Field(default=20, validation_alias="MIGRATE_LOGIN_RATE_LIMIT")
    migrate_login_rate_window_seconds: int = Field(default=300, validation_alias="MIGRATE_LOGIN_RATE_WINDOW_SECONDS")

    # =========================
    # CORS / Frontend
    # =========================
    allowed_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")

    # =========================
    # Observabilidad / Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["plain", "pretty", "json"] = Field(default="plain", validation_alias="LOG_FORMAT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # -------------------------
    # Validaciones de coherencia
    # -------------------------
    def _security_checks(self) -> None:
        """
        Valida combinaciones peligrosas en producción.

        Raises:
            ValueError: si la configuración no es apta para producción.
        """
        if self.python_env != "production":
            return
        if not self.session_cookie_secure:
            raise ValueError("SESSION_COOKIE_SECURE debe ser true en producción.")
        if self.db_password.get_secret_value() == "postgres" and not self.db_url:
            raise ValueError("DB_PASSWORD por defecto no permitido en producción.")


__all__ = ["BaseAppSettings", "EnvName"]

# Fin del archivo backend/app/shared/config/settings_base.py
