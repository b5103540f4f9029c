"""Environment-driven settings for RDAO executors.

``RdaoSettings`` reads ``RDAO_*`` environment variables (and a ``.env``
file) and turns them into the two things an executor needs: a
:class:`~rdao.core.adapters.types.DatabaseConfig` for ``open()`` and the
executor-level options (diagnostics, delivery mode, idle timeout).

Examples:
    >>> import os
    >>> os.environ["RDAO_HOST"] = "sql01"
    >>> os.environ["RDAO_DATABASE"] = "Shop"
    >>> settings = RdaoSettings()
    >>> settings.to_database_config().redacted()
    'sql01:1433/Shop'

Tags:
    settings, configuration, pydantic, environment, rdao
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from rdao.core.adapters.types import DatabaseConfig


class RdaoSettings(BaseSettings):
    """Connection and executor settings.

    Fields
    ──────
    host / port / database   : SQL Server location
    username / password      : SQL login (password kept as SecretStr)
    connect_timeout          : Driver login timeout, seconds
    query_timeout            : Driver statement timeout, seconds (0 = none)
    idle_timeout_ms          : Stored on the executor, not enforced by it
    debug_mode               : Emit per-statement diagnostics
    delivery_mode            : ``stream`` (row by row) or ``bulk``
    log_level / json_logs    : Applied by ``from_settings`` via ``configure_logging``
    """

    model_config = SettingsConfigDict(
        env_prefix="RDAO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Connection ───────────────────────────────────────────────
    host: str = "localhost"
    port: int = Field(default=1433, gt=0)
    database: str = ""
    username: str | None = None
    password: SecretStr | None = None
    connect_timeout: int = Field(default=10, ge=0)
    query_timeout: int = Field(default=0, ge=0)
    appname: str = "rdao"

    # ── Executor ─────────────────────────────────────────────────
    idle_timeout_ms: int = Field(default=10000, ge=0)
    debug_mode: bool = True
    delivery_mode: Literal["stream", "bulk"] = "stream"

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    def to_database_config(self) -> DatabaseConfig:
        return DatabaseConfig(
            host=self.host,
            port=self.port,
            database=self.database,
            username=self.username,
            password=self.password.get_secret_value() if self.password else None,
            connect_timeout=self.connect_timeout,
            query_timeout=self.query_timeout,
            appname=self.appname,
        )

    def executor_options(self) -> dict[str, Any]:
        """Keyword arguments for an executor constructor."""
        return {
            "debug_mode": self.debug_mode,
            "delivery_mode": self.delivery_mode,
            "timeout_ms": self.idle_timeout_ms,
            "default_target": self.to_database_config(),
        }


__all__ = [
    "RdaoSettings",
]
