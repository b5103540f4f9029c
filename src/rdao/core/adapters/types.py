"""Database types and connection configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any

from rdao.core.errors import ConfigError, InvalidConfigError, MissingConfigError


class DatabaseType(str, Enum):
    """Supported database types."""

    MSSQL = "mssql"


# ADO-style connection string keys (lower-cased) -> DatabaseConfig field
_CONNECTION_STRING_KEYS = {
    "server": "host",
    "data source": "host",
    "address": "host",
    "addr": "host",
    "database": "database",
    "initial catalog": "database",
    "user id": "username",
    "uid": "username",
    "user": "username",
    "password": "password",
    "pwd": "password",
    "connect timeout": "connect_timeout",
    "connection timeout": "connect_timeout",
    "login timeout": "connect_timeout",
    "command timeout": "query_timeout",
    "application name": "appname",
    "app": "appname",
    "charset": "charset",
}

# ADO-style keys (lower-cased) that map onto pymssql.connect() keyword arguments
_DRIVER_OPTION_KEYS = {
    "encrypt": "encryption",
    "tds version": "tds_version",
    "tds_version": "tds_version",
    "conn_properties": "conn_properties",
    "applicationintent": "read_only",
    "application intent": "read_only",
}

# ADO ``Encrypt`` values -> pymssql ``encryption`` modes
_ENCRYPTION_MODES = {
    "true": "require",
    "yes": "require",
    "mandatory": "require",
    "strict": "require",
    "optional": "request",
    "false": "off",
    "no": "off",
}


def _driver_option(name: str, key: str, value: str) -> Any:
    if name == "encryption":
        mode = _ENCRYPTION_MODES.get(value.lower())
        if mode is None:
            raise InvalidConfigError(key, value)
        return mode
    if name == "read_only":
        return value.replace(" ", "").lower() == "readonly"
    return value


@dataclass
class DatabaseConfig:
    """
    Configuration for one SQL Server connection.

    Timeouts are in seconds and handed to the driver as-is
    (``query_timeout=0`` means the driver waits indefinitely).
    """

    db_type: DatabaseType = DatabaseType.MSSQL

    host: str = "localhost"
    port: int = 1433
    database: str = ""
    username: str | None = None
    password: str | None = None

    # Options
    connect_timeout: int = 10
    query_timeout: int = 0
    appname: str = "rdao"
    charset: str = "UTF-8"

    # Extra pymssql.connect() keyword arguments
    options: dict[str, Any] = field(default_factory=dict)
    # Connection-string keys with no pymssql equivalent; never sent to the driver
    ignored_options: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if isinstance(self.db_type, str) and not isinstance(self.db_type, DatabaseType):
            try:
                self.db_type = DatabaseType(self.db_type.lower())
            except ValueError:
                raise InvalidConfigError("db_type", self.db_type) from None
        if not self.host:
            raise MissingConfigError("host")
        for key in ("port", "connect_timeout", "query_timeout"):
            value = getattr(self, key)
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise InvalidConfigError(key, value) from None
            if value < 0 or (key == "port" and value == 0):
                raise InvalidConfigError(key, value)
            setattr(self, key, value)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DatabaseConfig:
        """Build from a dict of field values; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidConfigError(unknown[0], data[unknown[0]], f"Unknown configuration key: {unknown[0]}")
        return cls(**dict(data))

    @classmethod
    def from_connection_string(cls, text: str) -> DatabaseConfig:
        """Parse an ADO-style ``Key=Value;...`` connection string.

        ``Server`` accepts ``host``, ``host,port`` and ``tcp:host,port``.
        Keys pymssql understands (``Encrypt``, ``TDS Version``,
        ``ApplicationIntent``, ``conn_properties``) become driver ``options``;
        the rest (``TrustServerCertificate``, ``Integrated Security`` ...) are
        kept in ``ignored_options`` and never reach the driver.
        """
        values: dict[str, Any] = {}
        options: dict[str, Any] = {}
        ignored: dict[str, str] = {}
        for part in text.split(";"):
            if not part.strip():
                continue
            if "=" not in part:
                raise InvalidConfigError("connection_string", part, f"Malformed connection string segment: {part!r}")
            key, value = part.split("=", 1)
            key = key.strip().lower()
            value = value.strip()
            target = _CONNECTION_STRING_KEYS.get(key)
            if target is None:
                option = _DRIVER_OPTION_KEYS.get(key)
                if option is None:
                    ignored[key] = value
                else:
                    options[option] = _driver_option(option, key, value)
                continue
            if target == "host":
                host = value[4:] if value.lower().startswith("tcp:") else value
                if "," in host:
                    host, port = host.split(",", 1)
                    values["port"] = port.strip()
                values["host"] = host.strip()
            else:
                values[target] = value
        if "host" not in values:
            raise MissingConfigError("host", "Connection string has no Server / Data Source")
        return cls(options=options, ignored_options=ignored, **values)

    @classmethod
    def coerce(cls, target: Any) -> DatabaseConfig:
        """Accept a config, a mapping of fields, or a connection string."""
        match target:
            case DatabaseConfig():
                return target
            case str():
                return cls.from_connection_string(target)
            case Mapping():
                return cls.from_mapping(target)
            case _:
                raise ConfigError(f"Unsupported connection target: {type(target).__name__}")

    def to_connection_string(self) -> str:
        """Render as an ADO-style connection string."""
        match self.db_type:
            case DatabaseType.MSSQL:
                return (
                    f"Server={self.host},{self.port};"
                    f"Database={self.database};"
                    f"User Id={self.username or ''};"
                    f"Password={self.password or ''};"
                )
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")

    def redacted(self) -> str:
        """``host:port/database`` for logs (no credentials)."""
        return f"{self.host}:{self.port}/{self.database}"


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
