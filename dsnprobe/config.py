"""Connection configuration.

:class:`ConnectionConfig` is the immutable descriptor handed to the
connector.  :func:`resolve_config` builds one with this precedence:
explicit arguments > config file > environment variables > built-in
defaults.

Env vars:
    DB_DSN       -- full DSN, e.g. ``mysql:host=db;dbname=mydb;charset=utf8``
    DB_HOST      -- server host (default: db)
    DB_PORT      -- server port (driver default when unset)
    DB_NAME      -- database name (default: mydb)
    DB_CHARSET   -- connection charset (default: utf8)
    DB_USER      -- login (default: user)
    DB_PASSWORD  -- password (default: password)

``DB_DSN`` wins over the individual host/port/name/charset variables.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple, Union

import yaml

from ._constants import (
    DEFAULT_CHARSET,
    DEFAULT_DATABASE,
    DEFAULT_DRIVER,
    DEFAULT_HOST,
    DEFAULT_PASSWORD,
    DEFAULT_USER,
)
from .dsn import InvalidDsnError, format_dsn, parse_dsn

logger = logging.getLogger(__name__)

# DSN keys that map onto ConnectionConfig fields (mysql driver)
_MYSQL_FIELD_KEYS = {
    "host": "host",
    "dbname": "database",
    "charset": "charset",
    "unix_socket": "unix_socket",
}


@dataclass(frozen=True)
class ConnectionConfig:
    """Everything needed to attempt one database connection."""

    host: Optional[str] = DEFAULT_HOST
    database: Optional[str] = DEFAULT_DATABASE
    charset: Optional[str] = DEFAULT_CHARSET
    username: str = DEFAULT_USER
    password: str = field(default=DEFAULT_PASSWORD, repr=False)
    driver: str = DEFAULT_DRIVER
    port: Optional[int] = None
    unix_socket: Optional[str] = None
    extra: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def from_dsn(
        cls,
        dsn: str,
        username: str = DEFAULT_USER,
        password: str = DEFAULT_PASSWORD,
    ) -> "ConnectionConfig":
        """Build a config from a DSN plus credentials.

        Keys absent from a mysql DSN are left unset so the driver applies its
        own defaults.  For ``odbc`` every pair is carried in :attr:`extra`.
        """
        parsed = parse_dsn(dsn)
        if parsed.driver == "odbc":
            return cls(
                host=None,
                database=None,
                charset=None,
                username=username,
                password=password,
                driver="odbc",
                extra=tuple(parsed.params.items()),
            )

        params = dict(parsed.params)
        values: dict = {dest: params.pop(key, None) for key, dest in _MYSQL_FIELD_KEYS.items()}
        port = params.pop("port", None)
        if port is not None:
            try:
                values["port"] = int(port)
            except ValueError:
                raise InvalidDsnError(f"port must be an integer, got {port!r}") from None
        return cls(
            username=username,
            password=password,
            driver=parsed.driver,
            extra=tuple(params.items()),
            **values,
        )

    @property
    def dsn(self) -> str:
        """Render this config as a DSN (credentials are never included)."""
        if self.driver == "odbc":
            return format_dsn(
                self.driver,
                {k: v for k, v in self.extra if k.upper() != "PWD"},
            )
        params = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "charset": self.charset,
            "unix_socket": self.unix_socket,
        }
        params.update(self.extra)
        return format_dsn(self.driver, params)


def expand_env(value: Any) -> Any:
    """Expand ``${VAR}`` references in string *value* with environment variables."""
    if not isinstance(value, str):
        return value

    def _repl(m):
        name = m.group(1)
        if name not in os.environ:
            raise KeyError(
                f"Environment variable {name!r} is not set "
                f"(referenced in config as ${{{name}}})"
            )
        return os.environ[name]

    return re.sub(r"\$\{(\w+)}", _repl, value)


def load_config_file(path: Union[str, Path]) -> dict:
    """Load a YAML or JSON config file, chosen by extension."""
    p = Path(path)
    text = p.read_text()
    if p.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(
            f"config file {str(p)!r} must contain a mapping, "
            f"got {type(data).__name__}"
        )
    return data


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> ConnectionConfig:
    """Build a :class:`ConnectionConfig` from ``DB_*`` environment variables."""
    env = os.environ if environ is None else environ
    username = env.get("DB_USER", DEFAULT_USER)
    password = env.get("DB_PASSWORD", DEFAULT_PASSWORD)

    dsn = env.get("DB_DSN")
    if dsn:
        return ConnectionConfig.from_dsn(dsn, username, password)

    port = env.get("DB_PORT")
    try:
        port_value = int(port) if port else None
    except ValueError:
        raise ValueError(f"DB_PORT must be an integer, got {port!r}") from None
    return ConnectionConfig(
        host=env.get("DB_HOST", DEFAULT_HOST),
        database=env.get("DB_NAME", DEFAULT_DATABASE),
        charset=env.get("DB_CHARSET", DEFAULT_CHARSET),
        username=username,
        password=password,
        port=port_value,
    )


def _apply_mapping(base: ConnectionConfig, conn_cfg: Mapping[str, Any]) -> ConnectionConfig:
    """Overlay the ``connection`` section of a config file onto *base*."""
    username = expand_env(conn_cfg.get("username", conn_cfg.get("user", base.username)))
    password = expand_env(conn_cfg.get("password", base.password))

    if conn_cfg.get("dsn"):
        return ConnectionConfig.from_dsn(expand_env(conn_cfg["dsn"]), username, password)

    changes: dict = {"username": username, "password": password}
    for key in ("host", "database", "charset", "unix_socket"):
        if key in conn_cfg:
            changes[key] = expand_env(conn_cfg[key])
    if "port" in conn_cfg and conn_cfg["port"] is not None:
        port = expand_env(conn_cfg["port"])
        try:
            changes["port"] = int(port)
        except ValueError:
            raise ValueError(
                f"connection.port must be an integer, got {port!r}"
            ) from None
    return dataclasses.replace(base, **changes)


def resolve_config(
    dsn: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    *,
    config: Union[str, Path, Mapping[str, Any], None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ConnectionConfig:
    """Resolve the effective :class:`ConnectionConfig`.

    *config* may be a path to a YAML/JSON file or an already-parsed dict;
    its settings live under a ``connection`` key (a flat top level is
    accepted too).  Call :func:`dsnprobe.connection.load_dotenv` first if a
    ``.env`` file should feed the environment.
    """
    resolved = config_from_env(environ)

    if config is not None:
        if isinstance(config, (str, Path)):
            logger.debug("Loading config file %s", config)
            config = load_config_file(config)
        conn_cfg = config.get("connection", config)
        if not isinstance(conn_cfg, Mapping):
            raise TypeError(
                f"connection must be a mapping, got {type(conn_cfg).__name__}"
            )
        resolved = _apply_mapping(resolved, conn_cfg)

    if dsn:
        resolved = ConnectionConfig.from_dsn(dsn, resolved.username, resolved.password)
    if user is not None:
        resolved = dataclasses.replace(resolved, username=user)
    if password is not None:
        resolved = dataclasses.replace(resolved, password=password)

    logger.debug("Resolved connection config: %s as %s", resolved.dsn, resolved.username)
    return resolved
