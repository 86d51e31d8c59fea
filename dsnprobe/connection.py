"""Database connection helper.

Provides :class:`DatabaseConnection`, a connection wrapper with
context-manager support that dispatches on the DSN driver, and a
:func:`get_connection` convenience function.

Drivers:
    mysql  -- ``mysql.connector`` (mysql-connector-python)
    odbc   -- ``pyodbc``, for DSNs such as ``odbc:Driver={...};Server=db``

Every driver error is re-raised as :class:`ConnectionFailure`, the single
error kind callers need to handle.
"""

from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import Any, Callable, Dict, Optional, Type

import mysql.connector

from .config import ConnectionConfig

logger = logging.getLogger(__name__)


class ConnectionFailure(Exception):
    """A connection attempt did not succeed.

    The driver exception (if any) is available as ``__cause__``.
    """

    def __init__(self, message: str, driver: Optional[str] = None) -> None:
        super().__init__(message)
        self.driver = driver


def _describe(exc: BaseException) -> str:
    return str(exc).strip() or type(exc).__name__


_dotenv_loaded: set = set()


def load_dotenv(path: Optional[str] = None) -> None:
    """Read a simple key=value .env file into ``os.environ`` (no dependencies).

    Existing variables are never overwritten.  Subsequent calls with the same
    resolved *path* are no-ops.
    """
    if path is None:
        path = os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env")
    resolved = os.path.abspath(path)
    if resolved in _dotenv_loaded:
        return
    if not os.path.isfile(resolved):
        return
    with open(resolved) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                os.environ.setdefault(k.strip(), v.strip().strip("'\""))
    _dotenv_loaded.add(resolved)
    logger.debug("Loaded environment from %s", resolved)


def _connect_mysql(config: ConnectionConfig) -> Any:
    kwargs: Dict[str, Any] = {
        "host": config.host,
        "port": config.port,
        "unix_socket": config.unix_socket,
        "user": config.username,
        "password": config.password,
        "database": config.database,
        "charset": config.charset,
    }
    kwargs = {k: v for k, v in kwargs.items() if v is not None}
    if config.extra:
        logger.debug("Ignoring unsupported mysql DSN keys: %s", [k for k, _ in config.extra])
    # socket and IDNA failures (e.g. an empty host label) escape the driver unwrapped
    try:
        return mysql.connector.connect(**kwargs)
    except (mysql.connector.Error, OSError, ValueError) as exc:
        raise ConnectionFailure(_describe(exc), driver="mysql") from exc


def odbc_connection_string(config: ConnectionConfig) -> str:
    """Build the ODBC connection string, appending credentials when absent."""
    params = dict(config.extra)
    present = {k.upper() for k in params}
    if "UID" not in present:
        params["UID"] = config.username
    if "PWD" not in present:
        params["PWD"] = config.password
    return ";".join(f"{k}={v}" for k, v in params.items()) + ";"


def _connect_odbc(config: ConnectionConfig) -> Any:
    # imported lazily: pyodbc needs the unixODBC shared library at import time
    try:
        import pyodbc
    except ImportError as exc:
        raise ConnectionFailure(
            f"odbc driver unavailable: {exc} (install with: pip install dsnprobe[odbc])",
            driver="odbc",
        ) from exc

    try:
        return pyodbc.connect(odbc_connection_string(config))
    except (pyodbc.Error, OSError, ValueError) as exc:
        raise ConnectionFailure(_describe(exc), driver="odbc") from exc


_DRIVERS: Dict[str, Callable[[ConnectionConfig], Any]] = {
    "mysql": _connect_mysql,
    "odbc": _connect_odbc,
}


class DatabaseConnection:
    """Managed connection to the database described by a :class:`ConnectionConfig`.

    Usage as a context manager::

        with DatabaseConnection(ConnectionConfig()) as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1")

    Or manually::

        db = DatabaseConnection(config)
        conn = db.connect()
        ...
        db.close()
    """

    def __init__(self, config: Optional[ConnectionConfig] = None) -> None:
        self.config = config or ConnectionConfig()
        self._conn: Optional[Any] = None

    def connect(self) -> Any:
        """Open and return the driver connection.

        Subsequent calls return the same connection unless :meth:`close` has
        been called.  Raises :class:`ConnectionFailure` on any failure.
        """
        if self._conn is not None:
            return self._conn
        opener = _DRIVERS.get(self.config.driver)
        if opener is None:
            raise ConnectionFailure(
                f"unsupported driver {self.config.driver!r} "
                f"(expected one of {sorted(_DRIVERS)})",
                driver=self.config.driver,
            )
        logger.debug(
            "Connecting to %s as %s", self.config.dsn, self.config.username,
        )
        self._conn = opener(self.config)
        logger.info("Connected to %s", self.config.dsn)
        return self._conn

    def close(self) -> None:
        """Close the underlying connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def test_connectivity(self) -> bool:
        """Run ``SELECT 1`` and return ``True`` on success, ``False`` on failure."""
        try:
            conn = self.connect()
            cur = conn.cursor()
            cur.execute("SELECT 1")
            cur.fetchone()
            return True
        except Exception as exc:
            logger.debug("Connectivity check failed: %s", exc)
            return False

    def __enter__(self) -> Any:
        return self.connect()

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"DatabaseConnection(dsn={self.config.dsn!r}, "
            f"user={self.config.username!r})"
        )


def get_connection(config: Optional[ConnectionConfig] = None) -> Any:
    """Convenience wrapper: create a :class:`DatabaseConnection` and return
    the open driver connection.

    Raises :class:`ConnectionFailure` if the connection cannot be opened.
    """
    return DatabaseConnection(config).connect()
