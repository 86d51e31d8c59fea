"""dsnprobe -- open one database connection from a DSN and report the outcome."""

from .config import ConnectionConfig, resolve_config
from .connection import ConnectionFailure, DatabaseConnection, get_connection
from .connector import connect_and_report
from .dsn import InvalidDsnError, parse_dsn

__all__ = [
    "ConnectionConfig",
    "resolve_config",
    "ConnectionFailure",
    "DatabaseConnection",
    "get_connection",
    "connect_and_report",
    "InvalidDsnError",
    "parse_dsn",
]
