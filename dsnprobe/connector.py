"""Connect once and report the outcome as a single line on stdout."""

from __future__ import annotations

import logging
import sys
from typing import Callable, Optional, TextIO

from ._constants import ERROR_PREFIX, SUCCESS_MESSAGE
from .config import ConnectionConfig
from .connection import ConnectionFailure, DatabaseConnection
from .dsn import InvalidDsnError

logger = logging.getLogger(__name__)


def connect_and_report(
    config: Optional[ConnectionConfig] = None,
    *,
    stream: Optional[TextIO] = None,
    config_factory: Optional[Callable[[], ConnectionConfig]] = None,
) -> bool:
    """Attempt exactly one connection and print the result.

    Writes ``MySQL connection successful!`` on success, otherwise
    ``Error: <description>``.  Failures are reported, never raised.

    Args:
        config:         Connection settings; defaults to the built-in ones.
        stream:         Where the line is written (default ``sys.stdout``).
        config_factory: Called to build the config when *config* is not
                        given, so DSN errors are reported like connection
                        errors.

    Returns:
        ``True`` if the connection was opened, ``False`` otherwise.
    """
    out = stream if stream is not None else sys.stdout

    try:
        if config is None:
            config = config_factory() if config_factory else ConnectionConfig()
        db = DatabaseConnection(config)
        db.connect()
    except (ConnectionFailure, InvalidDsnError) as exc:
        logger.debug("Connection attempt failed", exc_info=True)
        message = str(exc).strip() or type(exc).__name__
        print(f"{ERROR_PREFIX}{message}", file=out)
        return False

    print(SUCCESS_MESSAGE, file=out)
    try:
        db.close()
    except Exception as exc:
        logger.warning("Closing the connection failed: %s", exc)
    return True
