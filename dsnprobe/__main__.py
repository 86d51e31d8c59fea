"""CLI entry-point:  python -m dsnprobe [OPTIONS]

Examples:
    python -m dsnprobe
    python -m dsnprobe --dsn "mysql:host=db;dbname=mydb;charset=utf8" --user user
    python -m dsnprobe --config connection.yaml --exit-code -v
"""

import argparse
import logging
import sys

from ._constants import ERROR_PREFIX
from .config import resolve_config
from .connection import load_dotenv
from .connector import connect_and_report

logger = logging.getLogger(__name__)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(
        prog="dsnprobe",
        description="Open one database connection and report whether it succeeded.",
    )
    parser.add_argument(
        "--dsn",
        default=None,
        help="Connection DSN, e.g. mysql:host=db;dbname=mydb;charset=utf8",
    )
    parser.add_argument("--user", default=None, help="Login name")
    parser.add_argument("--password", default=None, help="Login password")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML or JSON config file",
    )
    parser.add_argument(
        "--dotenv",
        default=".env",
        help="Path to a .env file (default: .env in the current directory)",
    )
    parser.add_argument(
        "--exit-code",
        action="store_true",
        help="Exit with status 1 when the connection fails",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug-level logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    load_dotenv(args.dotenv)

    try:
        config = resolve_config(
            args.dsn, args.user, args.password, config=args.config,
        )
    except Exception as exc:
        logger.error("Failed to load config: %s", exc)
        print(f"{ERROR_PREFIX}{exc}")
        sys.exit(1)

    ok = connect_and_report(config)
    if args.exit_code and not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
