#!/usr/bin/env python3
"""Example: verify connectivity using settings from .env / environment.

Usage:
    # Set DB_DSN (or DB_HOST, DB_NAME, ...) plus DB_USER / DB_PASSWORD, then:
    python examples/connect.py
"""

import sys

from dsnprobe import ConnectionFailure, DatabaseConnection, resolve_config
from dsnprobe.connection import load_dotenv

load_dotenv()

config = resolve_config()
db = DatabaseConnection(config)

try:
    conn = db.connect()
    cur = conn.cursor()
    cur.execute("SELECT VERSION()")
    version = cur.fetchone()[0]
    print(f"Connected to {config.dsn} as {config.username} (server {version}).")
except ConnectionFailure as exc:
    print(f"FAILED to connect to {config.dsn} as {config.username}.")
    print(f"  Driver : {exc.driver}")
    print(f"  Detail : {exc}")
    sys.exit(1)
finally:
    db.close()
