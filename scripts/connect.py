#!/usr/bin/env python3
"""Verify connectivity to the MySQL server in the docker-compose stack.

Usage:
    python scripts/connect.py
"""

from dsnprobe import ConnectionConfig, connect_and_report

config = ConnectionConfig.from_dsn(
    "mysql:host=db;dbname=mydb;charset=utf8", "user", "password",
)

connect_and_report(config)
