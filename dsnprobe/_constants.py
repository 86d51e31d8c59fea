"""Shared constants for the dsnprobe package."""

DEFAULT_DRIVER = "mysql"
DEFAULT_HOST = "db"
DEFAULT_DATABASE = "mydb"
DEFAULT_CHARSET = "utf8"
DEFAULT_USER = "user"
DEFAULT_PASSWORD = "password"

SUCCESS_MESSAGE = "MySQL connection successful!"
ERROR_PREFIX = "Error: "
