"""PDO-style DSN parsing.

A DSN names the driver, then a ``;``-separated list of ``key=value`` pairs::

    mysql:host=db;dbname=mydb;charset=utf8
    odbc:Driver={MySQL ODBC 8.0 Unicode Driver};Server=db;Database=mydb
"""

from __future__ import annotations

from typing import Dict, Mapping, NamedTuple


class InvalidDsnError(ValueError):
    """Raised when a DSN string cannot be parsed."""


class Dsn(NamedTuple):
    driver: str
    params: Dict[str, str]


def parse_dsn(dsn: str) -> Dsn:
    """Split *dsn* into its driver prefix and parameter mapping.

    mysql keys are case-insensitive and are lower-cased; odbc keys are kept
    verbatim because they are handed to the ODBC driver manager untouched.
    """
    if not isinstance(dsn, str):
        raise TypeError(f"dsn must be str, got {type(dsn).__name__}")
    driver, sep, rest = dsn.strip().partition(":")
    driver = driver.strip().lower()
    if not sep or not driver:
        raise InvalidDsnError(f"DSN {dsn!r} has no driver prefix (expected 'driver:...')")

    params: Dict[str, str] = {}
    for segment in rest.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        key, eq, value = segment.partition("=")
        key = key.strip()
        if not eq or not key:
            if driver == "odbc":
                # bare ODBC data source name, e.g. ``odbc:my_dsn``
                params.setdefault("DSN", segment)
                continue
            raise InvalidDsnError(
                f"DSN segment {segment!r} is not a key=value pair"
            )
        if driver != "odbc":
            key = key.lower()
        params[key] = value.strip()
    return Dsn(driver, params)


def format_dsn(driver: str, params: Mapping[str, object]) -> str:
    """Render *driver* and *params* back into a DSN string."""
    body = ";".join(f"{k}={v}" for k, v in params.items() if v is not None)
    return f"{driver}:{body}"
