"""Tests for dsnprobe.config -- ConnectionConfig, env and file resolution."""

from __future__ import annotations

import json
import os
from unittest.mock import patch

import pytest

from dsnprobe.config import (
    ConnectionConfig,
    config_from_env,
    expand_env,
    load_config_file,
    resolve_config,
)
from dsnprobe.dsn import InvalidDsnError


class TestConnectionConfig:
    def test_defaults(self):
        cfg = ConnectionConfig()
        assert cfg.driver == "mysql"
        assert cfg.host == "db"
        assert cfg.database == "mydb"
        assert cfg.charset == "utf8"
        assert cfg.username == "user"
        assert cfg.password == "password"
        assert cfg.port is None

    def test_default_dsn(self):
        assert ConnectionConfig().dsn == "mysql:host=db;dbname=mydb;charset=utf8"

    def test_is_immutable(self):
        cfg = ConnectionConfig()
        with pytest.raises(Exception):
            cfg.host = "other"  # type: ignore[misc]

    def test_repr_hides_password(self):
        cfg = ConnectionConfig(password="s3cr3t")
        assert "s3cr3t" not in repr(cfg)
        assert "username='user'" in repr(cfg)

    def test_from_dsn(self):
        cfg = ConnectionConfig.from_dsn(
            "mysql:host=dbhost;port=3307;dbname=shop;charset=utf8mb4", "u", "p",
        )
        assert cfg.host == "dbhost"
        assert cfg.port == 3307
        assert cfg.database == "shop"
        assert cfg.charset == "utf8mb4"
        assert cfg.username == "u"
        assert cfg.password == "p"
        assert cfg.extra == ()

    def test_from_dsn_missing_keys_left_unset(self):
        cfg = ConnectionConfig.from_dsn("mysql:host=db")
        assert cfg.database is None
        assert cfg.charset is None
        assert cfg.dsn == "mysql:host=db"

    def test_from_dsn_unknown_keys_kept_in_extra(self):
        cfg = ConnectionConfig.from_dsn("mysql:host=db;sslmode=required")
        assert cfg.extra == (("sslmode", "required"),)

    def test_from_dsn_unix_socket(self):
        cfg = ConnectionConfig.from_dsn("mysql:unix_socket=/tmp/mysql.sock;dbname=mydb")
        assert cfg.unix_socket == "/tmp/mysql.sock"
        assert cfg.host is None

    def test_from_dsn_bad_port(self):
        with pytest.raises(InvalidDsnError, match="port must be an integer"):
            ConnectionConfig.from_dsn("mysql:host=db;port=abc")

    def test_from_odbc_dsn(self):
        cfg = ConnectionConfig.from_dsn("odbc:DSN=warehouse;PWD=hidden", "u", "p")
        assert cfg.driver == "odbc"
        assert cfg.host is None
        assert dict(cfg.extra) == {"DSN": "warehouse", "PWD": "hidden"}
        assert "hidden" not in cfg.dsn


class TestExpandEnv:
    def test_expands_vars(self):
        with patch.dict(os.environ, {"DB_PASSWORD": "pw"}):
            assert expand_env("${DB_PASSWORD}") == "pw"

    def test_missing_var_raises(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(KeyError, match="NOPE"):
                expand_env("${NOPE}")

    def test_non_string_passthrough(self):
        assert expand_env(3306) == 3306


class TestConfigFromEnv:
    def test_defaults_when_empty(self):
        cfg = config_from_env({})
        assert cfg == ConnectionConfig()

    def test_individual_vars(self):
        cfg = config_from_env({
            "DB_HOST": "h", "DB_PORT": "3310", "DB_NAME": "n",
            "DB_CHARSET": "latin1", "DB_USER": "u", "DB_PASSWORD": "p",
        })
        assert (cfg.host, cfg.port, cfg.database, cfg.charset) == ("h", 3310, "n", "latin1")
        assert (cfg.username, cfg.password) == ("u", "p")

    def test_dsn_wins_over_parts(self):
        cfg = config_from_env({
            "DB_DSN": "mysql:host=fromdsn;dbname=x", "DB_HOST": "ignored",
            "DB_USER": "u",
        })
        assert cfg.host == "fromdsn"
        assert cfg.database == "x"
        assert cfg.username == "u"

    def test_bad_port(self):
        with pytest.raises(ValueError, match="DB_PORT"):
            config_from_env({"DB_PORT": "x"})


class TestLoadConfigFile:
    def test_yaml(self, tmp_path):
        f = tmp_path / "c.yaml"
        f.write_text("connection:\n  host: h\n")
        assert load_config_file(f) == {"connection": {"host": "h"}}

    def test_json(self, tmp_path):
        f = tmp_path / "c.json"
        f.write_text(json.dumps({"connection": {"host": "h"}}))
        assert load_config_file(str(f)) == {"connection": {"host": "h"}}

    def test_non_mapping_raises(self, tmp_path):
        f = tmp_path / "c.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config_file(f)


class TestResolveConfig:
    def test_defaults(self):
        assert resolve_config(environ={}) == ConnectionConfig()

    def test_file_overrides_env(self, tmp_path):
        f = tmp_path / "c.yaml"
        f.write_text(
            "connection:\n"
            "  dsn: mysql:host=filehost;dbname=filedb;charset=utf8\n"
            "  username: fileuser\n"
            "  password: ${SECRET}\n"
        )
        with patch.dict(os.environ, {"SECRET": "pw"}):
            cfg = resolve_config(config=f, environ={"DB_HOST": "envhost"})
        assert cfg.host == "filehost"
        assert cfg.database == "filedb"
        assert cfg.username == "fileuser"
        assert cfg.password == "pw"

    def test_file_fields_overlay_env(self):
        cfg = resolve_config(
            config={"connection": {"database": "other", "port": 3307}},
            environ={"DB_HOST": "envhost"},
        )
        assert cfg.host == "envhost"
        assert cfg.database == "other"
        assert cfg.port == 3307

    def test_flat_config_accepted(self):
        cfg = resolve_config(config={"host": "flat", "user": "u"}, environ={})
        assert cfg.host == "flat"
        assert cfg.username == "u"

    def test_connection_must_be_mapping(self):
        with pytest.raises(TypeError, match="connection must be a mapping"):
            resolve_config(config={"connection": ["x"]}, environ={})

    def test_explicit_args_win(self):
        cfg = resolve_config(
            "mysql:host=cli;dbname=clidb", "cliuser", "clipw",
            config={"connection": {"host": "filehost", "username": "fileuser"}},
            environ={"DB_PASSWORD": "envpw"},
        )
        assert cfg.host == "cli"
        assert cfg.database == "clidb"
        assert cfg.username == "cliuser"
        assert cfg.password == "clipw"

    def test_explicit_dsn_keeps_resolved_credentials(self):
        cfg = resolve_config(
            "mysql:host=cli", environ={"DB_USER": "envuser", "DB_PASSWORD": "envpw"},
        )
        assert cfg.username == "envuser"
        assert cfg.password == "envpw"

    def test_empty_password_is_explicit(self):
        cfg = resolve_config(password="", environ={})
        assert cfg.password == ""

    def test_empty_user_is_explicit(self):
        cfg = resolve_config(user="", environ={"DB_USER": "envuser"})
        assert cfg.username == ""

    def test_bad_file_port_names_setting(self):
        with pytest.raises(ValueError, match="connection.port must be an integer"):
            resolve_config(config={"connection": {"port": "abc"}}, environ={})
