"""
Connection provisioning for Snowflake.

Turns an AppConfig into the keyword arguments `snowflake.connector.connect`
needs. Two auth modes:
- token: inside Snowpark Container Services, using the OAuth token mounted by the platform
- credential: local dev, from env vars layered over ~/.snowsql/config

Nothing is cached. The token file in particular is re-read on every call so a
rotated token is picked up by the next request.
"""
from __future__ import annotations

import configparser
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization

from sales_dashboard.config import DEFAULT_WAREHOUSE, AppConfig
from sales_dashboard.errors import ConfigurationError, CredentialError


logger = logging.getLogger(__name__)


class AuthMode(str, Enum):
    TOKEN = "token"
    CREDENTIAL = "credential"


@dataclass(frozen=True)
class ConnectionParams:
    account: str
    auth_mode: AuthMode
    warehouse: str
    database: Optional[str] = None
    schema: Optional[str] = None
    role: Optional[str] = None
    host: Optional[str] = None
    user: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    private_key: Optional[bytes] = field(default=None, repr=False)
    token: Optional[str] = field(default=None, repr=False)
    login_timeout: Optional[int] = None
    network_timeout: Optional[int] = None

    def to_connect_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "account": self.account,
            "warehouse": self.warehouse,
            "database": self.database,
            "schema": self.schema,
            "role": self.role,
            "login_timeout": self.login_timeout,
            "network_timeout": self.network_timeout,
        }
        if self.auth_mode is AuthMode.TOKEN:
            kwargs.update(host=self.host, authenticator="oauth", token=self.token)
        elif self.private_key is not None:
            kwargs.update(user=self.user, authenticator="SNOWFLAKE_JWT", private_key=self.private_key)
        else:
            kwargs.update(user=self.user, password=self.password)
        return {k: v for k, v in kwargs.items() if v is not None}


# snowsql accepts both the long and the short spelling of most keys
_CONFIG_KEYS = {
    "account": ("accountname", "account"),
    "user": ("username", "user"),
    "password": ("password",),
    "private_key_path": ("private_key_path",),
    "private_key_passphrase": ("private_key_passphrase",),
    "warehouse": ("warehousename", "warehouse"),
    "database": ("databasename", "database"),
    "schema": ("schemaname", "schema"),
    "role": ("rolename", "role"),
}

# Taken from a single source, never mixed between env and file
_AUTH_FIELDS = ("password", "private_key_path")


def read_snowsql_config(path: str, connection_name: str = "default") -> Dict[str, str]:
    """
    Parse a snowsql INI file and return the values for one connection.

    Looks for `[connections.<name>]` first, then falls back to the first section
    that is not a named connection (snowsql's plain `[connections]` block).
    A missing file, or one with no section for this connection, yields an
    empty dict so environment values alone can still be enough.
    """
    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        return {}

    parser = configparser.ConfigParser(interpolation=None)
    try:
        with open(cfg_path, encoding="utf-8") as f:
            parser.read_file(f)
    except (configparser.Error, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Malformed snowsql config at {cfg_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read snowsql config at {cfg_path}: {e}") from e

    section = f"connections.{connection_name}"
    if not parser.has_section(section):
        candidates = [s for s in parser.sections() if not s.startswith("connections.")]
        if not candidates:
            logger.info("No [%s] section in %s, using environment values only", section, cfg_path)
            return {}
        logger.info("Connection %r not found in %s, using [%s]", connection_name, cfg_path, candidates[0])
        section = candidates[0]

    values: Dict[str, str] = {}
    for name, keys in _CONFIG_KEYS.items():
        for key in keys:
            raw = parser.get(section, key, fallback=None)
            if raw is None:
                continue
            v = raw.strip().strip("'\"").strip()
            if v:
                values[name] = v
                break
    return values


def _read_file(path: str, what: str) -> bytes:
    try:
        return Path(path).expanduser().read_bytes()
    except OSError as e:
        raise CredentialError(f"Could not read {what} at {path}: {e}") from e


def load_private_key(path: str, passphrase: Optional[str] = None) -> bytes:
    """Load a PEM private key and return it as unencrypted DER/PKCS#8, the form the connector expects."""
    pem = _read_file(path, "private key")
    try:
        key = serialization.load_pem_private_key(
            pem,
            password=passphrase.encode("utf-8") if passphrase else None,
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CredentialError(f"Could not decode private key at {path}: {e}") from e
    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _provision_token(cfg: AppConfig) -> ConnectionParams:
    if not cfg.snowflake_account:
        raise ConfigurationError("Missing required Snowflake connection field: account", field="account")

    token = _read_file(cfg.token_path, "session token").decode("ascii", errors="replace").strip()
    if not token:
        raise CredentialError(f"Session token at {cfg.token_path} is empty")

    return ConnectionParams(
        account=cfg.snowflake_account,
        auth_mode=AuthMode.TOKEN,
        host=cfg.snowflake_host,
        token=token,
        warehouse=cfg.snowflake_warehouse or DEFAULT_WAREHOUSE,
        database=cfg.snowflake_database,
        schema=cfg.snowflake_schema,
        role=cfg.snowflake_role,
        login_timeout=cfg.login_timeout,
        network_timeout=cfg.network_timeout,
    )


def _provision_credentials(cfg: AppConfig) -> ConnectionParams:
    from_file = read_snowsql_config(cfg.snowsql_config_path, cfg.connection_name) if cfg.snowsql_config_path else {}
    from_env = {
        "account": cfg.snowflake_account,
        "user": cfg.snowflake_user,
        "password": cfg.snowflake_password,
        "private_key_path": cfg.snowflake_private_key_path,
        "private_key_passphrase": cfg.snowflake_private_key_passphrase,
        "warehouse": cfg.snowflake_warehouse,
        "database": cfg.snowflake_database,
        "schema": cfg.snowflake_schema,
        "role": cfg.snowflake_role,
    }
    # env beats file
    merged = {name: from_env.get(name) or from_file.get(name) for name in _CONFIG_KEYS}

    # A password in the env must not be displaced by a key path left in the file.
    auth_source = from_env if (from_env["password"] or from_env["private_key_path"]) else from_file
    for name in _AUTH_FIELDS:
        merged[name] = auth_source.get(name)

    for required in ("account", "user"):
        if not merged[required]:
            raise ConfigurationError(f"Missing required Snowflake connection field: {required}", field=required)

    key_path = merged["private_key_path"]
    if not key_path and not merged["password"]:
        raise ConfigurationError(
            "Missing authentication method: set a password or a private_key_path",
            field="password",
        )

    private_key = load_private_key(key_path, merged["private_key_passphrase"]) if key_path else None
    logger.info("Using %s authentication for %s", "key-pair" if private_key else "password", merged["user"])

    return ConnectionParams(
        account=merged["account"],
        auth_mode=AuthMode.CREDENTIAL,
        user=merged["user"],
        password=None if private_key else merged["password"],
        private_key=private_key,
        warehouse=merged["warehouse"] or DEFAULT_WAREHOUSE,
        database=merged["database"],
        schema=merged["schema"],
        role=merged["role"],
        login_timeout=cfg.login_timeout,
        network_timeout=cfg.network_timeout,
    )


def provision_connection(cfg: AppConfig) -> ConnectionParams:
    if cfg.in_container:
        return _provision_token(cfg)
    return _provision_credentials(cfg)
