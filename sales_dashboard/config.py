from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

# Snowpark Container Services mounts a short-lived OAuth token here.
DEFAULT_TOKEN_PATH = "/snowflake/session/token"
DEFAULT_SNOWSQL_CONFIG = "~/.snowsql/config"
DEFAULT_WAREHOUSE = "COMPUTE_WH"


@dataclass(frozen=True)
class AppConfig:
    # Server
    host: str
    port: int
    static_dir: str
    log_level: str

    # Resolved once at startup: True when the session token was present.
    in_container: bool
    token_path: str

    # Snowflake connection values taken from the environment. Anything left
    # unset here may still be supplied by the local snowsql config file.
    snowflake_account: Optional[str] = None
    snowflake_host: Optional[str] = None
    snowflake_user: Optional[str] = None
    snowflake_password: Optional[str] = None
    snowflake_private_key_path: Optional[str] = None
    snowflake_private_key_passphrase: Optional[str] = None
    snowflake_role: Optional[str] = None
    snowflake_warehouse: Optional[str] = None
    snowflake_database: Optional[str] = None
    snowflake_schema: Optional[str] = None

    # Local development only
    snowsql_config_path: Optional[str] = DEFAULT_SNOWSQL_CONFIG
    connection_name: str = "default"

    # Passed straight through to the connector
    login_timeout: Optional[int] = None
    network_timeout: Optional[int] = None

    use_mock_data: bool = False
    # USE_MOCK_DATA was set but dropped because we run in the container.
    mock_data_ignored: bool = False

    @property
    def environment(self) -> str:
        return "SPCS Container" if self.in_container else "Local Development"


def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name, default)
    if v is None:
        return None
    v = v.strip()
    return v if v else None


def _getenv_int(name: str, default: Optional[int] = None) -> Optional[int]:
    v = _getenv(name)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, v)
        return default


def get_config() -> AppConfig:
    """
    Centralized config: this is the ONLY place env vars are read.
    - Loads `.env` if present (local dev)
    - Works with the env vars injected by the SPCS service definition
    - Probes for the session token exactly once; callers get the answer via `in_container`
    """
    load_dotenv(override=False)

    token_path = _getenv("SNOWFLAKE_TOKEN_PATH", DEFAULT_TOKEN_PATH) or DEFAULT_TOKEN_PATH
    in_container = Path(token_path).exists()

    requested_mock = (_getenv("USE_MOCK_DATA", "false") or "false").lower() == "true"
    # Mock data must never be served by a deployment that claims real data.
    mock_ignored = requested_mock and in_container

    return AppConfig(
        host=_getenv("HOST", "localhost") or "localhost",
        port=_getenv_int("PORT", 3002) or 3002,
        static_dir=_getenv("STATIC_DIR", "build") or "build",
        log_level=(_getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
        in_container=in_container,
        token_path=token_path,
        snowflake_account=_getenv("SNOWFLAKE_ACCOUNT"),
        snowflake_host=_getenv("SNOWFLAKE_HOST"),
        snowflake_user=_getenv("SNOWFLAKE_USER"),
        snowflake_password=_getenv("SNOWFLAKE_PASSWORD"),
        snowflake_private_key_path=_getenv("SNOWFLAKE_PRIVATE_KEY_PATH"),
        snowflake_private_key_passphrase=_getenv("PRIVATE_KEY_PASSPHRASE"),
        snowflake_role=_getenv("SNOWFLAKE_ROLE"),
        snowflake_warehouse=_getenv("SNOWFLAKE_WAREHOUSE"),
        snowflake_database=_getenv("SNOWFLAKE_DATABASE"),
        snowflake_schema=_getenv("SNOWFLAKE_SCHEMA"),
        snowsql_config_path=_getenv("SNOWSQL_CONFIG", DEFAULT_SNOWSQL_CONFIG),
        connection_name=_getenv("SNOWFLAKE_CONNECTION_NAME", "default") or "default",
        login_timeout=_getenv_int("SNOWFLAKE_LOGIN_TIMEOUT"),
        network_timeout=_getenv_int("SNOWFLAKE_NETWORK_TIMEOUT"),
        use_mock_data=requested_mock and not mock_ignored,
        mock_data_ignored=mock_ignored,
    )
