"""Tests for environment-driven configuration and logging setup."""

from __future__ import annotations

import logging

import pytest

from sales_dashboard import __main__ as main_module
from sales_dashboard import config as config_module
from sales_dashboard import logging_setup
from sales_dashboard.config import get_config


ENV_VARS = [
    "HOST",
    "PORT",
    "STATIC_DIR",
    "LOG_LEVEL",
    "SNOWFLAKE_TOKEN_PATH",
    "SNOWFLAKE_ACCOUNT",
    "SNOWFLAKE_HOST",
    "SNOWFLAKE_USER",
    "SNOWFLAKE_PASSWORD",
    "SNOWFLAKE_PRIVATE_KEY_PATH",
    "PRIVATE_KEY_PASSPHRASE",
    "SNOWFLAKE_ROLE",
    "SNOWFLAKE_WAREHOUSE",
    "SNOWFLAKE_DATABASE",
    "SNOWFLAKE_SCHEMA",
    "SNOWSQL_CONFIG",
    "SNOWFLAKE_CONNECTION_NAME",
    "SNOWFLAKE_LOGIN_TIMEOUT",
    "SNOWFLAKE_NETWORK_TIMEOUT",
    "USE_MOCK_DATA",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the picture.
    monkeypatch.setattr(config_module, "load_dotenv", lambda **kwargs: False)
    monkeypatch.setenv("SNOWFLAKE_TOKEN_PATH", str(tmp_path / "no-token"))
    return monkeypatch


class TestDefaults:
    def test_local_defaults(self, clean_env):
        cfg = get_config()
        assert cfg.host == "localhost"
        assert cfg.port == 3002
        assert cfg.static_dir == "build"
        assert cfg.log_level == "INFO"
        assert cfg.in_container is False
        assert cfg.environment == "Local Development"
        assert cfg.use_mock_data is False
        assert cfg.connection_name == "default"
        assert cfg.snowsql_config_path == config_module.DEFAULT_SNOWSQL_CONFIG
        assert cfg.snowflake_account is None

    def test_blank_values_are_unset(self, clean_env):
        clean_env.setenv("SNOWFLAKE_ACCOUNT", "   ")
        clean_env.setenv("SNOWFLAKE_ROLE", "")
        cfg = get_config()
        assert cfg.snowflake_account is None
        assert cfg.snowflake_role is None

    def test_values_are_stripped(self, clean_env):
        clean_env.setenv("SNOWFLAKE_USER", "  analyst ")
        assert get_config().snowflake_user == "analyst"

    def test_bad_port_falls_back(self, clean_env):
        clean_env.setenv("PORT", "eighty")
        assert get_config().port == 3002

    def test_timeouts(self, clean_env):
        clean_env.setenv("SNOWFLAKE_LOGIN_TIMEOUT", "15")
        clean_env.setenv("SNOWFLAKE_NETWORK_TIMEOUT", "soon")
        cfg = get_config()
        assert cfg.login_timeout == 15
        assert cfg.network_timeout is None

    def test_log_level_is_upper_cased(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "debug")
        assert get_config().log_level == "DEBUG"


class TestEnvironmentDetection:
    def test_token_file_means_container(self, clean_env, tmp_path):
        token = tmp_path / "token"
        token.write_text("t", encoding="ascii")
        clean_env.setenv("SNOWFLAKE_TOKEN_PATH", str(token))
        cfg = get_config()
        assert cfg.in_container is True
        assert cfg.environment == "SPCS Container"
        assert cfg.token_path == str(token)

    def test_mock_flag_locally(self, clean_env):
        clean_env.setenv("USE_MOCK_DATA", "TRUE")
        assert get_config().use_mock_data is True

    @pytest.mark.parametrize("value", ["1", "yes", "false", ""])
    def test_only_true_enables_mock(self, clean_env, value):
        clean_env.setenv("USE_MOCK_DATA", value)
        assert get_config().use_mock_data is False

    def test_mock_flag_ignored_in_container(self, clean_env, tmp_path):
        token = tmp_path / "token"
        token.write_text("t", encoding="ascii")
        clean_env.setenv("SNOWFLAKE_TOKEN_PATH", str(token))
        clean_env.setenv("USE_MOCK_DATA", "true")
        cfg = get_config()
        assert cfg.use_mock_data is False
        assert cfg.mock_data_ignored is True

    def test_mock_flag_not_ignored_locally(self, clean_env):
        clean_env.setenv("USE_MOCK_DATA", "true")
        assert get_config().mock_data_ignored is False


class TestMain:
    @pytest.fixture
    def container_env(self, clean_env, tmp_path, monkeypatch):
        token = tmp_path / "token"
        token.write_text("t", encoding="ascii")
        clean_env.setenv("SNOWFLAKE_TOKEN_PATH", str(token))
        clean_env.setenv("USE_MOCK_DATA", "true")
        runs = []
        monkeypatch.setattr(main_module, "create_app", lambda cfg: cfg)
        monkeypatch.setattr(main_module.uvicorn, "run", lambda app, **kwargs: runs.append((app, kwargs)))
        return runs

    def test_ignored_mock_flag_is_logged_after_setup(self, container_env, monkeypatch, caplog):
        records_at_setup = []
        monkeypatch.setattr(main_module, "setup_logging", lambda level: records_at_setup.append(len(caplog.records)))

        with caplog.at_level(logging.INFO, logger="sales_dashboard"):
            main_module.main()

        assert records_at_setup == [0]
        assert "USE_MOCK_DATA is ignored inside the SPCS container" in caplog.text

    def test_container_binds_all_interfaces(self, container_env, monkeypatch):
        monkeypatch.setattr(main_module, "setup_logging", lambda level: None)
        main_module.main()
        (cfg, kwargs), = container_env
        assert cfg.use_mock_data is False
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 3002


class TestLoggingSetup:
    def test_configures_once(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging_setup, "_INITIALIZED", False)
        monkeypatch.setattr(logging_setup.logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        logging_setup.setup_logging("debug")
        logging_setup.setup_logging("info")

        assert len(calls) == 1
        assert calls[0]["level"] == logging.DEBUG
        assert calls[0]["format"] == logging_setup.LOG_FORMAT

    def test_quiets_connector(self, monkeypatch):
        monkeypatch.setattr(logging_setup, "_INITIALIZED", False)
        monkeypatch.setattr(logging_setup.logging, "basicConfig", lambda **kwargs: None)
        logging_setup.setup_logging()
        assert logging.getLogger("snowflake.connector").level == logging.WARNING
