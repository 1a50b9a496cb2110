"""Shared test fixtures for the sales dashboard."""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pytest
from snowflake.connector.errors import DatabaseError, ProgrammingError

from sales_dashboard.config import AppConfig
from sales_dashboard.data.connection import SqlClient


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self.conn = conn
        self.description: Optional[List[tuple]] = None

    def execute(self, sql: str, params: Optional[Dict[str, Any]] = None):
        self.conn.connector.statements.append((sql, params))
        if self.conn.connector.fail_on_execute:
            raise ProgrammingError("SQL compilation error: object 'ORDERS' does not exist")
        self.description = [(c, None, None, None, None, None, None) for c in self.conn.connector.columns]
        return self

    def fetchall(self) -> List[tuple]:
        return list(self.conn.connector.rows)

    def close(self) -> None:
        pass


class FakeConnection:
    def __init__(self, connector: "FakeConnector"):
        self.connector = connector
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self.connector.closed += 1


class FakeConnector:
    """Stands in for snowflake.connector.connect and counts connection lifecycles."""

    def __init__(
        self,
        columns: Sequence[str] = (),
        rows: Sequence[tuple] = (),
        fail_on_connect: bool = False,
        fail_on_execute: bool = False,
    ):
        self.columns = list(columns)
        self.rows = list(rows)
        self.fail_on_connect = fail_on_connect
        self.fail_on_execute = fail_on_execute
        self.opened = 0
        self.closed = 0
        self.connect_kwargs: List[Dict[str, Any]] = []
        self.statements: List[tuple] = []

    def __call__(self, **kwargs: Any) -> FakeConnection:
        self.connect_kwargs.append(kwargs)
        if self.fail_on_connect:
            raise DatabaseError("250001: Incorrect username or password was specified.")
        self.opened += 1
        return FakeConnection(self)

    @property
    def last_sql(self) -> str:
        return self.statements[-1][0]

    @property
    def last_params(self) -> Optional[Dict[str, Any]]:
        return self.statements[-1][1]


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    """A local-dev config that authenticates with env-style credentials only."""
    return AppConfig(
        host="localhost",
        port=3002,
        static_dir=str(tmp_path / "build"),
        log_level="INFO",
        in_container=False,
        token_path=str(tmp_path / "token"),
        snowflake_account="xy12345",
        snowflake_user="analyst",
        snowflake_password="s3cret",
        snowflake_database="SPCS_APP_DB",
        snowflake_schema="APP_SCHEMA",
        snowflake_role="APP_SPCS_ROLE",
        snowsql_config_path=None,
    )


@pytest.fixture
def mock_config(app_config: AppConfig) -> AppConfig:
    return replace(app_config, use_mock_data=True)


@pytest.fixture
def summary_connector() -> FakeConnector:
    """Snowflake's answer for two orders (129.99 + 149.99) in the same month."""
    return FakeConnector(
        columns=["TOTAL_CUSTOMERS", "TOTAL_ORDERS", "TOTAL_REVENUE", "AVG_ORDER_VALUE"],
        rows=[(2, 2, Decimal("279.98"), Decimal("139.99"))],
    )


@pytest.fixture
def make_client(app_config: AppConfig):
    def _make(connector: FakeConnector, cfg: Optional[AppConfig] = None) -> SqlClient:
        return SqlClient(cfg=cfg or app_config, connect=connector)

    return _make
