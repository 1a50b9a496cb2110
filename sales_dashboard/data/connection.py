from __future__ import annotations

import logging
from contextlib import closing
from dataclasses import dataclass
from typing import Any, Callable

import pandas as pd
import snowflake.connector
from snowflake.connector.errors import Error as SnowflakeError

from sales_dashboard.config import AppConfig
from sales_dashboard.data.provisioner import provision_connection
from sales_dashboard.data.queries import Statement
from sales_dashboard.errors import CredentialError, QueryError


logger = logging.getLogger(__name__)

Connect = Callable[..., Any]


@dataclass(frozen=True)
class SqlClient:
    cfg: AppConfig
    connect: Connect = snowflake.connector.connect

    def query(self, statement: Statement) -> pd.DataFrame:
        """
        Returns a pandas.DataFrame from Snowflake.

        Opens one connection for this call only and always closes it, whether
        the statement succeeds or raises. No pooling: the SPCS OAuth token is
        short-lived, so each request authenticates on its own.
        """
        params = provision_connection(self.cfg)

        try:
            conn = self.connect(**params.to_connect_kwargs())
        except SnowflakeError as e:
            raise CredentialError(f"Snowflake rejected the connection: {e}") from e

        with closing(conn):
            try:
                with closing(conn.cursor()) as cur:
                    cur.execute(statement.sql, statement.params or None)
                    rows = cur.fetchall()
                    cols = [d[0] for d in (cur.description or [])]
            except SnowflakeError as e:
                raise QueryError(f"SQL execution failed: {e}") from e

        logger.debug("Query returned %d rows", len(rows))
        return pd.DataFrame(rows, columns=cols)


def get_sql_client(cfg: AppConfig) -> SqlClient:
    return SqlClient(cfg=cfg)
