from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Tuple

import pandas as pd

from sales_dashboard.config import AppConfig
from sales_dashboard.data import mock_data, queries
from sales_dashboard.data.connection import SqlClient
from sales_dashboard.data.queries import Filters


@dataclass(frozen=True)
class DataResult:
    data: Any
    source: str  # "mock" | "snowflake"


def _camel(col: str) -> str:
    head, *rest = str(col).lower().split("_")
    return head + "".join(part.title() for part in rest)


def _jsonable(v: Any) -> Any:
    if v is None:
        return None
    if isinstance(v, Decimal):
        return float(v)
    if isinstance(v, float) and math.isnan(v):
        return None
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    if hasattr(v, "item"):  # numpy scalars
        return _jsonable(v.item())
    return v


def to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Snowflake-cased columns -> camelCase keys with plain JSON values."""
    cols = [_camel(c) for c in df.columns]
    return [
        {c: _jsonable(v) for c, v in zip(cols, row)}
        for row in df.itertuples(index=False, name=None)
    ]


def _run(use_mock: bool, fn_live: Callable[[], pd.DataFrame], fn_mock: Callable[[], pd.DataFrame]) -> Tuple[pd.DataFrame, str]:
    # No silent fallback: a live failure propagates to the request boundary.
    if use_mock:
        return fn_mock(), "mock"
    return fn_live(), "snowflake"


def get_sales_summary(cfg: AppConfig, client: SqlClient, filters: Filters) -> DataResult:
    df, source = _run(
        cfg.use_mock_data,
        fn_live=lambda: client.query(queries.q_sales_summary(filters)),
        fn_mock=lambda: mock_data.sales_summary_mock(filters),
    )
    rows = to_records(df)
    summary = rows[0] if rows else {"totalCustomers": 0, "totalOrders": 0, "totalRevenue": None, "avgOrderValue": None}
    return DataResult(data=summary, source=source)


def get_monthly_revenue(cfg: AppConfig, client: SqlClient, filters: Filters) -> DataResult:
    df, source = _run(
        cfg.use_mock_data,
        fn_live=lambda: client.query(queries.q_monthly_revenue(filters)),
        fn_mock=lambda: mock_data.monthly_revenue_mock(filters),
    )
    return DataResult(data=to_records(df), source=source)


def get_category_sales(cfg: AppConfig, client: SqlClient, filters: Filters) -> DataResult:
    df, source = _run(
        cfg.use_mock_data,
        fn_live=lambda: client.query(queries.q_category_sales(filters)),
        fn_mock=lambda: mock_data.category_sales_mock(filters),
    )
    return DataResult(data=to_records(df), source=source)


def get_categories(cfg: AppConfig, client: SqlClient) -> DataResult:
    df, source = _run(
        cfg.use_mock_data,
        fn_live=lambda: client.query(queries.q_categories()),
        fn_mock=lambda: mock_data.categories_mock(),
    )
    names = [r["category"] for r in to_records(df)]
    return DataResult(data=names, source=source)


def get_top_products(cfg: AppConfig, client: SqlClient) -> DataResult:
    df, source = _run(
        cfg.use_mock_data,
        fn_live=lambda: client.query(queries.q_top_products()),
        fn_mock=lambda: mock_data.top_products_mock(Filters(), with_category=False),
    )
    return DataResult(data=to_records(df), source=source)


def get_top_products_by_category(cfg: AppConfig, client: SqlClient, filters: Filters) -> DataResult:
    df, source = _run(
        cfg.use_mock_data,
        fn_live=lambda: client.query(queries.q_top_products_by_category(filters)),
        fn_mock=lambda: mock_data.top_products_mock(filters),
    )
    return DataResult(data=to_records(df), source=source)
