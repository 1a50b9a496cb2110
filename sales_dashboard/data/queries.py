from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple


ALL = "all"


@dataclass(frozen=True)
class Statement:
    sql: str
    params: Dict[str, Any] = field(default_factory=dict)


# Half-open [start, end) ranges over the seeded first half of 2024.
PERIODS: Dict[str, Tuple[date, date]] = {
    "q1": (date(2024, 1, 1), date(2024, 4, 1)),
    "q2": (date(2024, 4, 1), date(2024, 7, 1)),
    "recent3": (date(2024, 4, 1), date(2024, 7, 1)),
    "early3": (date(2024, 1, 1), date(2024, 4, 1)),
}

PERIOD_ALIASES = {
    "first-half": "q1",
    "second-half": "q2",
    "recent-subrange": "recent3",
    "early-subrange": "early3",
}


def resolve_period(period: Optional[str]) -> Optional[Tuple[date, date]]:
    """Unknown or missing periods mean "all" (no date filter), never an error.

    Keys match exactly, so `Q1` and ` q1 ` are unknown.
    """
    if not period:
        return None
    return PERIODS.get(PERIOD_ALIASES.get(period, period))


@dataclass(frozen=True)
class Filters:
    period: Optional[str] = ALL
    category: Optional[str] = ALL

    @property
    def date_range(self) -> Optional[Tuple[date, date]]:
        return resolve_period(self.period)

    @property
    def has_category(self) -> bool:
        return bool(self.category) and self.category != ALL


def _where(filters: Filters) -> Tuple[str, Dict[str, Any]]:
    clauses: List[str] = []
    params: Dict[str, Any] = {}

    rng = filters.date_range
    if rng is not None:
        clauses.append("o.order_date >= %(start_date)s AND o.order_date < %(end_date)s")
        params["start_date"], params["end_date"] = rng

    if filters.has_category:
        # bound, never interpolated
        clauses.append("p.category = %(category)s")
        params["category"] = filters.category

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def q_sales_summary(filters: Filters) -> Statement:
    where, params = _where(filters)
    join = "JOIN PRODUCTS p ON o.product_id = p.product_id" if filters.has_category else ""
    return Statement(
        f"""
    SELECT
      COUNT(DISTINCT o.customer_id) AS total_customers,
      COUNT(DISTINCT o.order_id) AS total_orders,
      SUM(o.total_amount) AS total_revenue,
      ROUND(AVG(o.total_amount), 2) AS avg_order_value
    FROM ORDERS o
    {join}
    {where}
    """,
        params,
    )


def q_monthly_revenue(filters: Filters) -> Statement:
    where, params = _where(filters)
    join = "JOIN PRODUCTS p ON o.product_id = p.product_id" if filters.has_category else ""
    return Statement(
        f"""
    SELECT
      TO_CHAR(o.order_date, 'YYYY-MM') AS month,
      SUM(o.total_amount) AS revenue,
      COUNT(DISTINCT o.order_id) AS orders,
      COUNT(DISTINCT o.customer_id) AS customers
    FROM ORDERS o
    {join}
    {where}
    GROUP BY TO_CHAR(o.order_date, 'YYYY-MM')
    ORDER BY month ASC
    """,
        params,
    )


def q_category_sales(filters: Filters) -> Statement:
    """Per-category breakdown for "all"; per-product breakdown inside one category otherwise."""
    where, params = _where(filters)
    if filters.has_category:
        return Statement(
            f"""
    SELECT
      p.product_name,
      SUM(o.total_amount) AS revenue,
      COUNT(o.order_id) AS orders
    FROM ORDERS o
    JOIN PRODUCTS p ON o.product_id = p.product_id
    {where}
    GROUP BY p.product_name, p.product_id
    ORDER BY revenue DESC, p.product_id ASC
    LIMIT 8
    """,
            params,
        )
    return Statement(
        f"""
    SELECT
      p.category,
      SUM(o.total_amount) AS revenue,
      COUNT(o.order_id) AS orders
    FROM ORDERS o
    JOIN PRODUCTS p ON o.product_id = p.product_id
    {where}
    GROUP BY p.category
    ORDER BY revenue DESC, p.category ASC
    """,
        params,
    )


def q_categories() -> Statement:
    return Statement(
        """
    SELECT DISTINCT category
    FROM PRODUCTS
    WHERE category IS NOT NULL
    ORDER BY category
    """
    )


def q_top_products(limit: int = 5) -> Statement:
    return Statement(
        f"""
    SELECT
      p.product_name,
      SUM(o.quantity) AS units_sold,
      SUM(o.total_amount) AS revenue
    FROM ORDERS o
    JOIN PRODUCTS p ON o.product_id = p.product_id
    GROUP BY p.product_name, p.product_id
    ORDER BY revenue DESC, p.product_id ASC
    LIMIT {int(limit)}
    """
    )


def q_top_products_by_category(filters: Filters, limit: int = 5) -> Statement:
    where, params = _where(filters)
    return Statement(
        f"""
    SELECT
      p.product_name,
      p.category,
      SUM(o.quantity) AS units_sold,
      SUM(o.total_amount) AS revenue
    FROM ORDERS o
    JOIN PRODUCTS p ON o.product_id = p.product_id
    {where}
    GROUP BY p.product_name, p.category, p.product_id
    ORDER BY revenue DESC, p.product_id ASC
    LIMIT {int(limit)}
    """,
        params,
    )
