"""
Development-only stand-in for the warehouse.

Mirrors the demo seed data loaded into the warehouse and aggregates it with
pandas using the same filter semantics as the SQL in queries.py. Column names
come back upper-cased, the way Snowflake returns unquoted identifiers, so the
service layer maps both sources identically.
"""
from __future__ import annotations

from datetime import date

import pandas as pd
from faker import Faker

from sales_dashboard.data.queries import Filters


PRODUCTS = [
    (1, "Wireless Headphones", "Electronics", 129.99),
    (2, "Coffee Maker", "Appliances", 89.99),
    (3, "Running Shoes", "Sports", 149.99),
    (4, "Laptop Stand", "Electronics", 39.99),
    (5, "Yoga Mat", "Sports", 29.99),
    (6, "Smart Watch", "Electronics", 299.99),
    (7, "Blender", "Appliances", 79.99),
    (8, "Desk Lamp", "Furniture", 49.99),
    (9, "Water Bottle", "Sports", 19.99),
    (10, "Bluetooth Speaker", "Electronics", 79.99),
]

# (customer_id, product_id, quantity, order_date, total_amount)
ORDERS = [
    (1, 1, 1, "2024-01-15", 129.99),
    (2, 3, 1, "2024-01-18", 149.99),
    (3, 2, 2, "2024-01-22", 179.98),
    (1, 6, 1, "2024-02-05", 299.99),
    (4, 4, 1, "2024-02-10", 39.99),
    (5, 5, 3, "2024-02-14", 89.97),
    (2, 8, 1, "2024-02-20", 49.99),
    (6, 1, 2, "2024-03-01", 259.98),
    (7, 7, 1, "2024-03-08", 79.99),
    (3, 9, 4, "2024-03-15", 79.96),
    (8, 10, 1, "2024-03-22", 79.99),
    (9, 6, 1, "2024-04-02", 299.99),
    (1, 5, 1, "2024-04-10", 29.99),
    (10, 3, 1, "2024-04-18", 149.99),
    (4, 2, 1, "2024-04-25", 89.99),
    (5, 8, 2, "2024-05-05", 99.98),
    (6, 4, 3, "2024-05-12", 119.97),
    (2, 9, 2, "2024-05-20", 39.98),
    (7, 1, 1, "2024-05-28", 129.99),
    (8, 7, 1, "2024-06-03", 79.99),
    (9, 10, 2, "2024-06-10", 159.98),
    (10, 6, 1, "2024-06-15", 299.99),
    (3, 5, 2, "2024-06-22", 59.98),
    (1, 2, 1, "2024-06-28", 89.99),
]


def customers_mock(n: int = 10) -> pd.DataFrame:
    fake = Faker()
    fake.seed_instance(7)
    rows = []
    for customer_id in range(1, n + 1):
        rows.append(
            {
                "customer_id": customer_id,
                "customer_name": fake.name(),
                "email": fake.email(),
                "city": fake.city(),
                "state": fake.state_abbr(),
                "signup_date": fake.date_between(date(2023, 1, 1), date(2023, 12, 31)),
            }
        )
    return pd.DataFrame(rows)


def products_mock() -> pd.DataFrame:
    return pd.DataFrame(PRODUCTS, columns=["product_id", "product_name", "category", "price"])


def orders_mock() -> pd.DataFrame:
    df = pd.DataFrame(ORDERS, columns=["customer_id", "product_id", "quantity", "order_date", "total_amount"])
    df.insert(0, "order_id", range(1, len(df) + 1))
    df["order_date"] = pd.to_datetime(df["order_date"])
    df["status"] = "completed"
    return df


def _filtered(filters: Filters) -> pd.DataFrame:
    df = orders_mock().merge(products_mock(), on="product_id").merge(customers_mock(), on="customer_id")
    rng = filters.date_range
    if rng is not None:
        start, end = (pd.Timestamp(d) for d in rng)
        df = df[(df["order_date"] >= start) & (df["order_date"] < end)]
    if filters.has_category:
        df = df[df["category"] == filters.category]
    return df


def sales_summary_mock(filters: Filters) -> pd.DataFrame:
    df = _filtered(filters)
    empty = df.empty
    return pd.DataFrame(
        [
            {
                "TOTAL_CUSTOMERS": df["customer_id"].nunique(),
                "TOTAL_ORDERS": df["order_id"].nunique(),
                "TOTAL_REVENUE": None if empty else round(df["total_amount"].sum(), 2),
                "AVG_ORDER_VALUE": None if empty else round(df["total_amount"].mean(), 2),
            }
        ]
    )


def monthly_revenue_mock(filters: Filters) -> pd.DataFrame:
    df = _filtered(filters).assign(month=lambda d: d["order_date"].dt.strftime("%Y-%m"))
    out = (
        df.groupby("month", as_index=False)
        .agg(
            REVENUE=("total_amount", "sum"),
            ORDERS=("order_id", "nunique"),
            CUSTOMERS=("customer_id", "nunique"),
        )
        .rename(columns={"month": "MONTH"})
        .sort_values("MONTH")
    )
    out["REVENUE"] = out["REVENUE"].round(2)
    return out.reset_index(drop=True)


def category_sales_mock(filters: Filters) -> pd.DataFrame:
    df = _filtered(filters)
    if filters.has_category:
        keys, label, limit = ["product_id", "product_name"], "PRODUCT_NAME", 8
    else:
        keys, label, limit = ["category"], "CATEGORY", None
    out = (
        df.groupby(keys, as_index=False)
        .agg(REVENUE=("total_amount", "sum"), ORDERS=("order_id", "count"))
        .sort_values(["REVENUE", keys[0]], ascending=[False, True])
    )
    out["REVENUE"] = out["REVENUE"].round(2)
    out = out.rename(columns={keys[-1]: label})[[label, "REVENUE", "ORDERS"]]
    if limit is not None:
        out = out.head(limit)
    return out.reset_index(drop=True)


def categories_mock() -> pd.DataFrame:
    cats = sorted(products_mock()["category"].dropna().unique())
    return pd.DataFrame({"CATEGORY": cats})


def top_products_mock(filters: Filters, limit: int = 5, with_category: bool = True) -> pd.DataFrame:
    df = _filtered(filters)
    out = (
        df.groupby(["product_id", "product_name", "category"], as_index=False)
        .agg(UNITS_SOLD=("quantity", "sum"), REVENUE=("total_amount", "sum"))
        .sort_values(["REVENUE", "product_id"], ascending=[False, True])
        .head(limit)
        .rename(columns={"product_name": "PRODUCT_NAME", "category": "CATEGORY"})
    )
    out["REVENUE"] = out["REVENUE"].round(2)
    cols = ["PRODUCT_NAME", "CATEGORY", "UNITS_SOLD", "REVENUE"] if with_category else ["PRODUCT_NAME", "UNITS_SOLD", "REVENUE"]
    return out[cols].reset_index(drop=True)
