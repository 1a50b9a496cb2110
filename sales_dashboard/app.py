"""
Routing only.

All data access lives in data/service.py.
All env reads happen ONLY in config.py.

Every /api route except health follows the same contract: one warehouse round
trip run off the event loop, wrapped in the `{success, data}` envelope, or
`{success: false, error}` with a 500 when anything fails.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from sales_dashboard.config import AppConfig, get_config
from sales_dashboard.data import service
from sales_dashboard.data.connection import SqlClient, get_sql_client
from sales_dashboard.data.queries import ALL, Filters
from sales_dashboard.errors import DashboardError


logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _error(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def _respond(fetch: Callable[[], service.DataResult], error: str, **extra: Any) -> JSONResponse:
    # The query runs in a worker thread. If the client goes away the thread
    # still finishes and SqlClient still closes its connection.
    try:
        result = await run_in_threadpool(fetch)
    except DashboardError as e:
        logger.error("%s: %s", error, e)
        return _error(error)
    except Exception:
        logger.exception("%s: unexpected failure", error)
        return _error(error)

    return JSONResponse(
        content={"success": True, "data": result.data, **extra},
        headers={"X-Data-Source": result.source},
    )


def create_app(cfg: Optional[AppConfig] = None, client: Optional[SqlClient] = None) -> FastAPI:
    cfg = cfg or get_config()
    client = client or get_sql_client(cfg)
    static_dir = Path(cfg.static_dir).resolve()

    app = FastAPI(
        title="Sales Analytics Dashboard",
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
    )
    app.state.cfg = cfg
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
        return _error("Internal server error")

    @app.get("/api/health")
    async def health() -> dict:
        return {
            "status": "OK",
            "environment": cfg.environment,
            "port": cfg.port,
            "timestamp": _timestamp(),
        }

    @app.get("/api/data")
    async def sales_summary(period: str = Query(ALL), category: str = Query(ALL)) -> JSONResponse:
        filters = Filters(period=period, category=category)
        return await _respond(
            lambda: service.get_sales_summary(cfg, client, filters),
            "Failed to fetch sales metrics",
            timestamp=_timestamp(),
        )

    @app.get("/api/monthly-revenue")
    async def monthly_revenue(period: str = Query(ALL), category: str = Query(ALL)) -> JSONResponse:
        filters = Filters(period=period, category=category)
        return await _respond(
            lambda: service.get_monthly_revenue(cfg, client, filters),
            "Failed to fetch monthly revenue data",
        )

    @app.get("/api/category-sales")
    async def category_sales(period: str = Query(ALL), category: str = Query(ALL)) -> JSONResponse:
        filters = Filters(period=period, category=category)
        return await _respond(
            lambda: service.get_category_sales(cfg, client, filters),
            "Failed to fetch category sales data",
        )

    @app.get("/api/categories")
    async def categories() -> JSONResponse:
        return await _respond(
            lambda: service.get_categories(cfg, client),
            "Failed to fetch categories",
        )

    @app.get("/api/top-products")
    async def top_products() -> JSONResponse:
        return await _respond(
            lambda: service.get_top_products(cfg, client),
            "Failed to fetch top products data",
        )

    @app.get("/api/top-products-by-category")
    async def top_products_by_category(period: str = Query(ALL), category: str = Query(ALL)) -> JSONResponse:
        filters = Filters(period=period, category=category)
        return await _respond(
            lambda: service.get_top_products_by_category(cfg, client, filters),
            "Failed to fetch products by category data",
            category=category or ALL,
        )

    # SPA fallback - must be registered last so it only sees unmatched paths
    @app.get("/{full_path:path}", include_in_schema=False)
    async def spa(full_path: str):
        if full_path:
            candidate = (static_dir / full_path).resolve()
            if candidate.is_file() and static_dir in candidate.parents:
                return FileResponse(candidate)

        index = static_dir / "index.html"
        if index.is_file():
            return FileResponse(index)
        return _error("Front-end build not found", status_code=404)

    return app
