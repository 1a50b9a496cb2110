from __future__ import annotations

import logging

import uvicorn

from sales_dashboard.app import create_app
from sales_dashboard.config import get_config
from sales_dashboard.logging_setup import setup_logging


logger = logging.getLogger("sales_dashboard")


def main() -> None:
    cfg = get_config()
    setup_logging(cfg.log_level)
    if cfg.mock_data_ignored:
        logger.warning("USE_MOCK_DATA is ignored inside the SPCS container")

    if cfg.in_container:
        logger.info("Server running in SPCS container on port %s", cfg.port)
        # The platform routes the service endpoint to this port; listen on all interfaces.
        host = "0.0.0.0"
    else:
        logger.info("Server running locally on http://%s:%s", cfg.host, cfg.port)
        logger.info("Health check: http://%s:%s/api/health", cfg.host, cfg.port)
        host = cfg.host
    if cfg.use_mock_data:
        logger.warning("USE_MOCK_DATA=true: serving mock data, Snowflake is not queried")

    uvicorn.run(create_app(cfg), host=host, port=cfg.port, log_config=None)


if __name__ == "__main__":
    main()
