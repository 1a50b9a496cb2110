"""Read-only sales analytics API over Snowflake, plus the SPA that charts it."""

__version__ = "0.1.0"
