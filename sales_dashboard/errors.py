from __future__ import annotations

from typing import Optional


class DashboardError(RuntimeError):
    """Base class for failures scoped to a single request."""


class ConfigurationError(DashboardError):
    """Connection parameters are missing or the local config file is malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class CredentialError(DashboardError):
    """Auth material could not be read, or the warehouse rejected it."""


class QueryError(DashboardError):
    """The warehouse rejected or failed the statement."""
