"""
Collector Exceptions

Per-entry decode problems are reported through result objects, not
exceptions. These types cover the failures that end a work cycle.
"""


class CollectorError(Exception):
    """Base class for collector failures."""


class InvalidWorkItemError(CollectorError, ValueError):
    """Work item is malformed or carries invalid scan parameters."""


class QueryError(CollectorError):
    """Node answered the state query with an error."""

    def __init__(self, message: str, code: int = None):
        super().__init__(message)
        self.code = code


class ConfigError(CollectorError):
    """Missing or invalid environment configuration."""
