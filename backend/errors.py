# errors.py
"""Exceptions raised by the dashboard backend."""


class DashboardError(Exception):
    """Base class for every dashboard error."""


class IngestionError(DashboardError):
    """The appointment sheet could not be fetched."""


class ConfigurationError(DashboardError):
    """Invalid LLM provider or missing credentials."""


class AssistantError(DashboardError):
    """The text-generation provider failed or returned nothing."""
