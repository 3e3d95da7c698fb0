"""Utilities for logging to a central log workspace."""
import logging
from typing import Optional

from opencensus.ext.azure.log_exporter import AzureLogHandler

from dataportal.settings import get_settings


class CustomDimensionsFilter(logging.Filter):
    """Add application-wide properties to AzureLogHandler records."""

    def __init__(self, custom_dimensions: Optional[dict] = None) -> None:
        """Initialize the filter with the given custom_dimensions."""
        super().__init__()
        self.custom_dimensions = custom_dimensions or {}

    def filter(self, record: logging.LogRecord) -> bool:
        """Adds the default custom_dimensions to the current log record."""
        custom_dimensions = self.custom_dimensions.copy()
        custom_dimensions.update(getattr(record, "custom_dimensions", {}))
        record.custom_dimensions = custom_dimensions  # type: ignore

        return True


def set_log_handler(name: str = "dataportal") -> Optional[logging.Handler]:
    """Adds an Azure log handler to the logger with provided name.

    The log data is sent to the Application Insights instance associated
    with the connection string in settings. Nothing is added if no
    connection string is set.

    Args:
        name: Name of the logger instance to which we add the log handler.

    Returns:
        The handler that was added, if any.
    """
    settings = get_settings()
    if not settings.central_logging_connection_string:
        return None

    logger = logging.getLogger(name)
    handler = AzureLogHandler(
        connection_string=settings.central_logging_connection_string
    )
    handler.addFilter(CustomDimensionsFilter({"logger_name": "logger_dataportal"}))
    logger.addHandler(handler)
    return handler
