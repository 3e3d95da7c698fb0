"""Module for database connections."""

import ssl
from typing import Any, Dict, Final

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.ext.asyncio.engine import AsyncConnection
from sqlalchemy.pool import NullPool

from dataportal.settings import Settings, get_settings

__all__ = ["AsyncConnection", "ENGINE", "SUBMISSION_ENGINE", "create_engine"]

SETTINGS: Final = get_settings()


def _connect_args(settings: Settings, query_timeout: float) -> Dict[str, Any]:
    """Keyword arguments for asyncpg.connect()."""
    connect_args: Dict[str, Any] = {
        "timeout": settings.db_connect_timeout,
        "command_timeout": query_timeout,
    }
    if settings.ssl_required:
        # Redshift's certificate is not verified
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = context
    return connect_args


def create_engine(settings: Settings, query_timeout: float) -> AsyncEngine:
    """Create an engine that opens a new connection for every request.

    Statements autocommit, as Redshift has no savepoints to isolate
    a failed statement within a transaction.
    """
    return create_async_engine(
        str(settings.warehouse_dsn),
        poolclass=NullPool,
        isolation_level="AUTOCOMMIT",
        connect_args=_connect_args(settings, query_timeout),
    )


ENGINE: Final = create_engine(SETTINGS, SETTINGS.db_query_timeout)

SUBMISSION_ENGINE: Final = create_engine(SETTINGS, SETTINGS.submission_query_timeout)
