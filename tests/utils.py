"""Test helper functions."""
from typing import Any
from unittest.mock import MagicMock

from sqlalchemy.dialects import postgresql
from sqlalchemy.sql import ClauseElement


def compile_sql(statement: ClauseElement) -> str:
    """Render a statement as PostgreSQL, on one line, with its parameters inlined."""
    compiled = statement.compile(
        dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
    )
    return " ".join(str(compiled).split())


def make_engine(conn: Any) -> MagicMock:
    """An engine whose connect() context manager yields conn."""
    engine = MagicMock()
    engine.connect.return_value.__aenter__.return_value = conn
    engine.connect.return_value.__aexit__.return_value = False
    return engine


def make_result(first: Any = None, rows: Any = None) -> MagicMock:
    """A query result with mappings().first() and mappings().all()."""
    result = MagicMock()
    result.mappings.return_value.first.return_value = first
    result.mappings.return_value.all.return_value = rows or []
    return result
