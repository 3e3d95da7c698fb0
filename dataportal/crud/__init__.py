"""The SQLAlchemy models, Pydantic models and database logic."""

from dataportal.crud import models, schema

__all__ = [
    "models",
    "schema",
]
