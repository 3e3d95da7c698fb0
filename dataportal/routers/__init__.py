"""The data explorer and connection submission routes."""

from dataportal.routers import connect, explorer

__all__ = ["connect", "explorer"]
