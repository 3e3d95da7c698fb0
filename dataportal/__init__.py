"""An API for the web portal's data explorer and page connections."""

from dataportal.main import app

__all__ = ["app"]
