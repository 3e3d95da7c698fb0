"""Pydantic models for the data portal API."""
import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class PortalUser(BaseModel):
    """A portal user, as returned to the frontend."""

    id: int
    username: str
    full_name: Optional[str] = None
    role: Optional[str] = None


class ColumnInfo(BaseModel):
    """A column of a warehouse table, from the system catalogue."""

    name: str
    type: str


class TableSummary(BaseModel):
    """An allowlisted table with its size and layout."""

    schema_name: str = Field(serialization_alias="schema")
    table: str
    label: str
    description: str
    row_count: int
    columns: List[ColumnInfo]
    exists: Optional[bool] = None


class BrowsePage(BaseModel):
    """One page of rows from a table."""

    schema_name: str = Field(serialization_alias="schema")
    table: str
    label: str
    description: str
    columns: List[ColumnInfo]
    rows: List[Dict[str, Any]]
    total: int
    page: int
    page_size: int
    total_pages: int


class TableExport(BaseModel):
    """Every row of a table, up to the export cap."""

    schema_name: str = Field(serialization_alias="schema")
    table: str
    label: str
    columns: List[str]
    rows: List[Dict[str, Any]]
    exported_at: datetime.datetime


class PageInput(BaseModel):
    """A Facebook page that the user has granted access to."""

    id: Optional[str] = None
    name: Optional[str] = None
    access_token: Optional[str] = None
    category: Optional[str] = None
    tasks: Optional[List[Any]] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, value: Any) -> Optional[str]:
        """Page ids are sometimes sent as numbers."""
        if value is None:
            return None
        return str(value)

    @classmethod
    def from_submitted(cls, raw: Any) -> "PageInput":
        """Validate one page of a submission.

        Raises:
            ValueError: If the page isn't an object or a field has the wrong type.
        """
        if not isinstance(raw, dict):
            raise ValueError("Page must be an object")
        return cls(**raw)


def submitted_page_id(raw: Any) -> Optional[str]:
    """The id of a submitted page, whether or not the page is valid."""
    if not isinstance(raw, dict) or raw.get("id") is None:
        return None
    return str(raw["id"])


class ConnectionSubmission(BaseModel):
    """The body of a connection submission.

    Pages are kept as submitted and validated one at a time when saved,
    so one malformed page can't reject the others.
    """

    type: Optional[str] = None
    user_token: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    pages: List[Any]
    code: Optional[str] = None


class PageError(BaseModel):
    """Why a single page couldn't be saved."""

    page_id: Optional[str]
    error: str


class SaveResult(BaseModel):
    """The outcome of saving a submission's pages."""

    saved_count: int = 0
    errors: List[PageError] = []
