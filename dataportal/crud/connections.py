"""Store Facebook page connections submitted through the connect flow."""

import json
import logging
from typing import Any, Dict, Optional

import pydantic
from sqlalchemy import delete, insert

from dataportal.constants import DEFAULT_CONNECTION_TYPE
from dataportal.crud.models import CREATE_PAGE_CONNECTIONS, page_connections
from dataportal.crud.schema import (
    ConnectionSubmission,
    PageError,
    PageInput,
    SaveResult,
    submitted_page_id,
)
from dataportal.db import AsyncConnection

logger = logging.getLogger(__name__)


async def ensure_connections_table(conn: AsyncConnection) -> None:
    """Create the page connections table if it doesn't exist yet."""
    await conn.execute(CREATE_PAGE_CONNECTIONS)


def _or_none(value: Optional[str]) -> Optional[str]:
    """Store empty strings as NULL."""
    return value or None


def describe_invalid_page(exc: ValueError) -> str:
    """A one-line reason for rejecting a page.

    e.g. "Invalid page: name: Input should be a valid string"
    """
    if isinstance(exc, pydantic.ValidationError):
        reasons = "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        return f"Invalid page: {reasons}"
    return f"Invalid page: {exc}"


def connection_values(
    submission: ConnectionSubmission, page: PageInput
) -> Dict[str, Any]:
    """The row to insert for one page of a submission.

    connected_at and status are left to their column defaults.
    """
    return {
        "user_name": _or_none(submission.user_name),
        "user_email": _or_none(submission.user_email),
        "user_token": _or_none(submission.user_token),
        "page_id": page.id,
        "page_name": _or_none(page.name),
        "page_token": _or_none(page.access_token),
        "page_category": _or_none(page.category),
        "tasks": json.dumps(page.tasks or []),
        "connection_type": submission.type or DEFAULT_CONNECTION_TYPE,
    }


async def save_page(
    conn: AsyncConnection, submission: ConnectionSubmission, page: PageInput
) -> None:
    """Replace whatever is stored for a page with this submission's values."""
    await conn.execute(
        delete(page_connections).where(page_connections.c.page_id == page.id)
    )
    await conn.execute(
        insert(page_connections).values(connection_values(submission, page))
    )


async def save_connections(
    conn: AsyncConnection, submission: ConnectionSubmission
) -> SaveResult:
    """Save every page of a submission, one at a time.

    A page that fails is recorded in the result's errors and
    the remaining pages are still saved.
    """
    result = SaveResult()

    for raw in submission.pages:
        try:
            page = PageInput.from_submitted(raw)
        except ValueError as exc:
            result.errors.append(
                PageError(
                    page_id=submitted_page_id(raw), error=describe_invalid_page(exc)
                )
            )
            continue

        if not page.id:
            result.errors.append(PageError(page_id=page.id, error="Page id is required"))
            continue
        try:
            await save_page(conn, submission, page)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Could not save page %s: %s", page.id, exc)
            result.errors.append(PageError(page_id=page.id, error=str(exc)))
        else:
            result.saved_count += 1

    logger.info(
        "Saved %d of %d page connections", result.saved_count, len(submission.pages)
    )
    return result
