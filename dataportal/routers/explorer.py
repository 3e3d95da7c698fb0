"""The data explorer: login, then browse the allowlisted warehouse tables."""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import APIRouter, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from dataportal.allowlist import ALLOWED_TABLES, AllowlistEntry, find_table
from dataportal.constants import DEFAULT_PAGE_SIZE, MAX_EXPORT_ROWS, MAX_PAGE_SIZE
from dataportal.crud import warehouse
from dataportal.crud.auth import authorize, login
from dataportal.crud.schema import BrowsePage, TableExport, TableSummary
from dataportal.db import ENGINE, AsyncConnection
from dataportal.exceptions import Forbidden, InternalError, PortalError, UnknownAction
from dataportal.routers.utils import finite_or_none, parse_json_body

logger = logging.getLogger(__name__)

router = APIRouter()

PREFIX = "/data-explorer"


def require_table(schema: Any, table: Any) -> AllowlistEntry:
    """Get the allowlist entry for a table or raise a 403."""
    entry = find_table(schema, table)
    if entry is None:
        raise Forbidden()
    return entry


def _positive_int(value: Any, default: int) -> int:
    """Coerce a paging parameter, falling back to default if it isn't a positive int."""
    try:
        value = int(value)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


async def list_tables(conn: AsyncConnection) -> List[TableSummary]:
    """Get the size and columns of every allowlisted table.

    A table that can't be read is reported as not existing
    rather than failing the whole listing.
    """
    tables = []
    for entry in ALLOWED_TABLES:
        try:
            row_count = await warehouse.count_rows(conn, entry)
            columns = await warehouse.get_columns(conn, entry)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Could not read %s.%s: %s", entry.schema, entry.table, exc)
            tables.append(
                TableSummary(
                    schema_name=entry.schema,
                    table=entry.table,
                    label=entry.label,
                    description=entry.description,
                    row_count=0,
                    columns=[],
                    exists=False,
                )
            )
            continue

        tables.append(
            TableSummary(
                schema_name=entry.schema,
                table=entry.table,
                label=entry.label,
                description=entry.description,
                row_count=row_count,
                columns=columns,
            )
        )
    return tables


async def browse(
    conn: AsyncConnection,
    schema: Any,
    table: Any,
    page: Any = 1,
    page_size: Any = DEFAULT_PAGE_SIZE,
    sort_by: Optional[str] = None,
    sort_dir: Optional[str] = "desc",
) -> BrowsePage:
    """Get one page of an allowlisted table's rows.

    Args:
        conn: A warehouse connection.
        schema: The table's schema.
        table: The table's name.
        page: The page number, starting at 1.
        page_size: Rows per page, capped at MAX_PAGE_SIZE.
        sort_by: A column to sort on. Ignored unless the table has it.
        sort_dir: "asc" for ascending, anything else for descending.

    Raises:
        Forbidden: If the table isn't on the allowlist.
    """
    entry = require_table(schema, table)

    page = _positive_int(page, 1)
    limit = min(_positive_int(page_size, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
    offset = (page - 1) * limit

    columns = await warehouse.get_columns(conn, entry)
    order_by = warehouse.resolve_order(columns, sort_by, sort_dir)

    total = await warehouse.count_rows(conn, entry)
    rows = await warehouse.fetch_rows(
        conn, warehouse.rows_query(entry, order_by, limit, offset)
    )

    return BrowsePage(
        schema_name=entry.schema,
        table=entry.table,
        label=entry.label,
        description=entry.description,
        columns=columns,
        rows=rows,
        total=total,
        page=page,
        page_size=limit,
        total_pages=math.ceil(total / limit),
    )


async def export(conn: AsyncConnection, schema: Any, table: Any) -> TableExport:
    """Get all of an allowlisted table's rows, up to MAX_EXPORT_ROWS.

    Raises:
        Forbidden: If the table isn't on the allowlist.
    """
    entry = require_table(schema, table)

    columns = await warehouse.get_columns(conn, entry)
    rows = await warehouse.fetch_rows(
        conn,
        warehouse.rows_query(entry, warehouse.default_order(columns), MAX_EXPORT_ROWS),
    )

    return TableExport(
        schema_name=entry.schema,
        table=entry.table,
        label=entry.label,
        columns=[c.name for c in columns],
        rows=rows,
        exported_at=datetime.now(timezone.utc),
    )


async def _list_tables_action(conn: AsyncConnection, payload: Dict) -> Dict[str, Any]:
    tables = await list_tables(conn)
    return {
        "tables": [
            t.model_dump(by_alias=True, exclude_none=True) for t in tables
        ]
    }


async def _browse_action(conn: AsyncConnection, payload: Dict) -> Dict[str, Any]:
    result = await browse(
        conn,
        payload.get("schema"),
        payload.get("table"),
        page=payload.get("page", 1),
        page_size=payload.get("page_size", DEFAULT_PAGE_SIZE),
        sort_by=payload.get("sort_by"),
        sort_dir=payload.get("sort_dir", "desc"),
    )
    return result.model_dump(by_alias=True)


async def _export_action(conn: AsyncConnection, payload: Dict) -> Dict[str, Any]:
    result = await export(conn, payload.get("schema"), payload.get("table"))
    return result.model_dump(by_alias=True)


ACTIONS: Dict[str, Callable[[AsyncConnection, Dict], Awaitable[Dict[str, Any]]]] = {
    "list_tables": _list_tables_action,
    "browse": _browse_action,
    "export": _export_action,
}


async def handle_action(conn: AsyncConnection, payload: Dict) -> Dict[str, Any]:
    """Run a data explorer action and return the response body."""
    action = payload.get("action")

    if action == "login":
        user = await login(conn, payload.get("username"), payload.get("password"))
        return {"success": True, "user": user.model_dump()}

    # Every other action needs a valid session
    await authorize(conn, payload.get("user_id"))

    handler = ACTIONS.get(action) if isinstance(action, str) else None
    if handler is None:
        raise UnknownAction()

    return {"success": True, **await handler(conn, payload)}


@router.options(PREFIX, include_in_schema=False)
async def data_explorer_options() -> Response:
    """CORS preflight."""
    return Response(status_code=204)


@router.post(PREFIX)
async def data_explorer(request: Request) -> JSONResponse:
    """Log in, list the allowlisted tables, browse or export one of them."""
    payload = await parse_json_body(request)

    try:
        async with ENGINE.connect() as conn:
            body = await handle_action(conn, payload)
        # Rendered here so encoding errors are reported like any other
        return JSONResponse(content=finite_or_none(jsonable_encoder(body)))
    except PortalError:
        raise
    except Exception as exc:
        logger.exception("Data explorer error")
        raise InternalError(detail=str(exc)) from exc
