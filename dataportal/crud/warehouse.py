"""Queries over the allowlisted warehouse tables.

Every function takes an AllowlistEntry rather than raw names, so the
identifiers in the generated SQL are always ones we chose.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import column, func, literal_column, select
from sqlalchemy.sql import ColumnElement, Select

from dataportal.allowlist import AllowlistEntry
from dataportal.crud.models import information_schema_columns
from dataportal.crud.schema import ColumnInfo
from dataportal.db import AsyncConnection


def count_query(entry: AllowlistEntry) -> Select:
    """Returns the number of rows in a table."""
    return select(func.count().label("cnt")).select_from(entry.table_clause)


def columns_query(entry: AllowlistEntry) -> Select:
    """Returns a table's columns in their physical order."""
    cols = information_schema_columns.c
    return (
        select(cols.column_name, cols.data_type)
        .where(cols.table_schema == entry.schema, cols.table_name == entry.table)
        .order_by(cols.ordinal_position)
    )


def default_order(columns: List[ColumnInfo]) -> ColumnElement:
    """The first physical column, descending."""
    if columns:
        return column(columns[0].name).desc()
    return literal_column("1").desc()


def resolve_order(
    columns: List[ColumnInfo], sort_by: Optional[str], sort_dir: Optional[str]
) -> ColumnElement:
    """Order by sort_by if it names a real column, else by the default order."""
    if sort_by and any(c.name == sort_by for c in columns):
        sort_column = column(sort_by)
        return sort_column.asc() if sort_dir == "asc" else sort_column.desc()
    return default_order(columns)


def rows_query(
    entry: AllowlistEntry,
    order_by: ColumnElement,
    limit: int,
    offset: Optional[int] = None,
) -> Select:
    """Returns a slice of a table's rows."""
    query = (
        select(literal_column("*"))
        .select_from(entry.table_clause)
        .order_by(order_by)
        .limit(limit)
    )
    # No OFFSET clause for the first page
    if offset:
        query = query.offset(offset)
    return query


async def count_rows(conn: AsyncConnection, entry: AllowlistEntry) -> int:
    """Count the rows in a table."""
    return int(await conn.scalar(count_query(entry)) or 0)


async def get_columns(conn: AsyncConnection, entry: AllowlistEntry) -> List[ColumnInfo]:
    """Get the names and types of a table's columns."""
    result = await conn.execute(columns_query(entry))
    return [
        ColumnInfo(name=row["column_name"], type=row["data_type"])
        for row in result.mappings().all()
    ]


async def fetch_rows(conn: AsyncConnection, query: Select) -> List[Dict[str, Any]]:
    """Run a rows query and return each row as a dict."""
    result = await conn.execute(query)
    return [dict(row) for row in result.mappings().all()]
