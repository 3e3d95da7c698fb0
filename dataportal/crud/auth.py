"""User authentication against the portal_users table.

Passwords are compared exactly as stored. Users are provisioned out of
band (see scripts/create_portal_user.py).
"""

import logging
from typing import Any, Optional

from sqlalchemy import func, select, true, update

from dataportal.crud.models import portal_users
from dataportal.crud.schema import PortalUser
from dataportal.db import AsyncConnection
from dataportal.exceptions import (
    AuthRequired,
    InvalidCredentials,
    SessionInvalid,
    ValidationError,
)

logger = logging.getLogger(__name__)

USER_COLUMNS = (
    portal_users.c.id,
    portal_users.c.username,
    portal_users.c.full_name,
    portal_users.c.role,
)


def normalise_username(username: str) -> str:
    """Usernames are matched trimmed and lowercase."""
    return username.strip().lower()


async def login(conn: AsyncConnection, username: Any, password: Any) -> PortalUser:
    """Check a username and password and record the login.

    Args:
        conn: A warehouse connection.
        username: The username, in any case and with any padding.
        password: The password, which must match exactly.

    Returns:
        The matching user.

    Raises:
        ValidationError: If either the username or the password is missing.
        InvalidCredentials: If no active user has that username and password.
    """
    if not username or not password:
        raise ValidationError("Username and password required")

    statement = select(*USER_COLUMNS).where(
        portal_users.c.username == normalise_username(str(username)),
        portal_users.c.password == str(password),
        portal_users.c.is_active == true(),
    )
    result = await conn.execute(statement)
    row = result.mappings().first()
    if row is None:
        raise InvalidCredentials()

    user = PortalUser(**row)
    await conn.execute(
        update(portal_users)
        .where(portal_users.c.id == user.id)
        .values(last_login=func.getdate())
    )
    logger.info("User %s logged in", user.username)
    return user


async def authorize(conn: AsyncConnection, user_id: Optional[Any]) -> PortalUser:
    """Get the active user with this id.

    Raises:
        AuthRequired: If there is no user id.
        SessionInvalid: If the id doesn't belong to an active user.
    """
    if user_id is None or user_id == "":
        raise AuthRequired()

    # JSON true would otherwise be user 1 and 7.9 would be user 7
    if isinstance(user_id, bool) or (
        isinstance(user_id, float) and not user_id.is_integer()
    ):
        raise SessionInvalid()

    try:
        user_id = int(user_id)
    except (TypeError, ValueError) as exc:
        raise SessionInvalid() from exc

    statement = select(*USER_COLUMNS).where(
        portal_users.c.id == user_id,
        portal_users.c.is_active == true(),
    )
    result = await conn.execute(statement)
    row = result.mappings().first()
    if row is None:
        raise SessionInvalid()

    return PortalUser(**row)
