"""Add a user to, or replace a user in, the portal_users table.

The API has no self-registration, so portal users are created with this
script. Connection details are read from the same environment variables
(or .env file) as the API.

Example:
    python scripts/create_portal_user.py alice --full-name "Alice Smith" --role admin
"""

import argparse
import asyncio
import getpass

from sqlalchemy import delete, insert

from dataportal.crud.auth import normalise_username
from dataportal.crud.models import CREATE_PORTAL_USERS, portal_users
from dataportal.db import ENGINE


def get_args() -> argparse.Namespace:
    """Parse the command line arguments."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("username", help="Login name. Stored trimmed and lowercase.")
    parser.add_argument("--full-name", default=None, help="Display name.")
    parser.add_argument("--role", default="viewer", help="Role shown in the portal.")
    parser.add_argument(
        "--inactive", action="store_true", help="Create the user without access."
    )
    return parser.parse_args()


async def create_user(
    username: str, password: str, full_name: str, role: str, is_active: bool
) -> None:
    """Create the table if needed, then replace any user with this username."""
    username = normalise_username(username)
    async with ENGINE.connect() as conn:
        await conn.execute(CREATE_PORTAL_USERS)
        await conn.execute(
            delete(portal_users).where(portal_users.c.username == username)
        )
        await conn.execute(
            insert(portal_users).values(
                username=username,
                password=password,
                full_name=full_name,
                role=role,
                is_active=is_active,
            )
        )
    await ENGINE.dispose()
    print(f"User {username} saved.")


def main() -> None:
    """Prompt for a password and save the user."""
    args = get_args()
    password = getpass.getpass("Password: ")
    if not password:
        raise SystemExit("A password is required.")
    asyncio.run(
        create_user(args.username, password, args.full_name, args.role, not args.inactive)
    )


if __name__ == "__main__":
    main()
