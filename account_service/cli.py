"""Admin bootstrap command.

No HTTP route grants the admin role to an unauthenticated caller, so the
first admin account is created from the command line.

Usage:
    account-service-admin create --name "Root Admin" --email admin@example.com --password 'S3cure!pass'
    account-service-admin create --name Ops --email ops@example.com --password 'S3cure!pass' --database-url sqlite+aiosqlite:///./accounts.db
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence

from account_service.core.config import settings
from account_service.core.exceptions import AppError
from account_service.core.logging import LogContext, get_logger, setup_logging
from account_service.db.session import Database
from account_service.models.enums import UserRole
from account_service.models.user import User
from account_service.services.auth_service import AuthService

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="account-service-admin",
        description="Administrative commands for the account service.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  account-service-admin create --name "Root Admin" --email admin@example.com --password 'S3cure!pass'
""",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    create = subcommands.add_parser(
        "create",
        help="Create an admin account with its email already verified.",
    )
    create.add_argument("--name", required=True, help="Display name (2-50 characters).")
    create.add_argument("--email", required=True, help="Login email of the admin.")
    create.add_argument(
        "--password",
        required=True,
        help="Password: 8+ chars with upper, lower, digit and special character.",
    )
    create.add_argument(
        "--database-url",
        default=None,
        help="Database URL. Defaults to DATABASE_URL from the environment.",
    )
    create.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before inserting (local SQLite setups).",
    )
    return parser


async def create_admin(
    database: Database,
    name: str,
    email: str,
    password: str,
) -> User:
    """Insert a verified admin account.

    Raises:
        ValidationError: If a field is malformed
        DuplicateEmailError: If the email is already registered
    """
    async with database.session() as session:
        result = await AuthService(session).register(
            name,
            email,
            password,
            role=UserRole.ADMIN,
            verified=True,
        )
        return result.user


async def _run_create(args: argparse.Namespace) -> User:
    database = Database(args.database_url or settings.DATABASE_URL)
    try:
        if args.create_tables:
            await database.create_all()
        return await create_admin(database, args.name, args.email, args.password)
    finally:
        await database.dispose()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of ``account-service-admin``. Returns the exit status."""
    args = build_parser().parse_args(argv)

    setup_logging(
        log_level=settings.LOG_LEVEL,
        log_file=settings.LOG_FILE,
        enable_json=settings.LOG_JSON_FORMAT,
        debug=settings.DEBUG,
    )

    with LogContext(command=args.command):
        try:
            user = asyncio.run(_run_create(args))
        except AppError as e:
            logger.error(
                "Admin creation failed",
                extra={"context": {"action": "create_admin", "error": e.error}},
            )
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

    print(f"Created admin {user.email} (id {user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
