"""CLI for the work order service — create tables, manage users."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys

from workorders.config import get_settings


async def cmd_init_db(args):
    """Create all tables."""
    from workorders.db.engine import create_all, engine

    await create_all()
    await engine.dispose()
    print("Database initialised")


async def cmd_create_user(args):
    """Create a user with the given role."""
    from workorders.db import crud
    from workorders.db.engine import async_session_factory, create_all, engine
    from workorders.services.auth import hash_password

    await create_all()

    password = args.password
    if not password:
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match")
            sys.exit(1)

    if len(password) < 8:
        print("Password must be at least 8 characters")
        sys.exit(1)

    async with async_session_factory() as db:
        if await crud.get_user_by_email(db, args.email):
            print(f"User {args.email} already exists")
            sys.exit(1)
        user = await crud.create_user(
            db, email=args.email, password_hash=hash_password(password),
            role=args.role, display_name=args.display_name,
        )

    await engine.dispose()
    print(f"User created: {user.email} (id={user.id}, role={user.role})")


def main():
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Work order service CLI")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Create database tables")

    cu = subparsers.add_parser("create-user", help="Create a user")
    cu.add_argument("--email", required=True, help="Login email")
    cu.add_argument("--role", choices=["admin", "staff", "client"], default="staff")
    cu.add_argument("--password", default="", help="Password (prompted if not given)")
    cu.add_argument("--display-name", default="", help="Display name")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "init-db":
        asyncio.run(cmd_init_db(args))
    elif args.command == "create-user":
        asyncio.run(cmd_create_user(args))


if __name__ == "__main__":
    main()
