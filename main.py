#!/usr/bin/env python3
"""
Movie list service -- command line entry point.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py serve --reload
  python main.py create-user alice
  python main.py create-user root --admin

Environment variables (see core/config.py for the full list):
  JWT_SECRET      Token signing secret, at least 32 characters. Required
                  unless DEBUG=true.
  USERS_DB_URL    SQLAlchemy URL of the users database.
  MOVIES_DB_URL   SQLAlchemy URL of the movies database.
  REDIS_URL       Session store, e.g. redis://localhost:6379.
  BCRYPT_ROUNDS   Password hashing cost factor (default 8).
"""

import argparse
import getpass
import sys

from core.config import get_settings
from core.log import configure_logging


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "asgi:app",
        host=args.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _create_user(args: argparse.Namespace) -> int:
    """Create a user straight in the users database, bypassing the API.

    This is how the first admin is made when ADMIN_USERNAME/ADMIN_PASSWORD
    are not used.
    """
    from sqlalchemy.exc import IntegrityError

    from api.models import UserCredentials
    from auth.store import UserStore
    from auth.tokens import hash_password

    settings = get_settings()
    configure_logging(settings)

    password = getpass.getpass(f"Password for {args.username}: ")
    if password != getpass.getpass("Repeat password: "):
        print("  [!] Passwords do not match.")
        return 1

    try:
        creds = UserCredentials(username=args.username, password=password)
    except ValueError as e:
        print(f"  [!] {e}")
        return 1

    store = UserStore(settings.users_db_url)
    try:
        store.create_user(creds.username, hash_password(creds.password), is_admin=args.admin)
    except IntegrityError:
        print(f"  [!] User '{creds.username}' already exists.")
        return 1
    finally:
        store.close()

    role = "admin" if args.admin else "user"
    print(f"  Created {role} '{creds.username}'.")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="movielist",
        description="Authenticated movie catalog service.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=0, help="Port (default: PORT setting, 3000)")
    serve.add_argument("--reload", action="store_true", help="Restart on code changes (development)")
    serve.set_defaults(func=_serve)

    create = sub.add_parser("create-user", help="Create a user in the users database")
    create.add_argument("username", help="Alphanumeric, 3-30 characters")
    create.add_argument("--admin", action="store_true", help="Grant the admin role")
    create.set_defaults(func=_create_user)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        return
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
