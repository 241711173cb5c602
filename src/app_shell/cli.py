import argparse
import logging
import sys
from datetime import timedelta

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.uow import SQLiteUnitOfWorkFactory
from src.api.auth_utils import ACCESS_TOKEN_EXPIRE_MINUTES, create_access_token
from src.api.deps import Settings
from src.core.ports.db import UniqueViolationError
from src.domain.entities import User

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}.")


def handle_create_user(settings: Settings, args: argparse.Namespace) -> None:
    uow_factory = SQLiteUnitOfWorkFactory(settings.db_path, timeout=settings.db_timeout)
    user = User(email=args.email, name=args.name, role=args.role)
    try:
        with uow_factory() as uow:
            if uow.users.get_by_email(args.email):
                logger.error("User %s already exists.", args.email)
                sys.exit(1)
            uow.users.save(user)
    except UniqueViolationError:
        logger.error("User %s already exists.", args.email)
        sys.exit(1)

    print(f"User created: {user.email} ({user.role})")
    print(f"Id: {user.id}")


def handle_token(settings: Settings, args: argparse.Namespace) -> None:
    uow_factory = SQLiteUnitOfWorkFactory(settings.db_path, timeout=settings.db_timeout)
    with uow_factory(read_only=True) as uow:
        user = uow.users.get_by_email(args.email)
    if not user:
        logger.error("User %s not found.", args.email)
        sys.exit(1)

    token = create_access_token({"sub": str(user.id)}, expires_delta=timedelta(minutes=args.minutes))
    print(token)


def main() -> None:
    parser = argparse.ArgumentParser(description="Inkwell CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # create-user
    user_parser = subparsers.add_parser("create-user", help="Create a local user")
    user_parser.add_argument("email", help="Email address")
    user_parser.add_argument("--name", default=None, help="Display name")
    user_parser.add_argument(
        "--role", choices=["READER", "AUTHOR", "ADMIN"], default="READER", help="Role to assign"
    )

    # token
    token_parser = subparsers.add_parser("token", help="Issue a bearer token for a user")
    token_parser.add_argument("email", help="Email of an existing user")
    token_parser.add_argument(
        "--minutes", type=int, default=ACCESS_TOKEN_EXPIRE_MINUTES, help="Token lifetime"
    )

    args = parser.parse_args()
    settings = Settings()

    if args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "create-user":
        handle_create_user(settings, args)
    elif args.command == "token":
        handle_token(settings, args)


if __name__ == "__main__":
    main()
