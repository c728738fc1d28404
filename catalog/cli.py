"""
Pipe Catalog CLI.

Operational commands for the database and the cache:

    pipe-catalog init-db
    pipe-catalog create-admin admin@example.org --name "Shop Owner"
    pipe-catalog cache-status
    pipe-catalog invalidate pipe --id 3f2a...
"""

import argparse
import getpass
import json
import sys

from catalog.cache import CacheKeys, RedisCache
from catalog.config import get_settings
from catalog.constants import ItemType
from catalog.db import db
from catalog.logging import configure_logging, get_logger
from catalog.repositories import UserRepository
from catalog.security import hash_password

logger = get_logger("cli")


def cmd_init_db(args: argparse.Namespace) -> int:
    db.initialize()
    db.create_all_tables()
    print("Database tables created.")
    return 0


def cmd_create_admin(args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must be at least 8 characters.", file=sys.stderr)
        return 1

    db.initialize()
    db.create_all_tables()
    with db.session() as session:
        users = UserRepository(session)
        if users.get_by_email(args.email):
            print(f"User {args.email} already exists.", file=sys.stderr)
            return 1
        user = users.create_user(args.email, hash_password(password), args.name)
        user_id = user.id

    # active_users is part of the cached dashboard stats
    cache = RedisCache(get_settings())
    try:
        cache.delete(CacheKeys.STATS)
    finally:
        cache.close()

    logger.info("admin_created", user_id=user_id)
    print(f"Created admin {args.email} ({user_id}).")
    return 0


def cmd_cache_status(args: argparse.Namespace) -> int:
    cache = RedisCache(get_settings())
    try:
        print(json.dumps(cache.health_check(), indent=2))
    finally:
        cache.close()
    return 0


def cmd_invalidate(args: argparse.Namespace) -> int:
    cache = RedisCache(get_settings())
    try:
        cache.invalidate_entity(ItemType(args.item_type), args.id)
    finally:
        cache.close()
    print(f"Invalidated cache for {args.item_type}{f' {args.id}' if args.id else ''}.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pipe-catalog", description="Pipe Catalog administration")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables").set_defaults(func=cmd_init_db)

    admin_parser = subparsers.add_parser("create-admin", help="Create an admin user")
    admin_parser.add_argument("email")
    admin_parser.add_argument("--name", default=None)
    admin_parser.add_argument("--password", default=None, help="Prompted for when omitted")
    admin_parser.set_defaults(func=cmd_create_admin)

    subparsers.add_parser("cache-status", help="Show cache status").set_defaults(func=cmd_cache_status)

    invalidate_parser = subparsers.add_parser("invalidate", help="Invalidate cached entries of an item type")
    invalidate_parser.add_argument("item_type", choices=[t.value for t in ItemType])
    invalidate_parser.add_argument("--id", default=None, help="Also drop this item's detail entry")
    invalidate_parser.set_defaults(func=cmd_invalidate)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging(level="DEBUG" if get_settings().debug else "INFO")
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
