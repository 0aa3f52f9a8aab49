"""Storefront database management CLI.

Creates and drops relational tables when a SQL database provider is
configured; the default memory provider needs neither.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py purge-carts [--as-of 2026-01-31T00:00:00]   # Delete expired carts
"""

import argparse
import sys


def setup_database():
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Creating storefront database schema...")
    setup_db(storefront)
    print("Done.")


def drop_database():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping storefront database schema...")
    drop_db(storefront)
    print("Done.")


def purge_carts(domain, as_of=None):
    """Delete expired carts in an initialized domain; returns the count removed."""
    from storefront.cart.management import PurgeExpiredCarts

    with domain.domain_context():
        return domain.process(PurgeExpiredCarts(as_of=as_of), asynchronous=False)


def purge_expired_carts(as_of=None):
    from storefront.domain import storefront
    from storefront.shared.clock import parse_timestamp

    print("Initializing storefront domain...")
    storefront.init()
    removed = purge_carts(storefront, parse_timestamp(as_of))
    print(f"Removed {removed} expired cart(s).")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create database tables")
    subparsers.add_parser("drop-db", help="Drop database tables")
    purge_parser = subparsers.add_parser("purge-carts", help="Delete expired shopping carts")
    purge_parser.add_argument("--as-of", help="ISO timestamp to measure expiry against (default: now)")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "purge-carts":
        purge_expired_carts(args.as_of)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
