"""Storefront management CLI.

Usage:
    python src/manage.py setup-db             # Create all tables
    python src/manage.py drop-db              # Drop all tables
    python src/manage.py purge-expired-cart   # Delete cart lines past their expiry
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


def purge_expired_cart():
    """Delete cart lines whose time-to-live has elapsed."""
    from storefront.cart.items import PurgeExpiredCartItems
    from storefront.domain import storefront

    storefront.init()
    with storefront.domain_context():
        count = storefront.process(PurgeExpiredCartItems(), asynchronous=False)
    print(f"Purged {count} expired cart line(s).")


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("purge-expired-cart", help="Delete expired cart lines")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "purge-expired-cart":
        purge_expired_cart()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
