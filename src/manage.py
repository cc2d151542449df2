"""Checkout database management CLI.

Creates and drops the SQL schema (orders, order items, processed events)
for the configured providers. Memory providers need no schema.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    from checkout.domain import checkout
    from checkout.utils.db import setup_db

    print("Initializing checkout domain...")
    checkout.init()
    print("Creating checkout database schema...")
    setup_db(checkout)
    print("Done.")


def drop_database():
    from checkout.domain import checkout
    from checkout.utils.db import drop_db

    print("Initializing checkout domain...")
    checkout.init()
    print("Dropping checkout database schema...")
    drop_db(checkout)
    print("Done.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Checkout database management")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("setup-db", help="Create database tables")
    subparsers.add_parser("drop-db", help="Drop database tables")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
