#!/usr/bin/env python3
"""Apply a SQL schema file to the local SQLite database and optionally seed a dev user."""

import argparse
import logging
import sys
from pathlib import Path

from localbase.config import get_settings
from localbase.db.client import create_local_client
from localbase.observability import setup_logging

logger = logging.getLogger("init_local_db")


def init_local_db(schema_file: str, dev_username: str | None = None) -> bool:
    """Run schema_file against the configured local store."""
    path = Path(schema_file)
    if not path.exists():
        logger.error(f"Schema file not found: {schema_file}")
        return False

    client = create_local_client()
    try:
        logger.info(f"Applying {path.name} to {get_settings().local_db_path}")
        client.store.executescript(path.read_text())

        if dev_username:
            result = client.table("users").insert({"username": dev_username}).execute()
            if result.error:
                logger.error(f"Could not create dev user: {result.error.message}")
                return False
            logger.info(f"Created dev user {dev_username} ({result.data['id']})")
    finally:
        client.store.close()

    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("schema_file", help="SQL file with CREATE TABLE statements")
    parser.add_argument("--dev-user", help="Username of a dev user to insert")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(verbose=args.verbose)
    sys.exit(0 if init_local_db(args.schema_file, args.dev_user) else 1)
