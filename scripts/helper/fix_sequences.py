#!/usr/bin/env python3
"""Realign the event id sequences with the data, e.g. after a bulk import."""

import os
import sys
import logging

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from ellarises.db import Database, reconcile_sequences
from ellarises.utils.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

def main() -> int:
    database = Database()
    try:
        database.check_connection()
        results = reconcile_sequences(database)
    finally:
        database.dispose()

    failed = [table for table, next_id in results.items() if next_id is None]
    for table, next_id in results.items():
        if next_id is not None:
            logger.info(f"{table}: next id {next_id}")
    if failed:
        logger.error(f"Could not reconcile: {', '.join(failed)}")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
