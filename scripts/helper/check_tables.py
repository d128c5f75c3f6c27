#!/usr/bin/env python3
"""List the tables in the database and check that the expected ones exist."""

import os
import sys
import logging

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from sqlalchemy import inspect

from ellarises.db import Database, DatabaseError
from ellarises.models import Base

# Set up logging
logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)

def check_tables() -> bool:
    """Returns True when every table the application uses is present."""
    database = Database()
    try:
        found = sorted(inspect(database.engine).get_table_names())
    except Exception as e:
        logger.error(f"Error: {e}")
        return False
    finally:
        database.dispose()

    logger.info("Tables found in database:")
    if found:
        for name in found:
            logger.info(f"  - {name}")
    else:
        logger.info("  No tables found!")

    # Identifiers may have been created quoted in mixed case
    present = {name.lower() for name in found}
    missing = []
    logger.info("\nChecking expected tables:")
    for name in sorted(Base.metadata.tables):
        if name in present:
            logger.info(f"  ✓ {name} exists")
        else:
            logger.info(f"  ✗ {name} does not exist")
            missing.append(name)

    return not missing

if __name__ == "__main__":
    try:
        ok = check_tables()
    except (ValueError, DatabaseError) as e:
        logger.error(f"Error: {e}")
        ok = False
    sys.exit(0 if ok else 1)
