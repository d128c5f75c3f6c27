#!/usr/bin/env python3
"""Create the tables if needed and make sure the Admin, Volunteer and Participant roles exist."""

import os
import sys
import logging

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from ellarises.admin.people import seed_roles
from ellarises.db import Database, DatabaseError, execute_in_transaction
from ellarises.utils.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

def main() -> int:
    database = Database()
    try:
        database.ensure_tables_exist()
        names = execute_in_transaction(database, lambda session: [role.name for role in seed_roles(session)])
    except DatabaseError as e:
        logger.error(f"Seeding failed: {e}")
        return 1
    finally:
        database.dispose()

    logger.info(f"Roles present: {', '.join(names)}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
