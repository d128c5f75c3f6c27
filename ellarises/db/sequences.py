"""Sequence reconciliation.

Rows inserted with explicit ids (bulk loads, manual SQL) bypass the id
generator, which then hands out ids that already exist. ``reconcile_sequences``
moves each generator to ``max(id) + 1`` without ever moving it backwards, so
running it again is a no-op. It runs once at startup and from
``scripts/helper/fix_sequences.py``.
"""

import logging
from typing import Dict, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Connection

from .db_core import Database

logger = logging.getLogger(__name__)

# (table, primary key column) pairs whose generators are realigned
RECONCILED_SEQUENCES: Tuple[Tuple[str, str], ...] = (
    ('eventtemplate', 'eventtemplateid'),
    ('eventoccurrences', 'eventoccurrenceid'),
)

def _max_id(conn: Connection, table: str, column: str) -> int:
    return int(conn.execute(text(f"SELECT COALESCE(MAX({column}), 0) FROM {table}")).scalar() or 0)

def _reconcile_postgresql(conn: Connection, table: str, column: str) -> Optional[int]:
    sequence = conn.execute(
        text("SELECT pg_get_serial_sequence(:table, :column)"),
        {"table": table, "column": column},
    ).scalar()
    if not sequence:
        logger.warning(f"No sequence owns {table}.{column}; skipping")
        return None

    # The sequence name comes from the catalog, already quoted where needed
    last_value, is_called = conn.execute(text(f"SELECT last_value, is_called FROM {sequence}")).one()
    current_next = last_value + 1 if is_called else last_value
    target = _max_id(conn, table, column) + 1

    if target <= current_next:
        return current_next

    conn.execute(
        text("SELECT setval(:sequence, :value, false)"),
        {"sequence": sequence, "value": target},
    )
    logger.info(f"Moved {sequence} from {current_next} to {target}")
    return target

def _reconcile_sqlite(conn: Connection, table: str, column: str) -> Optional[int]:
    target = _max_id(conn, table, column) + 1

    has_sequence_table = conn.execute(
        text("SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'sqlite_sequence'")
    ).scalar()
    if not has_sequence_table:
        # Plain rowid tables already allocate max(rowid) + 1
        return target

    seq = conn.execute(
        text("SELECT seq FROM sqlite_sequence WHERE name = :table"),
        {"table": table},
    ).scalar()
    current_next = (seq or 0) + 1

    if target <= current_next:
        return current_next

    if seq is None:
        conn.execute(
            text("INSERT INTO sqlite_sequence (name, seq) VALUES (:table, :seq)"),
            {"table": table, "seq": target - 1},
        )
    else:
        conn.execute(
            text("UPDATE sqlite_sequence SET seq = :seq WHERE name = :table"),
            {"table": table, "seq": target - 1},
        )
    logger.info(f"Moved sqlite_sequence for {table} from {current_next} to {target}")
    return target

_RECONCILERS = {
    'postgresql': _reconcile_postgresql,
    'sqlite': _reconcile_sqlite,
}

def reconcile_sequence(database: Database, table: str, column: str) -> Optional[int]:
    """
    Realign the id generator of one table.

    Returns:
        The next id the generator will hand out, or None if the table was
        skipped or the reconciliation failed. Failures are logged, never raised.
    """
    reconciler = _RECONCILERS.get(database.dialect_name)
    if reconciler is None:
        logger.warning(f"Sequence reconciliation not supported for dialect '{database.dialect_name}'")
        return None

    try:
        with database.engine.begin() as conn:
            next_value = reconciler(conn, table, column)
        if next_value is not None:
            logger.info(f"✓ {table} sequence reconciled (next id {next_value})")
        return next_value
    except Exception as e:
        logger.error(f"⚠ Error fixing {table} sequence: {e}")
        return None

def reconcile_sequences(database: Database) -> Dict[str, Optional[int]]:
    """Realign every reconciled sequence. Each table is handled independently."""
    return {
        table: reconcile_sequence(database, table, column)
        for table, column in RECONCILED_SEQUENCES
    }
