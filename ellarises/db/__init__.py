"""Database package initialization.

This module exposes the public interface of the database package.
"""

from .db_core import (
    Database,
    DatabaseConfig,
    DatabaseError,
    ConnectionError,
    SessionError,
)
from .operations import with_retry, execute_in_transaction
from .sequences import reconcile_sequences, RECONCILED_SEQUENCES

__all__ = [
    # Core database classes
    'Database',
    'DatabaseConfig',

    # Exceptions
    'DatabaseError',
    'ConnectionError',
    'SessionError',

    # Utilities
    'with_retry',
    'execute_in_transaction',
    'reconcile_sequences',
    'RECONCILED_SEQUENCES',
]
