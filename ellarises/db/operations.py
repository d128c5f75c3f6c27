"""Database operations and utilities.

This module provides common database operations and utilities,
including retry logic for transient failures.
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, TypeVar, cast

from sqlalchemy.exc import OperationalError, IntegrityError

from .db_core import Database, DatabaseError, SessionError
from ..errors import BookingError, ConstraintViolation

logger = logging.getLogger(__name__)

# Type variable for generic return type
T = TypeVar('T')

def _is_retryable(error: BaseException, exceptions: tuple) -> bool:
    """Match the error itself or the driver error that a SessionError wraps."""
    return isinstance(error, exceptions) or isinstance(error.__cause__, exceptions)

def with_retry(
    max_attempts: int = 3,
    delay: float = 0.1,
    backoff: float = 2,
    exceptions: tuple = (OperationalError,)
) -> Callable:
    """
    Decorator that implements retry logic for database operations.

    Each attempt must open its own transaction, so decorate functions that
    call ``database.session()`` themselves rather than functions that receive
    an already-open session.

    Args:
        max_attempts: Maximum number of retry attempts
        delay: Initial delay between retries in seconds
        backoff: Multiplier for delay between retries
        exceptions: Tuple of exceptions to catch and retry

    Example:
        @with_retry(max_attempts=3)
        def get_template(database: Database, template_id: int) -> EventTemplate:
            with database.session() as session:
                return session.get(EventTemplate, template_id)
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            last_exception = None
            current_delay = delay

            for attempt in range(max_attempts):
                try:
                    return cast(T, func(*args, **kwargs))
                except BookingError:
                    raise
                except Exception as e:
                    if not _is_retryable(e, exceptions):
                        raise
                    last_exception = e
                    if attempt + 1 == max_attempts:
                        logger.error(
                            f"Final attempt failed for {func.__name__}: {str(e)}"
                        )
                        raise

                    logger.warning(
                        f"Attempt {attempt + 1}/{max_attempts} failed for "
                        f"{func.__name__}: {str(e)}. Retrying in {current_delay}s..."
                    )

                    time.sleep(current_delay)
                    current_delay *= backoff

            # This should never happen due to the raise in the loop
            raise last_exception or DatabaseError("Unknown error in retry logic")

        return wrapper
    return decorator

def execute_in_transaction(database: Database, operation: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """
    Execute a database operation within a transaction with retry logic.

    Args:
        database: Database that provides the session
        operation: Callable that receives the session as its first argument
        *args: Positional arguments to pass to the operation
        **kwargs: Keyword arguments to pass to the operation

    Returns:
        The result of the operation

    Raises:
        BookingError: Domain failures raised by the operation, unchanged
        ConstraintViolation: If the database rejects the write on integrity grounds
        SessionError: For any other failure

    Example:
        def rename_template(session, template_id: int, name: str):
            template = session.get(EventTemplate, template_id)
            template.name = name
            return template

        template = execute_in_transaction(db, rename_template, template_id=3, name="Summit")
    """
    @with_retry()
    def _run() -> T:
        try:
            with database.session() as session:
                return operation(session, *args, **kwargs)
        except SessionError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise ConstraintViolation(f"Integrity error in transaction: {e.__cause__.orig}") from e
            raise

    return _run()
