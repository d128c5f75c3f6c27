"""Request-scoped context.

Each request gets a ``RequestContext`` carrying the resolved identity and the
application's database. Handlers read inside
``ctx.transaction()`` and write through ``ctx.run()``; either way the session
goes back to the pool before the response is sent.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generator, Optional, TypeVar

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..auth import ROLE_MANAGER
from ..db import Database, execute_in_transaction
from ..errors import Unavailable

T = TypeVar('T')

@dataclass
class CurrentUser:
    id: int
    role: str

    @property
    def is_manager(self) -> bool:
        return self.role == ROLE_MANAGER

@dataclass
class RequestContext:
    database: Optional[Database]
    user: Optional[CurrentUser] = None

    def require_database(self) -> Database:
        if self.database is None:
            raise Unavailable("The database is not configured")
        return self.database

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Borrow a session for the duration of the block; commit on success. Used for reads."""
        with self.require_database().session() as session:
            yield session

    def run(self, operation: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run a write as ``operation(session, *args, **kwargs)`` in its own transaction.

        Transient lock errors are retried and integrity failures come back as
        ``ConstraintViolation``.
        """
        return execute_in_transaction(self.require_database(), operation, *args, **kwargs)

def _user_from_session(request: Request) -> Optional[CurrentUser]:
    data: Optional[Dict[str, Any]] = request.session.get('user')
    if not data or 'id' not in data or 'role' not in data:
        return None
    return CurrentUser(id=int(data['id']), role=data['role'])

def get_current_user(request: Request) -> Optional[CurrentUser]:
    return _user_from_session(request)

def get_request_context(
    request: Request,
    user: Optional[CurrentUser] = Depends(get_current_user),
) -> RequestContext:
    return RequestContext(database=request.app.state.database, user=user)

def require_auth(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    """Guard: the request must carry a logged-in user."""
    if ctx.user is None:
        raise HTTPException(status_code=401, detail="Login required")
    return ctx

def require_manager(ctx: RequestContext = Depends(require_auth)) -> RequestContext:
    """Guard: the logged-in user must be a manager."""
    if not ctx.user.is_manager:
        raise HTTPException(
            status_code=403,
            detail="You do not have permission to access this page. Manager access required."
        )
    return ctx
