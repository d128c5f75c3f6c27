"""Session authentication.

The session cookie only ever holds ``{"id": <person id>, "role": "manager" | "user"}``.
People holding the Admin role log in as managers, everyone else as users.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from .admin.people import login_candidates
from .passwords import verify_password

logger = logging.getLogger(__name__)

ROLE_MANAGER = 'manager'
ROLE_USER = 'user'

def session_role_for(role_name: str) -> str:
    return ROLE_MANAGER if role_name.lower() == 'admin' else ROLE_USER

def authenticate(session: Session, email: str, password: str) -> Optional[Dict[str, Any]]:
    """
    Check an email/password pair against the person's role credentials.

    Returns:
        The session user ``{"id", "role"}`` plus display fields, or None when
        no role credential matches.
    """
    for person, role_name, password_hash in login_candidates(session, email):
        if verify_password(password, password_hash):
            logger.info(f"Person {person.id} logged in as {role_name}")
            return {
                'id': person.id,
                'role': session_role_for(role_name),
                'email': person.email,
                'first_name': person.first_name,
                'last_name': person.last_name,
            }

    logger.info("Failed login attempt")
    return None
