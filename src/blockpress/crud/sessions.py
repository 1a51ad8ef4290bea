"""Session tokens and the SQL-backed identity provider"""

import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session

from blockpress.core.models import Identity
from blockpress.crud.models import AuthSession
from blockpress.crud.profiles import reader_plan


def issue_session(session: Session, user_id: str, ttl: timedelta) -> AuthSession:
    """Create a random session token for user_id. Flushes but does not commit."""
    now = datetime.now()
    auth = AuthSession(token=secrets.token_urlsafe(32), user_id=user_id, created_at=now, expires_at=now + ttl)
    session.add(auth)
    session.flush()
    return auth


def revoke_session(session: Session, token: str) -> bool:
    auth = session.get(AuthSession, token)
    if auth is None:
        return False
    session.delete(auth)
    session.flush()
    return True


class SessionIdentities:
    """Identities implementation: a token is valid while its AuthSession row has not expired."""

    def __init__(self, engine):
        self.engine = engine

    def authenticate(self, token: Optional[str]) -> Optional[Identity]:
        if not token:
            return None
        with Session(self.engine) as session:
            auth = session.get(AuthSession, token)
            if auth is None or auth.expires_at <= datetime.now():
                return None
            return Identity(user_id=auth.user_id, plan=reader_plan(session, auth.user_id))
