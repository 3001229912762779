import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy import delete, select
from werkzeug.security import check_password_hash, generate_password_hash

from app.core.errors import AuthError
from app.core.logger import logger
from app.models.db_models import Admin, SessionRecord, utcnow
from app.services.db_service import Database

INVALID_CREDENTIALS = "Invalid username or password."

# Compared against when the username does not exist, so both failure paths pay for a hash check.
_DUMMY_HASH = generate_password_hash(secrets.token_urlsafe(16))


@dataclass(frozen=True)
class SessionState:
    token: Optional[str] = None
    is_admin: bool = False
    user_id: Optional[int] = None


ANONYMOUS = SessionState()


class SessionManager:
    """
    Server-side sessions stored in the `sessions` table. The cookie only
    carries the opaque token; everything else lives in the row.
    """

    def __init__(self, db: Database, max_age: int = 86400):
        self.db = db
        self.max_age = max_age

    def _expiry(self):
        return utcnow() + timedelta(seconds=self.max_age)

    def login(self, username: Optional[str], password: Optional[str], previous_token: Optional[str] = None) -> SessionState:
        """
        Verifies the credentials and persists a brand new session before returning.
        Unknown usernames and wrong passwords raise the same AuthError.
        """
        if not username or not password:
            raise AuthError(INVALID_CREDENTIALS)

        with self.db.session() as session:
            admin = session.scalar(select(Admin).where(Admin.username == username))
            if admin is None:
                check_password_hash(_DUMMY_HASH, password)
                logger.warning("⚠️ Login failed: unknown username")
                raise AuthError(INVALID_CREDENTIALS)

            if not check_password_hash(admin.password_hash, password):
                logger.warning(f"⚠️ Login failed: wrong password for admin {admin.admin_id}")
                raise AuthError(INVALID_CREDENTIALS)

            # Never reuse a token the client brought with it
            if previous_token:
                session.execute(delete(SessionRecord).where(SessionRecord.session_id == previous_token))

            token = secrets.token_urlsafe(32)
            session.add(SessionRecord(
                session_id=token,
                is_admin=True,
                user_id=admin.admin_id,
                expires_at=self._expiry(),
            ))
            session.commit()
            admin_id = admin.admin_id

        logger.info(f"🔑 Admin {admin_id} logged in")
        return SessionState(token=token, is_admin=True, user_id=admin_id)

    def resolve(self, token: Optional[str]) -> SessionState:
        """
        Maps a cookie token to its session. Unknown or expired tokens are
        anonymous; a live session has its inactivity window restarted.
        """
        if not token:
            return ANONYMOUS

        with self.db.session() as session:
            record = session.get(SessionRecord, token)
            if record is None:
                return ANONYMOUS

            now = utcnow()
            if record.expires_at <= now:
                session.delete(record)
                session.commit()
                logger.info(f"⌛ Session for user {record.user_id} expired")
                return ANONYMOUS

            record.expires_at = now + timedelta(seconds=self.max_age)
            session.commit()
            return SessionState(token=token, is_admin=record.is_admin, user_id=record.user_id)

    def logout(self, token: Optional[str]) -> bool:
        """Destroys the session. Returns False when there was nothing to destroy."""
        if not token:
            return False

        with self.db.session() as session:
            result = session.execute(delete(SessionRecord).where(SessionRecord.session_id == token))
            session.commit()
        return result.rowcount > 0

    def clear_expired(self) -> int:
        with self.db.session() as session:
            result = session.execute(delete(SessionRecord).where(SessionRecord.expires_at <= utcnow()))
            session.commit()
        if result.rowcount:
            logger.info(f"🧹 Cleared {result.rowcount} expired sessions")
        return result.rowcount
