"""
Signup, login and session storage.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chat.core.config import Settings, get_settings
from chat.core.errors import InvalidCredentials, StoreError, TransactionFailed, UsernameTaken
from chat.core.logging import get_logger
from chat.core.security import hash_password, new_session_key, new_token, verify_password
from chat.core.timeutil import as_utc, utcnow
from chat.models.user import User, UserSession

logger = get_logger(__name__)


class Authenticator:
    """Owns principals and their sessions: creation, verification and expiry."""

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()

    @property
    def lifetime(self) -> timedelta:
        return timedelta(seconds=self.settings.session_lifetime_seconds)

    @property
    def idle_timeout(self) -> timedelta:
        return timedelta(seconds=self.settings.session_idle_timeout_seconds)

    def signup(self, username: str, password: str) -> User:
        """Create a user with a hashed password."""
        user = User(
            username=username,
            password=hash_password(password, self.settings.password_hash_iterations),
        )
        try:
            self.db.add(user)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info("Signup with existing username", extra={"extra_data": {"username": username}})
            raise UsernameTaken(username) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Couldn't create user", exc_info=True)
            raise TransactionFailed(f"Couldn't create user: {e}") from e

        logger.info("User created", extra={"extra_data": {"user_id": user.id}})
        return user

    def login(self, username: str, password: str) -> UserSession:
        """Verify credentials and open a new session holding a fresh token."""
        try:
            user = self.db.scalar(select(User).where(User.username == username))
        except SQLAlchemyError as e:
            raise StoreError(f"Couldn't look up user: {e}") from e

        if user is None or not verify_password(password, user.password):
            logger.warning("Failed login", extra={"extra_data": {"username": username}})
            raise InvalidCredentials()

        now = utcnow()
        session = UserSession(
            key=new_session_key(),
            user_id=user.id,
            token=new_token(),
            created_at=now,
            last_seen_at=now,
        )
        try:
            purged = self._purge_expired(user.id, now)
            self.db.add(session)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Couldn't create session", exc_info=True)
            raise TransactionFailed(f"Couldn't create session: {e}") from e

        logger.info("User logged in", extra={"extra_data": {"user_id": user.id, "expired_sessions_purged": purged}})
        return session

    def is_expired(self, session: UserSession, now: Optional[datetime] = None) -> bool:
        """A session expires after its lifetime or after idling past the idle timeout."""
        now = now or utcnow()
        return (
            now - as_utc(session.created_at) > self.lifetime
            or now - as_utc(session.last_seen_at) > self.idle_timeout
        )

    def load_session(self, key: Optional[str]) -> Optional[UserSession]:
        """
        Return the live session for ``key``, or None when it is missing or expired.

        Read-only: the caller refreshes the idle timer with :meth:`touch`
        once the session's token has been checked.
        """
        if not key:
            return None

        try:
            session = self.db.get(UserSession, key)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Couldn't load session: {e}") from e

        if session is None:
            return None
        if self.is_expired(session):
            logger.info("Session expired", extra={"extra_data": {"user_id": session.user_id}})
            return None
        return session

    def touch(self, session: UserSession) -> None:
        """Refresh the session's idle timer."""
        try:
            session.last_seen_at = utcnow()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Couldn't refresh session: {e}") from e

    def _purge_expired(self, user_id: int, now: datetime) -> int:
        """Delete the user's expired sessions; the caller commits."""
        stale = [
            s for s in self.db.scalars(select(UserSession).where(UserSession.user_id == user_id))
            if self.is_expired(s, now)
        ]
        for s in stale:
            self.db.delete(s)
        return len(stale)
