"""
User and session database models.
"""
from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, func

from chat.core.database import Base


class User(Base):
    """Registered principal. Immutable after signup."""

    __tablename__ = "chat_user"

    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)  # encoded credential hash
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"


class UserSession(Base):
    """Login session binding a bearer token to a user."""

    __tablename__ = "chat_session"

    # Opaque key carried in the session cookie
    key = Column(String(64), primary_key=True)
    user_id = Column(BigInteger().with_variant(Integer, "sqlite"), ForeignKey("chat_user.id"), nullable=False, index=True)
    token = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_seen_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<UserSession(user_id={self.user_id})>"
