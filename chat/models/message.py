"""
Message envelope, typed payload and reference-data models.
"""
from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from chat.core.database import Base

# SQLite only autoincrements INTEGER PRIMARY KEY columns
MessageID = BigInteger().with_variant(Integer, "sqlite")


class MessageType(Base):
    """Registry entry mapping a message type name to its identifier."""

    __tablename__ = "message_type"

    id = Column(SmallInteger, primary_key=True, autoincrement=False)
    name = Column(String(32), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<MessageType(id={self.id}, name={self.name})>"


class VideoSource(Base):
    """Registry entry mapping a video source name to its identifier."""

    __tablename__ = "video_source"

    id = Column(SmallInteger, primary_key=True, autoincrement=False)
    name = Column(String(32), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<VideoSource(id={self.id}, name={self.name})>"


class Message(Base):
    """Type-agnostic message envelope."""

    __tablename__ = "message"

    # Store-assigned, monotonic; doubles as the pagination cursor
    id = Column(MessageID, primary_key=True, autoincrement=True)

    sender_id = Column(BigInteger, nullable=False)
    recipient_id = Column(BigInteger, nullable=False)
    message_type_id = Column(SmallInteger, ForeignKey("message_type.id"), nullable=False)

    # Assigned by the store at insert time
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    message_type = relationship("MessageType")

    __table_args__ = (
        Index("ix_message_recipient_id_id", "recipient_id", "id"),
    )

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, sender_id={self.sender_id}, recipient_id={self.recipient_id})>"


class TextMessage(Base):
    """Text payload, keyed by the envelope identifier."""

    __tablename__ = "text_message"

    message_id = Column(MessageID, ForeignKey("message.id"), primary_key=True)
    text = Column(Text, nullable=False)


class ImageMessage(Base):
    """Image payload, keyed by the envelope identifier."""

    __tablename__ = "image_message"

    message_id = Column(MessageID, ForeignKey("message.id"), primary_key=True)
    url = Column(Text, nullable=False)
    width = Column(BigInteger, nullable=False)
    height = Column(BigInteger, nullable=False)


class VideoMessage(Base):
    """Video payload, keyed by the envelope identifier."""

    __tablename__ = "video_message"

    message_id = Column(MessageID, ForeignKey("message.id"), primary_key=True)
    url = Column(Text, nullable=False)
    source = Column(SmallInteger, ForeignKey("video_source.id"), nullable=False)
