"""
Transactional write path: one envelope plus exactly one typed payload.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chat.core.errors import (
    StoreError,
    TransactionFailed,
    UnknownVideoSource,
    UnsupportedContentType,
    ValidationError,
)
from chat.core.logging import get_logger
from chat.core.timeutil import as_utc
from chat.models.message import ImageMessage, Message, TextMessage, VideoMessage
from chat.schemas.message import Content, ImageContent, TextContent, VideoContent
from chat.services.registry import TypeRegistry

logger = get_logger(__name__)


@dataclass(frozen=True)
class CreatedMessage:
    """Store-assigned identity of a committed message."""
    id: int
    created_at: datetime


class MessageWriter:
    """Creates messages atomically: either both rows commit or neither does."""

    def __init__(self, db: Session, registry: Optional[TypeRegistry] = None):
        self.db = db
        self.registry = registry or TypeRegistry(db)

    def create_message(self, sender: int, recipient: int, content: Content) -> CreatedMessage:
        """
        Insert the envelope and its payload in a single transaction.

        Raises:
            UnsupportedContentType: the content type is not registered
            UnknownVideoSource: the video source is not registered
            TransactionFailed: the store rejected any statement
        """
        context = {"sender": sender, "recipient": recipient, "type": content.type}

        try:
            created = self._insert(sender, recipient, content)
            self.db.commit()
        except ValidationError as e:
            self.db.rollback()
            logger.warning(
                f"Rejected message: {e.message}",
                extra={"extra_data": context}
            )
            raise
        except (SQLAlchemyError, StoreError) as e:
            self.db.rollback()
            logger.error(
                "Couldn't create message",
                exc_info=True,
                extra={"extra_data": context}
            )
            raise TransactionFailed(f"Couldn't create message: {e}") from e

        logger.info(
            "Message created",
            extra={"extra_data": {**context, "message_id": created.id}}
        )
        return created

    def _insert(self, sender: int, recipient: int, content: Content) -> CreatedMessage:
        type_id = self.registry.resolve_message_type_id(content.type)
        if type_id is None:
            raise UnsupportedContentType(content.type)

        message = Message(sender_id=sender, recipient_id=recipient, message_type_id=type_id)
        self.db.add(message)
        self.db.flush()
        # Load the store-assigned created_at
        self.db.refresh(message)

        self.db.add(self._payload(message.id, content))
        self.db.flush()

        return CreatedMessage(id=message.id, created_at=as_utc(message.created_at))

    def _payload(self, message_id: int, content: Content):
        if isinstance(content, TextContent):
            return TextMessage(message_id=message_id, text=content.text)

        if isinstance(content, ImageContent):
            return ImageMessage(
                message_id=message_id,
                url=content.url,
                width=content.width,
                height=content.height,
            )

        if isinstance(content, VideoContent):
            source_id = self.registry.resolve_video_source_id(content.source)
            if source_id is None:
                raise UnknownVideoSource(content.source)
            return VideoMessage(message_id=message_id, url=content.url, source=source_id)

        raise UnsupportedContentType(getattr(content, "type", None))
