"""
Paginated read path across the text, image and video payload tables.
"""
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chat.core.errors import StoreError
from chat.core.logging import get_logger
from chat.core.timeutil import format_timestamp
from chat.models.message import (
    ImageMessage,
    Message,
    MessageType,
    TextMessage,
    VideoMessage,
    VideoSource,
)
from chat.schemas.message import ImageContent, MessageRecord, TextContent, VideoContent

logger = get_logger(__name__)

DEFAULT_LIMIT = 100


class MessageReader:
    """
    Lists a recipient's messages page by page.

    A page is the first ``limit`` envelope ids at or above the cursor. Each
    payload shape is then fetched separately, restricted to that id range,
    and the records are emitted in page order. Every query uses the request's
    session, but they are not one snapshot. The per-shape queries are bounded
    by the page's last id, and an envelope found without its payload is
    skipped rather than failing the page. pysqlite issues no BEGIN
    for a SELECT, so on SQLite each query sees its own snapshot. Run the
    engine at REPEATABLE READ on PostgreSQL for one snapshot per page.
    """

    def __init__(self, db: Session, default_limit: int = DEFAULT_LIMIT):
        self.db = db
        self.default_limit = default_limit

    def list_messages(
        self,
        recipient: int,
        start: Optional[int] = 0,
        limit: Optional[int] = None,
    ) -> List[MessageRecord]:
        """
        Return up to ``limit`` messages for ``recipient`` with id >= ``start``,
        ascending by id.

        Raises:
            StoreError: a query failed
        """
        start = start or 0
        limit = limit or self.default_limit

        try:
            page = self._page_ids(recipient, start, limit)
            if not page:
                return []

            records: Dict[int, MessageRecord] = {}
            for fetch in (self._text_records, self._image_records, self._video_records):
                for record in fetch(recipient, start, page[-1], limit):
                    records[record.id] = record
        except SQLAlchemyError as e:
            logger.error(
                "Couldn't list messages",
                exc_info=True,
                extra={"extra_data": {"recipient": recipient, "start": start, "limit": limit}}
            )
            raise StoreError(f"Couldn't list messages: {e}") from e
        finally:
            # Read-only; just end the snapshot
            self.db.rollback()

        messages = self._merge(page, records)

        logger.debug(
            "Listed messages",
            extra={
                "extra_data": {
                    "recipient": recipient,
                    "start": start,
                    "limit": limit,
                    "returned": len(messages),
                }
            }
        )
        return messages

    def _page_ids(self, recipient: int, start: int, limit: int) -> List[int]:
        query = (
            select(Message.id)
            .where(Message.recipient_id == recipient, Message.id >= start)
            .order_by(Message.id)
            .limit(limit)
        )
        return list(self.db.scalars(query).all())

    @staticmethod
    def _merge(page: List[int], records: Dict[int, MessageRecord]) -> List[MessageRecord]:
        messages = []
        for message_id in page:
            record = records.get(message_id)
            if record is None:
                logger.warning(
                    "Message has no matching payload, skipping",
                    extra={"extra_data": {"message_id": message_id}}
                )
                continue
            messages.append(record)
        return messages

    def _shape_query(self, payload, columns, recipient: int, start: int, last_id: int, limit: int):
        return (
            select(
                Message.id,
                Message.sender_id,
                Message.recipient_id,
                Message.created_at,
                MessageType.name,
                *columns,
            )
            .join(MessageType, Message.message_type_id == MessageType.id)
            .join(payload, payload.message_id == Message.id)
            .where(
                Message.recipient_id == recipient,
                Message.id >= start,
                Message.id <= last_id,
            )
            .order_by(Message.id)
            .limit(limit)
        )

    def _text_records(self, recipient, start, last_id, limit) -> Iterable[MessageRecord]:
        query = self._shape_query(TextMessage, (TextMessage.text,), recipient, start, last_id, limit)
        return self._build(query, "text", lambda row: TextContent(text=row.text))

    def _image_records(self, recipient, start, last_id, limit) -> Iterable[MessageRecord]:
        query = self._shape_query(
            ImageMessage,
            (ImageMessage.url, ImageMessage.width, ImageMessage.height),
            recipient, start, last_id, limit,
        )
        return self._build(
            query,
            "image",
            lambda row: ImageContent(url=row.url, width=row.width, height=row.height),
        )

    def _video_records(self, recipient, start, last_id, limit) -> Iterable[MessageRecord]:
        query = self._shape_query(
            VideoMessage,
            (VideoMessage.url, VideoSource.name.label("source")),
            recipient, start, last_id, limit,
        ).join(VideoSource, VideoMessage.source == VideoSource.id)
        return self._build(
            query,
            "video",
            lambda row: VideoContent(url=row.url, source=row.source),
        )

    def _build(self, query, shape: str, to_content: Callable) -> List[MessageRecord]:
        records = []
        for row in self.db.execute(query):
            if row.name != shape:
                # Envelope type disagrees with the payload table it has a row in
                logger.error(
                    "Message type doesn't match payload shape",
                    extra={"extra_data": {"message_id": row.id, "type": row.name, "shape": shape}}
                )
                continue
            records.append(
                MessageRecord(
                    id=row.id,
                    sender=row.sender_id,
                    recipient=row.recipient_id,
                    timestamp=format_timestamp(row.created_at),
                    content=to_content(row),
                )
            )
        return records
