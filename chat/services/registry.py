"""
Name to identifier lookups for message types and video sources.
"""
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chat.core.errors import StoreError
from chat.core.logging import get_logger
from chat.models.message import MessageType, VideoSource

logger = get_logger(__name__)


class TypeRegistry:
    """
    Resolves reference-data names through the caller's session.

    Lookups run inside whatever transaction the session has open, so a write
    sees the same reference rows it validates against. Hits and misses are
    memoized for the lifetime of the instance, which is one request.
    """

    def __init__(self, db: Session):
        self.db = db
        self._message_types: Dict[str, Optional[int]] = {}
        self._video_sources: Dict[str, Optional[int]] = {}

    def resolve_message_type_id(self, name: str) -> Optional[int]:
        """Return the id registered for a message type name, or None."""
        return self._resolve(MessageType, name, self._message_types)

    def resolve_video_source_id(self, name: str) -> Optional[int]:
        """Return the id registered for a video source name, or None."""
        return self._resolve(VideoSource, name, self._video_sources)

    def _resolve(self, model, name: str, cache: Dict[str, Optional[int]]) -> Optional[int]:
        if name in cache:
            return cache[name]

        try:
            ident = self.db.scalar(select(model.id).where(model.name == name))
        except SQLAlchemyError as e:
            raise StoreError(f"Couldn't look up {model.__tablename__}: {name}") from e

        if ident is None:
            logger.debug(
                "Registry miss",
                extra={"extra_data": {"table": model.__tablename__, "name": name}}
            )
        cache[name] = ident
        return ident
