"""
Request-scoped service construction and the access guard.
"""
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from chat.core.config import Settings, get_settings
from chat.core.database import get_db
from chat.core.errors import Forbidden, Unauthorized
from chat.core.logging import get_logger
from chat.core.security import strip_bearer, tokens_match
from chat.services.auth import Authenticator
from chat.services.reader import MessageReader
from chat.services.registry import TypeRegistry
from chat.services.writer import MessageWriter

logger = get_logger(__name__)


def get_authenticator(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> Authenticator:
    return Authenticator(db, settings)


def get_writer(db: Annotated[Session, Depends(get_db)]) -> MessageWriter:
    return MessageWriter(db, TypeRegistry(db))


def get_reader(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> MessageReader:
    return MessageReader(db, default_limit=settings.default_page_limit)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""
    user_id: int
    token: str


class AccessGuard:
    """
    Dependency class that admits only callers whose authorization header
    matches the token stored in their session.
    """

    async def __call__(
        self,
        request: Request,
        authenticator: Annotated[Authenticator, Depends(get_authenticator)],
        settings: Annotated[Settings, Depends(get_settings)],
    ) -> Principal:
        """
        Validate the authorization header against the caller's session.

        Raises:
            Forbidden: the authorization header is missing
            Unauthorized: no live session, or its token doesn't match
        """
        header: Optional[str] = request.headers.get("authorization")
        if not header:
            logger.warning("Missing authorization header")
            raise Forbidden()

        presented = strip_bearer(header)
        session = authenticator.load_session(request.cookies.get(settings.session_cookie_name))

        if session is None or not tokens_match(session.token, presented):
            logger.warning(
                "Session token didn't match what's in authorization header",
                extra={"extra_data": {"has_session": session is not None}}
            )
            raise Unauthorized()

        authenticator.touch(session)
        return Principal(user_id=session.user_id, token=session.token)


# Dependency instance
require_auth = AccessGuard()
