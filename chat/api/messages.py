"""
Message endpoints: create and list.
"""
import json
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError as PydanticValidationError

from chat.api.deps import get_reader, get_writer, require_auth
from chat.core.errors import ValidationError
from chat.core.logging import get_logger
from chat.core.timeutil import format_timestamp
from chat.schemas.message import (
    CreateMessageRequest,
    CreateMessageResponse,
    ErrorResponse,
    INT64_MAX,
    INT64_MIN,
    ListMessagesResponse,
    parse_content,
)
from chat.services.reader import MessageReader
from chat.services.writer import MessageWriter

logger = get_logger(__name__)

router = APIRouter(
    prefix="/messages",
    tags=["Messages"],
    dependencies=[Depends(require_auth)],
    responses={
        401: {"model": ErrorResponse, "description": "Token doesn't match session"},
        403: {"model": ErrorResponse, "description": "Missing authorization header"},
    },
)


@router.post(
    "",
    status_code=201,
    response_model=CreateMessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Malformed body, unknown type or video source"},
        500: {"model": ErrorResponse, "description": "Transaction failed"},
    },
    summary="Send a message",
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": CreateMessageRequest.model_json_schema()}},
        }
    },
)
async def create_message(
    request: Request,
    writer: Annotated[MessageWriter, Depends(get_writer)],
) -> CreateMessageResponse:
    """
    Store a text, image or video message.

    - **content.type** selects the payload shape: `text`, `image` or `video`
    - image `width`/`height` default to 64 when omitted or zero
    - video `source` must be a registered source such as `youtube`
    """
    body = await request.body()
    try:
        payload = CreateMessageRequest.model_validate(json.loads(body))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Invalid JSON in create message request: {e}")
        raise ValidationError(f"Couldn't decode request: {e}")
    except PydanticValidationError as e:
        logger.warning(f"Validation error in create message request: {e}")
        raise ValidationError(
            "Invalid message request",
            details={"errors": e.errors(include_url=False, include_context=False)},
        )

    content = parse_content(payload.content)
    created = writer.create_message(payload.sender, payload.recipient, content)

    return CreateMessageResponse(id=created.id, timestamp=format_timestamp(created.created_at))


@router.get(
    "",
    response_model=ListMessagesResponse,
    responses={500: {"model": ErrorResponse, "description": "Store failure"}},
    summary="List messages",
)
async def list_messages(
    reader: Annotated[MessageReader, Depends(get_reader)],
    recipient: Annotated[int, Query(ge=INT64_MIN, le=INT64_MAX, description="Recipient whose messages to list")],
    start: Annotated[int, Query(ge=0, le=INT64_MAX, description="Smallest message id to include")] = 0,
    limit: Annotated[Optional[int], Query(ge=0, le=INT64_MAX, description="Page size, 0 or omitted means 100")] = None,
) -> ListMessagesResponse:
    """
    List messages for a recipient, ascending by id.

    Fetch the next page with `start` set to the last returned id + 1.
    """
    messages = reader.list_messages(recipient, start=start, limit=limit)
    return ListMessagesResponse(messages=messages)
