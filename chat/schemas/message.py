"""
Pydantic schemas for message content and message endpoints.
"""
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from chat.core.errors import ContentValidationError, UnknownVideoSource, UnsupportedContentType

DEFAULT_IMAGE_DIMENSION = 64

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Identifiers are stored as BIGINT
Int64 = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


class TextContent(BaseModel):
    """Plain UTF-8 text body."""
    type: Literal["text"] = "text"
    text: str

    model_config = {"extra": "ignore"}


class ImageContent(BaseModel):
    """Image reference with pixel dimensions."""
    type: Literal["image"] = "image"
    url: str
    width: Int64 = DEFAULT_IMAGE_DIMENSION
    height: Int64 = DEFAULT_IMAGE_DIMENSION

    model_config = {"extra": "ignore"}

    @field_validator("width", "height", mode="before")
    @classmethod
    def default_dimension(cls, v):
        """Omitted, null or zero dimensions fall back to 64."""
        if v is None or v == 0:
            return DEFAULT_IMAGE_DIMENSION
        return v


class VideoContent(BaseModel):
    """Video reference hosted by a registered source."""
    type: Literal["video"] = "video"
    url: str
    source: str = Field(..., min_length=1)

    model_config = {"extra": "ignore"}


Content = Annotated[
    Union[TextContent, ImageContent, VideoContent],
    Field(discriminator="type"),
]

CONTENT_MODELS = {
    "text": TextContent,
    "image": ImageContent,
    "video": VideoContent,
}


def parse_content(data: Any) -> Content:
    """
    Validate and normalize a raw content mapping into one of the content variants.

    Raises:
        UnsupportedContentType: the ``type`` tag is missing or unknown
        UnknownVideoSource: a video without a source name
        ContentValidationError: the variant's fields are malformed
    """
    if not isinstance(data, dict):
        raise ContentValidationError("content must be an object")

    content_type = data.get("type")
    model = CONTENT_MODELS.get(content_type) if isinstance(content_type, str) else None
    if model is None:
        raise UnsupportedContentType(content_type)

    if model is VideoContent:
        source = data.get("source")
        if not isinstance(source, str) or not source:
            raise UnknownVideoSource(source)

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ContentValidationError(
            f"Invalid {content_type} content",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


class CreateMessageRequest(BaseModel):
    """Request schema for POST /messages."""
    sender: Int64
    recipient: Int64
    content: Dict[str, Any]

    model_config = {
        "json_schema_extra": {
            "example": {
                "sender": 1,
                "recipient": 2,
                "content": {"type": "text", "text": "hi"},
            }
        }
    }


class CreateMessageResponse(BaseModel):
    """Response schema for POST /messages."""
    id: int
    timestamp: str = Field(..., description="RFC 3339 creation time (UTC)")


class MessageRecord(BaseModel):
    """A message rebuilt from its envelope and typed payload."""
    id: int
    sender: int
    recipient: int
    timestamp: str
    content: Content


class ListMessagesResponse(BaseModel):
    """Response schema for GET /messages."""
    messages: List[MessageRecord]


class ErrorResponse(BaseModel):
    """Standard error response schema."""
    detail: str


class HealthResponse(BaseModel):
    """Response schema for health endpoints."""
    status: str
    checks: Optional[dict] = None
