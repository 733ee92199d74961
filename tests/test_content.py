"""
Tests for content parsing and normalization.
"""
import pytest

from chat.core.errors import ContentValidationError, UnknownVideoSource, UnsupportedContentType
from chat.schemas.message import (
    ImageContent,
    MessageRecord,
    TextContent,
    VideoContent,
    parse_content,
)


class TestParseContent:

    def test_text(self):
        content = parse_content({"type": "text", "text": "hi"})
        assert content == TextContent(text="hi")

    def test_image_defaults(self):
        content = parse_content({"type": "image", "url": "https://x/a.png"})
        assert isinstance(content, ImageContent)
        assert (content.width, content.height) == (64, 64)

    def test_image_zero_dimensions_default(self):
        content = parse_content({"type": "image", "url": "u", "width": 0, "height": 0})
        assert (content.width, content.height) == (64, 64)

    def test_image_negative_dimensions_are_kept(self):
        content = parse_content({"type": "image", "url": "u", "width": -5, "height": 100000})
        assert (content.width, content.height) == (-5, 100000)

    def test_video(self):
        content = parse_content({"type": "video", "url": "https://youtu.be/x", "source": "youtube"})
        assert content == VideoContent(url="https://youtu.be/x", source="youtube")

    def test_fields_of_other_shapes_are_dropped(self):
        content = parse_content({"type": "text", "text": "hi", "width": 10, "url": "u"})
        assert content.model_dump() == {"type": "text", "text": "hi"}

    @pytest.mark.parametrize("data", [
        {"type": "sticker"},
        {"type": ""},
        {"text": "no tag"},
        {"type": 3},
    ])
    def test_unsupported_type(self, data):
        with pytest.raises(UnsupportedContentType):
            parse_content(data)

    @pytest.mark.parametrize("source", [None, ""])
    def test_video_requires_source(self, source):
        data = {"type": "video", "url": "u"}
        if source is not None:
            data["source"] = source
        with pytest.raises(UnknownVideoSource):
            parse_content(data)

    def test_malformed_fields(self):
        with pytest.raises(ContentValidationError):
            parse_content({"type": "text"})
        with pytest.raises(ContentValidationError):
            parse_content({"type": "image", "url": "u", "width": "wide"})

    def test_non_mapping(self):
        with pytest.raises(ContentValidationError):
            parse_content(["text"])


def test_record_serializes_tagged_content():
    record = MessageRecord(
        id=7,
        sender=1,
        recipient=2,
        timestamp="2024-01-02T03:04:05Z",
        content=ImageContent(url="u"),
    )
    assert record.model_dump()["content"] == {"type": "image", "url": "u", "width": 64, "height": 64}
