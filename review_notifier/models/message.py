"""
Platform-neutral message body models.

Blocks follow the UIKit shape used by the chat server; ``model_dump(by_alias=True)``
yields the wire representation.
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class TextObject(BaseModel):
    """Markdown text."""

    type: Literal["mrkdwn"] = "mrkdwn"
    text: str


class ImageElement(BaseModel):
    """Small image, used for avatars."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["image"] = "image"
    image_url: str = Field(..., alias="imageUrl")
    alt_text: str = Field(..., alias="altText")


class SectionBlock(BaseModel):
    """Text section with an optional trailing accessory."""

    type: Literal["section"] = "section"
    text: TextObject
    accessory: Optional[ImageElement] = None


class ContextBlock(BaseModel):
    """Row of small text and image elements."""

    type: Literal["context"] = "context"
    elements: List[Union[TextObject, ImageElement]]


class MessageBody(BaseModel):
    """Rendered notification: plain-text fallback plus layout blocks."""

    text: str
    blocks: List[Union[SectionBlock, ContextBlock]] = []

    def wire_blocks(self) -> List[dict]:
        """Blocks as plain dicts with camelCase keys, omitting unset accessories."""
        return [block.model_dump(by_alias=True, exclude_none=True) for block in self.blocks]
