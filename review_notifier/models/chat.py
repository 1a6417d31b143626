"""Chat server data models."""

from typing import Optional

from pydantic import BaseModel


class ChatUser(BaseModel):
    """Identity that posts and edits notification messages."""

    id: str
    username: str


class ChatRoom(BaseModel):
    """Destination room."""

    id: str
    name: Optional[str] = None
