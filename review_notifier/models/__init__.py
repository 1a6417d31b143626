"""Data models for the review notifier."""

from .api_response import WebhookAck
from .chat import ChatRoom, ChatUser
from .events import (
    EventType,
    PULL_REQUEST_SYNC_ACTIONS,
    REVIEW_SYNC_ACTIONS,
    PullRequestEvent,
    PullRequestReviewEvent,
    WebhookEvent,
)
from .message import (
    ContextBlock,
    ImageElement,
    MessageBody,
    SectionBlock,
    TextObject,
)
from .notification import DestinationMapping, NotificationState
from .pull_request import (
    GitHubUser,
    PullRequest,
    RequestedTeam,
    Review,
    ReviewState,
)

__all__ = [
    # Pull request models
    "GitHubUser",
    "PullRequest",
    "RequestedTeam",
    "Review",
    "ReviewState",
    # Event models
    "EventType",
    "PULL_REQUEST_SYNC_ACTIONS",
    "REVIEW_SYNC_ACTIONS",
    "PullRequestEvent",
    "PullRequestReviewEvent",
    "WebhookEvent",
    # Notification state models
    "DestinationMapping",
    "NotificationState",
    # Message models
    "TextObject",
    "ImageElement",
    "SectionBlock",
    "ContextBlock",
    "MessageBody",
    # Chat models
    "ChatUser",
    "ChatRoom",
    # API response models
    "WebhookAck",
]
