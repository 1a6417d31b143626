"""Webhook event data models."""

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

from .pull_request import PullRequest


class EventType(str, Enum):
    """Supported X-GitHub-Event header values."""

    PULL_REQUEST = "pull_request"
    PULL_REQUEST_REVIEW = "pull_request_review"


# Upstream pull_request actions: opened, edited, closed, assigned, unassigned,
# review_requested, review_request_removed, ready_for_review, labeled,
# unlabeled, synchronize, locked, unlocked. Only these trigger a sync.
PULL_REQUEST_SYNC_ACTIONS = frozenset({"opened", "edited", "review_requested"})
REVIEW_SYNC_ACTIONS = frozenset({"submitted", "dismissed"})


class PullRequestEvent(BaseModel):
    """Payload of a pull_request delivery."""

    action: str
    pull_request: PullRequest

    @property
    def event_type(self) -> EventType:
        return EventType.PULL_REQUEST

    @property
    def triggers_sync(self) -> bool:
        return self.action in PULL_REQUEST_SYNC_ACTIONS


class PullRequestReviewEvent(BaseModel):
    """Payload of a pull_request_review delivery."""

    action: str
    pull_request: PullRequest
    review: Optional[Dict[str, Any]] = None

    @property
    def event_type(self) -> EventType:
        return EventType.PULL_REQUEST_REVIEW

    @property
    def triggers_sync(self) -> bool:
        return self.action in REVIEW_SYNC_ACTIONS


WebhookEvent = Union[PullRequestEvent, PullRequestReviewEvent]
