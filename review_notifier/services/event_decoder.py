"""
Event Decoder component.

Turns a raw GitHub webhook delivery (event type header + JSON body) into a
typed event. Unsupported event types decode to None.
"""

import json
from typing import Optional, Union

from pydantic import ValidationError

from review_notifier.errors import MalformedPayload
from review_notifier.models.events import (
    EventType,
    PullRequestEvent,
    PullRequestReviewEvent,
    WebhookEvent,
)


_EVENT_MODELS = {
    EventType.PULL_REQUEST.value: PullRequestEvent,
    EventType.PULL_REQUEST_REVIEW.value: PullRequestReviewEvent,
}


def decode_event(event_type: Optional[str], raw_body: Union[str, bytes]) -> Optional[WebhookEvent]:
    """
    Decode a webhook delivery.

    Args:
        event_type: X-GitHub-Event header value
        raw_body: JSON encoded payload

    Returns:
        PullRequestEvent or PullRequestReviewEvent, or None for event types
        that are not handled

    Raises:
        MalformedPayload: If the body is not JSON or lacks the consumed fields
    """
    model = _EVENT_MODELS.get(event_type or "")
    if model is None:
        return None

    try:
        payload = json.loads(raw_body)
    except (TypeError, ValueError) as e:
        raise MalformedPayload(f"Invalid JSON body for {event_type} event: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedPayload(f"Expected a JSON object for {event_type} event")

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise MalformedPayload(
            f"Invalid {event_type} payload: {e.error_count()} validation error(s)"
        ) from e
