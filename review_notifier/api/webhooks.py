"""
Webhook endpoints for GitHub pull request events.
"""

import hashlib
import hmac
import logging
from typing import Optional
from urllib.parse import parse_qs

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request

from review_notifier.config import settings
from review_notifier.errors import MalformedPayload
from review_notifier.models.api_response import WebhookAck
from review_notifier.models.events import WebhookEvent
from review_notifier.services.event_decoder import decode_event
from review_notifier.services.notification_sync import NotificationSync, get_notification_sync
from review_notifier.utils.logging import log_webhook_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def verify_webhook_signature(payload: bytes, secret: str, signature: Optional[str]) -> bool:
    """
    Verify the X-Hub-Signature-256 header of a GitHub delivery.

    Args:
        payload: Raw request payload
        secret: Webhook secret shared with GitHub
        signature: Signature from request header ("sha256=<hex>")

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature:
        return False

    expected_signature = "sha256=" + hmac.new(
        secret.encode("utf-8"),
        payload,
        hashlib.sha256
    ).hexdigest()

    return hmac.compare_digest(signature, expected_signature)


def extract_payload(raw_body: bytes, content_type: str) -> bytes:
    """
    Return the JSON document of a delivery.

    GitHub sends either a JSON body or a form body with a ``payload`` field.
    """
    if "application/x-www-form-urlencoded" in content_type:
        form = parse_qs(raw_body.decode("utf-8", errors="replace"))
        payload = form.get("payload")
        if not payload:
            raise MalformedPayload("Form delivery without a payload field")
        return payload[0].encode("utf-8")

    return raw_body


async def process_event_async(sync: NotificationSync, event: WebhookEvent) -> None:
    """
    Process a decoded event after the response has been sent.

    Args:
        sync: Notification sync engine
        event: Decoded webhook event
    """
    try:
        await sync.handle_event(event)
    except Exception as e:
        logger.error(f"Error processing webhook event asynchronously: {e}", exc_info=True)


@router.get("/github", response_model=WebhookAck)
async def github_webhook_probe(request: Request) -> WebhookAck:
    """Acknowledge GET requests (used by health probes and GitHub UI checks)."""
    logger.info(f"Webhook probe from {request.client.host if request.client else 'unknown'}")
    return WebhookAck()


@router.post("/github", response_model=WebhookAck)
async def handle_github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_github_event: Optional[str] = Header(None, alias="X-GitHub-Event"),
    x_github_delivery: Optional[str] = Header(None, alias="X-GitHub-Delivery"),
    x_hub_signature: Optional[str] = Header(None, alias="X-Hub-Signature-256"),
    sync: NotificationSync = Depends(get_notification_sync),
) -> WebhookAck:
    """
    Receive GitHub pull_request and pull_request_review deliveries.

    This endpoint:
    1. Verifies the signature when a webhook secret is configured
    2. Decodes the event payload
    3. Schedules reconciliation for actions that trigger a sync
    4. Always answers {"ok": true}, so GitHub never retries a delivery

    Returns:
        WebhookAck
    """
    raw_body = await request.body()

    if settings.webhook_secret and not verify_webhook_signature(
        raw_body, settings.webhook_secret, x_hub_signature
    ):
        logger.warning(
            "Invalid webhook signature received, ignoring delivery",
            extra={"delivery_id": x_github_delivery}
        )
        return WebhookAck()

    try:
        payload = extract_payload(raw_body, request.headers.get("content-type", ""))
        event = decode_event(x_github_event, payload)
    except MalformedPayload as e:
        logger.error(
            f"Malformed {x_github_event} payload: {e}",
            extra={"delivery_id": x_github_delivery}
        )
        return WebhookAck()

    if event is None:
        logger.info(
            f"Ignoring event type: {x_github_event}",
            extra={"delivery_id": x_github_delivery}
        )
        return WebhookAck()

    log_webhook_event(
        logger,
        event_type=event.event_type.value,
        action=event.action,
        delivery_id=x_github_delivery,
        pull_request_id=event.pull_request.id
    )

    if event.triggers_sync:
        background_tasks.add_task(process_event_async, sync, event)
    else:
        logger.info(f"Action {event.action} does not trigger a sync")

    return WebhookAck()
