"""Business logic services package."""

from review_notifier.services.chat_client import RocketChatClient
from review_notifier.services.destination_resolver import DestinationResolver
from review_notifier.services.event_decoder import decode_event
from review_notifier.services.notification_store import NotificationStore
from review_notifier.services.notification_sync import (
    NotificationSync,
    get_notification_sync
)
from review_notifier.services.renderer import render_notification
from review_notifier.services.review_fetcher import ReviewFetcher

__all__ = [
    'decode_event',
    'DestinationResolver',
    'NotificationStore',
    'ReviewFetcher',
    'render_notification',
    'RocketChatClient',
    'NotificationSync',
    'get_notification_sync'
]
