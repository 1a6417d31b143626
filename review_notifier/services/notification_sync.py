"""
Notification Sync component.

Reconciles one pull request snapshot against the rooms that should hear about
it: every room notified before, plus the rooms of teams now requested for
review. For each room it posts the rendered message once and edits it on
every later event, then writes the room/message mapping back to the store.
"""

import asyncio
import weakref
from functools import lru_cache
from typing import Callable, List, Optional

from review_notifier.config import settings
from review_notifier.errors import (
    DestinationUnresolved,
    NotificationSyncError,
    PreconditionUnmet,
)
from review_notifier.models.events import WebhookEvent
from review_notifier.models.message import MessageBody
from review_notifier.models.notification import DestinationMapping, NotificationState
from review_notifier.models.pull_request import PullRequest, Review
from review_notifier.services.chat_client import RocketChatClient
from review_notifier.services.destination_resolver import DestinationResolver
from review_notifier.services.notification_store import NotificationStore
from review_notifier.services.renderer import render_notification
from review_notifier.services.review_fetcher import ReviewFetcher
from review_notifier.utils.logging import (
    get_logger,
    log_destination_transition,
    log_error_with_context,
)

logger = get_logger(__name__)


class NotificationSync:
    """Keeps one chat message per room in step with a pull request."""

    def __init__(
        self,
        store: NotificationStore,
        chat: RocketChatClient,
        review_fetcher: ReviewFetcher,
        resolver: DestinationResolver,
        renderer: Callable[[PullRequest, List[Review]], MessageBody] = render_notification,
        serialize_per_pull_request: bool = False,
    ):
        """
        Initialize the sync engine.

        Args:
            store: Notification state store
            chat: Chat client used to look up rooms and post/edit messages
            review_fetcher: Source of the pull request's reviews
            resolver: Maps requested teams to rooms
            renderer: Builds the message body
            serialize_per_pull_request: Run reconciliations of the same pull
                request one at a time within this process
        """
        self.store = store
        self.chat = chat
        self.review_fetcher = review_fetcher
        self.resolver = resolver
        self.renderer = renderer
        self.serialize_per_pull_request = serialize_per_pull_request
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    async def initialize(self) -> None:
        """Open connections to the store and HTTP collaborators."""
        await self.store.initialize()
        await self.chat.initialize()
        await self.review_fetcher.initialize()

    async def close(self) -> None:
        """Close all collaborator connections."""
        await self.review_fetcher.close()
        await self.chat.close()
        await self.store.close()

    async def handle_event(self, event: WebhookEvent) -> None:
        """
        Reconcile the event's pull request if its action calls for it.

        Args:
            event: Decoded webhook event
        """
        pull_request = event.pull_request

        if not event.triggers_sync:
            logger.info(
                f"Ignoring {event.event_type.value} action {event.action}",
                extra={"pull_request_id": pull_request.id}
            )
            return

        await self.reconcile(pull_request)

    async def reconcile(self, pull_request: PullRequest) -> None:
        """
        Create or edit the notification message in every destination room.

        Never raises: failures are logged and the run ends without writing
        any state.

        Args:
            pull_request: Pull request snapshot from the event
        """
        pr_logger = logger.with_context(pull_request_id=pull_request.id)

        try:
            if self.serialize_per_pull_request:
                async with self._lock_for(pull_request.id):
                    await self._reconcile(pull_request, pr_logger)
            else:
                await self._reconcile(pull_request, pr_logger)

        except PreconditionUnmet as e:
            pr_logger.warning(f"Skipping pull request #{pull_request.number}: {e}")

        except NotificationSyncError as e:
            log_error_with_context(
                pr_logger,
                f"Reconciliation aborted for pull request #{pull_request.number}: {e}",
                e
            )

        except Exception as e:
            log_error_with_context(
                pr_logger,
                f"Unexpected error reconciling pull request #{pull_request.number}: {e}",
                e
            )

    def _lock_for(self, pull_request_id: int) -> asyncio.Lock:
        lock = self._locks.get(pull_request_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[pull_request_id] = lock
        return lock

    async def _reconcile(self, pull_request: PullRequest, pr_logger) -> None:
        author = await self.chat.get_acting_user()
        if author is None:
            raise PreconditionUnmet("chat identity unavailable")

        existing = await self.store.read(pull_request.id)
        resolved = self.resolver.resolve(pull_request.requested_teams)
        mappings = self._working_mappings(existing, resolved)

        if not mappings:
            pr_logger.info(f"No destinations for pull request #{pull_request.number}")
            return

        pr_logger.info(
            f"Reconciling pull request #{pull_request.number} across {len(mappings)} destination(s)"
        )

        # One mapping at a time; state is written once after the loop
        for mapping in mappings:
            room = await self.chat.get_room(mapping.destination_id)
            if room is None:
                raise DestinationUnresolved(mapping.destination_id)

            reviews = await self.review_fetcher.fetch_reviews(pull_request.url)
            body = self.renderer(pull_request, reviews)

            created = mapping.message_id is None
            if created:
                mapping.message_id = await self.chat.create_message(room, author, body)
            else:
                await self.chat.update_message(mapping.message_id, room, author, body)

            log_destination_transition(
                pr_logger,
                pull_request_id=pull_request.id,
                destination_id=mapping.destination_id,
                message_id=mapping.message_id,
                created=created
            )

        state = NotificationState(pull_request_id=pull_request.id, mappings=mappings)

        if existing is None:
            await self.store.create(pull_request.id, state)
        else:
            await self.store.update(pull_request.id, state)

        pr_logger.info(f"Persisted {len(mappings)} destination(s) for pull request #{pull_request.number}")

    @staticmethod
    def _working_mappings(
        existing: Optional[NotificationState],
        resolved: List[str]
    ) -> List[DestinationMapping]:
        """Previously notified rooms first, then newly resolved ones."""
        mappings = [mapping.model_copy() for mapping in existing.mappings] if existing else []
        known = {mapping.destination_id for mapping in mappings}

        for destination_id in resolved:
            if destination_id not in known:
                mappings.append(DestinationMapping(destination_id=destination_id))
                known.add(destination_id)

        return mappings


@lru_cache
def get_notification_sync() -> NotificationSync:
    """
    Get or create the process-wide NotificationSync built from settings.
    """
    return NotificationSync(
        store=NotificationStore(
            redis_url=settings.redis_url,
            key_prefix=settings.redis_key_prefix
        ),
        chat=RocketChatClient(
            base_url=settings.chat_base_url,
            user_id=settings.chat_user_id,
            auth_token=settings.chat_auth_token,
            alias=settings.message_alias,
            emoji=settings.message_emoji,
            max_retries=settings.http_max_retries,
            retry_delay=settings.http_retry_delay
        ),
        review_fetcher=ReviewFetcher(
            token=settings.github_token,
            user_agent=settings.github_user_agent,
            max_retries=settings.http_max_retries,
            retry_delay=settings.http_retry_delay
        ),
        resolver=DestinationResolver(settings.team_room_table()),
        serialize_per_pull_request=settings.serialize_per_pull_request
    )
