"""
Notification store backed by Redis.

Persists, per pull request id, the list of chat rooms that were notified and
the message id owned in each. The orchestrator reads the full state, works on
it in memory, then writes it back whole with create() or update().

Includes connection pooling and retry logic for resilience.
"""

import json
import logging
import asyncio
from typing import Optional
from contextlib import asynccontextmanager
import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError, ConnectionError, TimeoutError
from pydantic import ValidationError

from review_notifier.errors import AlreadyExists, PersistenceFailure
from review_notifier.models.notification import NotificationState


logger = logging.getLogger(__name__)


class NotificationStore:
    """
    Redis wrapper for NotificationState records.

    One string key per pull request id holding the JSON encoded state.
    """

    STATE_KEY = "{prefix}:notification_state:{pull_request_id}"

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key_prefix: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        connection_timeout: int = 5
    ):
        """
        Initialize the store.

        Args:
            redis_url: Redis connection URL. If None, will load from settings.
            key_prefix: Namespace for keys. If None, will load from settings.
            max_retries: Maximum number of attempts for transient errors
            retry_delay: Base delay between retries (exponential backoff)
            connection_timeout: Connection timeout in seconds
        """
        self._redis_url = redis_url
        self._key_prefix = key_prefix
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._connection_timeout = connection_timeout

    async def initialize(self) -> None:
        """
        Initialize Redis connection pool.

        Should be called during application startup.

        Raises:
            PersistenceFailure: If the connection cannot be established
        """
        try:
            if not self._redis_url:
                from review_notifier.config import settings
                self._redis_url = settings.redis_url

            self._pool = ConnectionPool.from_url(
                self._redis_url,
                max_connections=10,
                decode_responses=True,
                socket_timeout=self._connection_timeout,
                socket_connect_timeout=self._connection_timeout
            )
            self._client = redis.Redis(connection_pool=self._pool)

            await self._client.ping()

            logger.info("Redis connection pool initialized successfully")

        except RedisError as e:
            logger.error(f"Failed to initialize Redis connection pool: {e}")
            raise PersistenceFailure(f"Failed to connect to Redis: {e}") from e

    async def close(self) -> None:
        """
        Close Redis connection pool.

        Should be called during application shutdown.
        """
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        logger.info("Redis connection pool closed")

    @asynccontextmanager
    async def _get_client(self):
        """
        Get Redis client with connection check.

        Raises:
            PersistenceFailure: If client not initialized
        """
        if not self._client:
            raise PersistenceFailure("Redis client not initialized. Call initialize() first.")

        yield self._client

    async def _retry_operation(self, operation, *args, **kwargs):
        """
        Execute Redis operation with retry logic.

        Connection and timeout errors are retried; other Redis errors fail
        immediately.

        Raises:
            PersistenceFailure: If operation fails
        """
        last_error = None

        for attempt in range(self._max_retries):
            try:
                return await operation(*args, **kwargs)

            except (ConnectionError, TimeoutError) as e:
                last_error = e
                if attempt < self._max_retries - 1:
                    delay = self._retry_delay * (2 ** attempt)
                    logger.warning(
                        f"Redis operation failed (attempt {attempt + 1}/{self._max_retries}), "
                        f"retrying in {delay}s: {e}"
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"Redis operation failed after {self._max_retries} attempts: {e}")

            except RedisError as e:
                logger.error(f"Redis operation failed with non-transient error: {e}")
                raise PersistenceFailure(f"Redis operation failed: {e}") from e

        raise PersistenceFailure(
            f"Redis operation failed after {self._max_retries} retries: {last_error}"
        )

    def _state_key(self, pull_request_id: int) -> str:
        """Get Redis key for a pull request's notification state."""
        prefix = self._key_prefix
        if prefix is None:
            from review_notifier.config import settings
            prefix = settings.redis_key_prefix
        return self.STATE_KEY.format(prefix=prefix, pull_request_id=pull_request_id)

    @staticmethod
    def _serialize(state: NotificationState) -> str:
        return json.dumps(state.model_dump(mode='json'))

    async def read(self, pull_request_id: int) -> Optional[NotificationState]:
        """
        Read the notification state for a pull request.

        Args:
            pull_request_id: Stable upstream pull request id

        Returns:
            NotificationState if one was persisted, None otherwise

        Raises:
            PersistenceFailure: If the read fails or the record is corrupt
        """
        async def _read():
            async with self._get_client() as client:
                return await client.get(self._state_key(pull_request_id))

        state_json = await self._retry_operation(_read)

        if not state_json:
            return None

        try:
            state = NotificationState.model_validate_json(state_json)
        except ValidationError as e:
            raise PersistenceFailure(
                f"Corrupt notification state for pull request {pull_request_id}: {e}"
            ) from e

        logger.debug(f"Read notification state for pull request {pull_request_id}")
        return state

    async def create(self, pull_request_id: int, state: NotificationState) -> None:
        """
        Persist the first notification state for a pull request.

        Raises:
            AlreadyExists: If a state is already stored for the pull request
            PersistenceFailure: If the write fails
        """
        async def _create():
            async with self._get_client() as client:
                return await client.set(
                    self._state_key(pull_request_id),
                    self._serialize(state),
                    nx=True
                )

        created = await self._retry_operation(_create)

        if not created:
            raise AlreadyExists(pull_request_id)

        logger.debug(f"Created notification state for pull request {pull_request_id}")

    async def update(self, pull_request_id: int, state: NotificationState) -> None:
        """
        Replace the stored notification state for a pull request.

        Raises:
            PersistenceFailure: If the write fails
        """
        async def _update():
            async with self._get_client() as client:
                await client.set(self._state_key(pull_request_id), self._serialize(state))

        await self._retry_operation(_update)

        logger.debug(f"Updated notification state for pull request {pull_request_id}")

    async def ping(self) -> bool:
        """
        Test Redis connection.

        Raises:
            PersistenceFailure: If ping fails
        """
        async def _ping():
            async with self._get_client() as client:
                return await client.ping()

        return await self._retry_operation(_ping)
