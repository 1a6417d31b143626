"""
Unit tests for the Redis notification store.

Tests Redis operations using fakeredis for isolated testing.
"""

import json
from typing import AsyncGenerator

import fakeredis
import pytest

from review_notifier.errors import AlreadyExists, PersistenceFailure
from review_notifier.models.notification import DestinationMapping, NotificationState
from review_notifier.services.notification_store import NotificationStore


@pytest.fixture
async def fake_redis() -> AsyncGenerator[fakeredis.FakeAsyncRedis, None]:
    fake = fakeredis.FakeAsyncRedis(decode_responses=True)
    yield fake
    await fake.flushdb()
    await fake.aclose()


@pytest.fixture
def store(fake_redis) -> NotificationStore:
    """Create store with fakeredis for testing."""
    store = NotificationStore(redis_url="redis://localhost:6379/0", key_prefix="notifier")
    store._client = fake_redis
    return store


@pytest.fixture
def sample_state() -> NotificationState:
    return NotificationState(
        pull_request_id=1001,
        mappings=[
            DestinationMapping(destination_id="ROOM_A", message_id="msg-1"),
            DestinationMapping(destination_id="ROOM_B"),
        ]
    )


class TestNotificationStore:
    """Test create/read/update of notification state."""

    @pytest.mark.asyncio
    async def test_read_missing_state(self, store: NotificationStore):
        assert await store.read(1001) is None

    @pytest.mark.asyncio
    async def test_create_and_read(self, store: NotificationStore, sample_state):
        await store.create(1001, sample_state)

        state = await store.read(1001)

        assert state == sample_state
        assert state.mappings[1].message_id is None

    @pytest.mark.asyncio
    async def test_create_twice_raises_already_exists(self, store: NotificationStore, sample_state):
        await store.create(1001, sample_state)

        with pytest.raises(AlreadyExists) as exc_info:
            await store.create(1001, sample_state)

        assert exc_info.value.pull_request_id == 1001
        assert isinstance(exc_info.value, PersistenceFailure)

    @pytest.mark.asyncio
    async def test_update_replaces_whole_state(self, store: NotificationStore, sample_state):
        await store.create(1001, sample_state)

        replacement = NotificationState(
            pull_request_id=1001,
            mappings=[
                DestinationMapping(destination_id="ROOM_A", message_id="msg-1"),
                DestinationMapping(destination_id="ROOM_B", message_id="msg-2"),
                DestinationMapping(destination_id="ROOM_C", message_id="msg-3"),
            ]
        )
        await store.update(1001, replacement)

        assert await store.read(1001) == replacement

    @pytest.mark.asyncio
    async def test_key_is_namespaced(self, store: NotificationStore, fake_redis, sample_state):
        await store.create(1001, sample_state)

        raw = await fake_redis.get("notifier:notification_state:1001")

        assert json.loads(raw)["mappings"][0] == {"destination_id": "ROOM_A", "message_id": "msg-1"}

    @pytest.mark.asyncio
    async def test_corrupt_record_raises(self, store: NotificationStore, fake_redis):
        await fake_redis.set("notifier:notification_state:1001", "{not json")

        with pytest.raises(PersistenceFailure):
            await store.read(1001)

    @pytest.mark.asyncio
    async def test_ping(self, store: NotificationStore):
        assert await store.ping() is True


@pytest.mark.asyncio
async def test_uninitialized_store_raises():
    store = NotificationStore(redis_url="redis://localhost:6379/0", key_prefix="notifier")

    with pytest.raises(PersistenceFailure):
        await store.read(1001)


def test_duplicate_destinations_rejected():
    with pytest.raises(ValueError):
        NotificationState(
            pull_request_id=1,
            mappings=[
                DestinationMapping(destination_id="ROOM_A"),
                DestinationMapping(destination_id="ROOM_A"),
            ]
        )
