"""
Chat client component.

Posts and edits notification messages in Rocket.Chat rooms through the REST
API, authenticated as a bot user with a personal access token.
"""

import time
from typing import Any, Dict, Optional

import httpx

from review_notifier.errors import ChatApiError
from review_notifier.models.chat import ChatRoom, ChatUser
from review_notifier.models.message import MessageBody
from review_notifier.utils.logging import get_logger, log_api_call
from review_notifier.utils.resilience import retry_with_backoff


logger = get_logger(__name__)


class RocketChatClient:
    """Rocket.Chat REST client for the capabilities the sync engine needs."""

    def __init__(
        self,
        base_url: str,
        user_id: Optional[str] = None,
        auth_token: Optional[str] = None,
        alias: Optional[str] = None,
        emoji: Optional[str] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the chat client.

        Args:
            base_url: Rocket.Chat server url
            user_id: Bot user id (X-User-Id)
            auth_token: Bot personal access token (X-Auth-Token)
            alias: Display name for created messages
            emoji: Emoji avatar for created messages
            max_retries: Maximum number of attempts on transport errors
            retry_delay: Base delay in seconds for exponential backoff
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._user_id = user_id
        self._auth_token = auth_token
        self._alias = alias
        self._emoji = emoji
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def has_credentials(self) -> bool:
        return bool(self._user_id and self._auth_token)

    async def initialize(self) -> None:
        """Open the underlying HTTP client."""
        if self._client is not None:
            return

        headers = {}
        if self.has_credentials:
            headers = {"X-User-Id": self._user_id, "X-Auth-Token": self._auth_token}

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            transport=self._transport
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request, retrying transport errors.

        Raises:
            ChatApiError: If the request cannot be sent
        """
        await self.initialize()

        send = retry_with_backoff(
            max_retries=self._max_retries,
            base_delay=self._retry_delay,
            exceptions=(httpx.TransportError,)
        )(self._client.request)

        start_time = time.time()
        try:
            response = await send(method, endpoint, **kwargs)
        except httpx.HTTPError as e:
            log_api_call(logger, service="rocketchat", endpoint=endpoint, method=method, error=str(e))
            raise ChatApiError(f"{method} {endpoint} failed: {e}") from e

        log_api_call(
            logger,
            service="rocketchat",
            endpoint=endpoint,
            method=method,
            status_code=response.status_code,
            duration_ms=(time.time() - start_time) * 1000
        )
        return response

    @staticmethod
    def _json(response: httpx.Response, endpoint: str) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise ChatApiError(f"Malformed response from {endpoint}: {e}") from e

        if not isinstance(data, dict) or not data.get("success", False):
            error = data.get("error") if isinstance(data, dict) else None
            raise ChatApiError(
                f"{endpoint} returned {response.status_code}: {error or 'unsuccessful'}"
            )
        return data

    async def get_acting_user(self) -> Optional[ChatUser]:
        """
        Look up the user messages are posted as.

        Returns:
            ChatUser, or None when no credentials are configured or the
            server rejects them
        """
        if not self.has_credentials:
            logger.warning("Chat credentials are not configured")
            return None

        endpoint = "/api/v1/me"
        response = await self._request("GET", endpoint)

        if response.status_code in (401, 403, 404):
            logger.warning(f"Chat server rejected bot credentials ({response.status_code})")
            return None

        data = self._json(response, endpoint)
        return ChatUser(id=data["_id"], username=data["username"])

    async def get_room(self, room_id: str) -> Optional[ChatRoom]:
        """
        Look up a room by id.

        Returns:
            ChatRoom, or None if the room does not exist or is not visible
        """
        endpoint = "/api/v1/rooms.info"
        response = await self._request("GET", endpoint, params={"roomId": room_id})

        if response.status_code in (400, 403, 404):
            logger.warning(f"Room {room_id} not found ({response.status_code})")
            return None

        room = self._json(response, endpoint).get("room")
        if not room:
            return None

        return ChatRoom(id=room["_id"], name=room.get("name") or room.get("fname"))

    async def create_message(self, room: ChatRoom, author: ChatUser, body: MessageBody) -> str:
        """
        Post a new message in a room.

        Returns:
            Id of the created message

        Raises:
            ChatApiError: If the message is not created
        """
        message: Dict[str, Any] = {
            "rid": room.id,
            "msg": body.text,
            "blocks": body.wire_blocks(),
        }
        if self._alias:
            message["alias"] = self._alias
        if self._emoji:
            message["emoji"] = self._emoji

        endpoint = "/api/v1/chat.sendMessage"
        response = await self._request("POST", endpoint, json={"message": message})
        data = self._json(response, endpoint)

        message_id = (data.get("message") or {}).get("_id")
        if not message_id:
            raise ChatApiError(f"{endpoint} did not return a message id")

        logger.debug(f"Created message {message_id} in room {room.id} as {author.username}")
        return message_id

    async def update_message(
        self,
        message_id: str,
        room: ChatRoom,
        author: ChatUser,
        body: MessageBody
    ) -> None:
        """
        Replace the content of a message previously posted by the bot.

        Raises:
            ChatApiError: If the edit is rejected
        """
        endpoint = "/api/v1/chat.update"
        response = await self._request(
            "POST",
            endpoint,
            json={
                "roomId": room.id,
                "msgId": message_id,
                "text": body.text,
                "blocks": body.wire_blocks(),
            }
        )
        self._json(response, endpoint)

        logger.debug(f"Updated message {message_id} in room {room.id} as {author.username}")
