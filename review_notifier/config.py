"""
Application configuration management.
"""

import logging
from typing import Dict, Iterator, Mapping, Optional

from pydantic_settings import BaseSettings


logger = logging.getLogger(__name__)


class TeamRooms(Mapping[str, str]):
    """
    Immutable team name -> chat room id table.

    Built once at startup from the ``TEAM_ROOMS`` setting and handed to the
    destination resolver.
    """

    def __init__(self, rooms: Optional[Mapping[str, str]] = None):
        self._rooms: Dict[str, str] = dict(rooms or {})

    @classmethod
    def parse(cls, raw: str) -> "TeamRooms":
        """
        Parse a ``team:room,team:room`` setting value.

        Entries without a colon or with an empty side are skipped. A team
        listed twice keeps its last room.

        Args:
            raw: Comma separated ``team:room`` pairs

        Returns:
            TeamRooms table
        """
        rooms: Dict[str, str] = {}

        for entry in (raw or "").split(","):
            entry = entry.strip()
            if not entry:
                continue

            team, sep, room = entry.partition(":")
            team, room = team.strip(), room.strip()

            if not sep or not team or not room:
                logger.warning(f"Ignoring malformed team room entry: {entry!r}")
                continue

            rooms[team] = room

        return cls(rooms)

    def room_for(self, team: str) -> Optional[str]:
        """Return the room id configured for a team, if any."""
        return self._rooms.get(team)

    def __getitem__(self, team: str) -> str:
        return self._rooms[team]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rooms)

    def __len__(self) -> int:
        return len(self._rooms)

    def __repr__(self) -> str:
        return f"TeamRooms({self._rooms!r})"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "review_notifier"

    # Rocket.Chat
    chat_base_url: str = "http://localhost:3000"
    chat_user_id: Optional[str] = None
    chat_auth_token: Optional[str] = None
    message_alias: str = "Fudelage"
    message_emoji: str = ":fredgazzo:"

    # GitHub
    github_token: Optional[str] = None
    github_user_agent: str = "review-notifier"

    # Team -> room routing, e.g. "frontend:ROOMID1,backend:ROOMID2"
    team_rooms: str = ""

    # Webhook
    webhook_secret: Optional[str] = None

    # Application
    log_level: str = "INFO"
    serialize_per_pull_request: bool = False
    http_max_retries: int = 3
    http_retry_delay: float = 1.0

    class Config:
        env_file = ".env"
        case_sensitive = False

    def team_room_table(self) -> TeamRooms:
        """Build the team -> room table from the ``team_rooms`` setting."""
        return TeamRooms.parse(self.team_rooms)


# Global settings instance
settings = Settings()
