"""
Destination Resolver component.

Maps the teams requested for review on a pull request to chat room ids.
"""

import logging
from typing import Iterable, List

from review_notifier.config import TeamRooms
from review_notifier.models.pull_request import RequestedTeam


logger = logging.getLogger(__name__)


class DestinationResolver:
    """Resolves requested teams to destination rooms using a static table."""

    def __init__(self, team_rooms: TeamRooms):
        self._team_rooms = team_rooms

    @property
    def team_rooms(self) -> TeamRooms:
        return self._team_rooms

    def resolve(self, requested_teams: Iterable[RequestedTeam]) -> List[str]:
        """
        Return one room id per requested team that has a configured room.

        Teams without a room are dropped silently.
        """
        destinations: List[str] = []

        for team in requested_teams:
            room_id = self._team_rooms.room_for(team.name)
            if room_id is None:
                logger.debug(f"No room configured for team {team.name}")
                continue
            destinations.append(room_id)

        return destinations
