"""Persisted destination/message mapping models."""

from typing import List, Optional

from pydantic import BaseModel, field_validator


class DestinationMapping(BaseModel):
    """One chat room notified about a pull request."""

    destination_id: str
    message_id: Optional[str] = None  # None until the message is created

    @property
    def notified(self) -> bool:
        return self.message_id is not None


class NotificationState(BaseModel):
    """All destination mappings for one pull request, keyed by its id."""

    pull_request_id: int
    mappings: List[DestinationMapping] = []

    @field_validator("mappings")
    @classmethod
    def _unique_destinations(cls, mappings: List[DestinationMapping]) -> List[DestinationMapping]:
        seen = set()
        for mapping in mappings:
            if mapping.destination_id in seen:
                raise ValueError(f"Duplicate destination {mapping.destination_id}")
            seen.add(mapping.destination_id)
        return mappings

    @property
    def destination_ids(self) -> List[str]:
        return [mapping.destination_id for mapping in self.mappings]
