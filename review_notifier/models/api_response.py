"""API response data models."""

from pydantic import BaseModel


class WebhookAck(BaseModel):
    """Acknowledgment returned for every webhook delivery."""

    ok: bool = True
