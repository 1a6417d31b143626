"""
Error taxonomy for the notification sync engine.

Every error raised while reconciling a pull request derives from
NotificationSyncError so the orchestrator can catch, log and swallow them at
one place.
"""


class NotificationSyncError(Exception):
    """Base exception for notification sync errors."""
    pass


class MalformedPayload(NotificationSyncError):
    """Webhook body is not valid JSON or lacks the consumed fields."""
    pass


class DestinationUnresolved(NotificationSyncError):
    """A destination room could not be looked up."""

    def __init__(self, destination_id: str):
        super().__init__(f"Destination room {destination_id} could not be resolved")
        self.destination_id = destination_id


class UpstreamFetchFailed(NotificationSyncError):
    """Reviews could not be retrieved from the upstream API."""
    pass


class PersistenceFailure(NotificationSyncError):
    """Notification state could not be read or written."""
    pass


class AlreadyExists(PersistenceFailure):
    """Notification state already exists for the pull request."""

    def __init__(self, pull_request_id: int):
        super().__init__(f"Notification state already exists for pull request {pull_request_id}")
        self.pull_request_id = pull_request_id


class PreconditionUnmet(NotificationSyncError):
    """The acting chat identity is not available."""
    pass


class ChatApiError(NotificationSyncError):
    """The chat server rejected a message create or edit."""
    pass
