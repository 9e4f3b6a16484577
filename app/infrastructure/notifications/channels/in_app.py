"""In-app channel writing notifications to the recipient's inbox."""

from datetime import datetime, timezone

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import ChannelMessage
from infrastructure.operations import OperationResult
from infrastructure.persistence import DocumentStore, DuplicateKeyError

logger = get_module_logger()

INBOX_COLLECTION = "in_app_notifications"


class InAppChannel(NotificationChannel):
    """In-app inbox channel.

    Each delivered message becomes one inbox document keyed by its
    delivery record id, so re-sending the same record never duplicates
    the inbox entry.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    @property
    def channel_name(self) -> str:
        return "inApp"

    def send(self, message: ChannelMessage) -> OperationResult:
        document = {
            "id": message.record_id,
            "user_id": message.recipient_id,
            "title": message.title,
            "body": message.body,
            "priority": message.priority,
            "event_type": message.metadata.get("event_type"),
            "is_read": False,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self._store.insert(INBOX_COLLECTION, message.record_id, document)
        except DuplicateKeyError:
            logger.info("in_app_notification_already_stored", record_id=message.record_id)
        return OperationResult.success(
            data={"external_id": message.record_id},
            message="Stored in recipient inbox",
        )

    def health_check(self) -> OperationResult:
        return OperationResult.success(message="In-app inbox available")
