"""Log-only channel for providers without a gateway integration."""

import uuid

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels.base import NotificationChannel
from infrastructure.notifications.models import ChannelMessage
from infrastructure.operations import OperationResult

logger = get_module_logger()


class DryRunChannel(NotificationChannel):
    """Channel that records the send in the logs and reports success.

    Used for email, sms, push and whatsapp until a gateway is wired in.
    """

    def __init__(self, name: str):
        self._name = name

    @property
    def channel_name(self) -> str:
        return self._name

    def send(self, message: ChannelMessage) -> OperationResult:
        external_id = f"dry-run-{uuid.uuid4().hex[:12]}"
        logger.info(
            "dry_run_notification_sent",
            channel=self._name,
            record_id=message.record_id,
            recipient_id=message.recipient_id,
            title=message.title,
            external_id=external_id,
        )
        return OperationResult.success(
            data={"external_id": external_id},
            message=f"Logged {self._name} delivery",
        )

    def health_check(self) -> OperationResult:
        return OperationResult.success(message=f"{self._name} dry-run channel")
