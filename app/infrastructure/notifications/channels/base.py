"""Notification channel abstract base class.

Every channel provider (email, sms, push, inApp, whatsapp) implements
this interface.
"""

from abc import ABC, abstractmethod

from infrastructure.notifications.models import ChannelMessage
from infrastructure.operations import OperationResult

# Channel result data key signalling the provider accepted the message
# and will report the final outcome through the status callback.
ACCEPTED = "accepted"


class NotificationChannel(ABC):
    """Abstract base class for notification channels.

    ``send`` should return an OperationResult instead of raising. The
    delivery executor still guards against exceptions and timeouts, so a
    misbehaving provider can only fail its own delivery record.

    Result conventions:
        - Success: ``OperationResult.success(data={"external_id": "..."})``
        - Accepted for asynchronous delivery:
          ``OperationResult.success(data={"external_id": "...", "accepted": True})``
        - Failure: any error status, ``message`` is recorded on the record
    """

    @property
    @abstractmethod
    def channel_name(self) -> str:
        """Channel identifier used for routing and logging."""
        pass

    @abstractmethod
    def send(self, message: ChannelMessage) -> OperationResult:
        """Deliver one message to one recipient."""
        pass

    @abstractmethod
    def health_check(self) -> OperationResult:
        """Check channel health (connectivity, credentials)."""
        pass
