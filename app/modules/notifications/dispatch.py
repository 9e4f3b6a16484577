"""Dispatch engine: turns emitted events into delivery records.

Per emission the flow is Emitted -> Matched -> Rendered -> Pending ->
Resolved. Immediate types are delivered synchronously through the channel
executor; scheduled types are held as pending records with
``scheduled_for`` set and picked up by the scheduler tick.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError

from infrastructure.identity import PlatformUser, UserDirectory
from infrastructure.logging import get_module_logger
from infrastructure.notifications import ACCEPTED, ChannelMessage, DeliveryExecutor
from modules.notifications.domain import (
    DeliveryRecord,
    DeliveryStatus,
    FieldError,
    NotificationType,
    RecordAlreadyResolved,
    UnknownEvent,
    ValidationError,
    is_deferred,
    next_occurrence,
)
from modules.notifications.ledger import DeliveryLedger
from modules.notifications.registry import EventRegistry
from modules.notifications.renderer import recipient_bindings, render
from modules.notifications.store import NotificationTypeStore

logger = get_module_logger()

NO_UPCOMING_OCCURRENCE = "Schedule has no upcoming occurrence"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DispatchEngine:
    """Match, render, record and deliver notifications for emitted events.

    Args:
        registry: Event registry confirming emitted keys and catalogs.
        types: Notification type store.
        ledger: Delivery ledger receiving one record per recipient and channel.
        directory: User directory resolving audiences by role.
        executor: Channel delivery executor.
        timezone_name: Time zone schedule times are interpreted in.
        clock: Returns the current aware datetime (injectable for tests).
    """

    def __init__(
        self,
        registry: EventRegistry,
        types: NotificationTypeStore,
        ledger: DeliveryLedger,
        directory: UserDirectory,
        executor: DeliveryExecutor,
        timezone_name: str = "UTC",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._registry = registry
        self._types = types
        self._ledger = ledger
        self._directory = directory
        self._executor = executor
        self._timezone_name = timezone_name
        self._clock = clock

    def emit(
        self, event_key: str, context: Optional[Mapping[str, Any]] = None
    ) -> List[DeliveryRecord]:
        """Create and dispatch deliveries for one emitted event.

        Channel failures and timeouts end up as failed records; they are
        never raised to the emitter.

        Returns:
            Every created record, in its state after immediate delivery.

        Raises:
            UnknownEvent: ``event_key`` is not registered.
        """
        if not self._registry.exists(event_key):
            logger.warning("unknown_event_emitted", event_type=event_key)
            raise UnknownEvent(event_key)

        context = dict(context or {})
        matched = self._types.active_for_event(event_key)
        if not matched:
            logger.info("no_notification_types_matched", event_type=event_key)
            return []

        emission_id = str(uuid.uuid4())
        catalog = self._registry.catalog(event_key)
        now = self._clock()

        immediate: List[DeliveryRecord] = []
        records: List[DeliveryRecord] = []
        for notification_type in matched:
            audience = self._audience(notification_type)
            channels = notification_type.channels.enabled()
            deferred = is_deferred(notification_type.schedule)
            scheduled_for = (
                next_occurrence(notification_type.schedule, now, self._timezone_name)
                if deferred
                else None
            )
            for user in audience:
                bindings = recipient_bindings(user, context)
                title = render(notification_type.title, bindings, catalog)
                body = render(notification_type.message_template, bindings, catalog)
                for channel in channels:
                    record = DeliveryRecord(
                        id=str(uuid.uuid4()),
                        emission_id=emission_id,
                        event_type=event_key,
                        notification_type_id=notification_type.id,
                        recipient_user_id=user.id,
                        recipient_name=user.name,
                        recipient_role=user.role,
                        channel=channel,
                        priority=notification_type.priority,
                        rendered_title=title,
                        rendered_body=body,
                        context=context if deferred else {},
                        created_at=now,
                        scheduled_for=scheduled_for,
                    )
                    self._ledger.append(record)
                    if not deferred:
                        immediate.append(record)
                    elif scheduled_for is None:
                        record = self._ledger.resolve(
                            record.id,
                            DeliveryStatus.FAILED,
                            error_message=NO_UPCOMING_OCCURRENCE,
                        )
                    records.append(record)

        delivered = {r.id: r for r in self.deliver_records(immediate)}
        records = [delivered.get(r.id, r) for r in records]
        logger.info(
            "event_emitted",
            event_type=event_key,
            emission_id=emission_id,
            matched_types=len(matched),
            records=len(records),
            deferred=len(records) - len(immediate),
        )
        return records

    def deliver_records(self, records: List[DeliveryRecord]) -> List[DeliveryRecord]:
        """Send pending records through their channels and resolve them.

        Returns:
            The records after resolution. Records another worker resolved
            first are returned as currently stored.
        """
        if not records:
            return []

        messages: List[ChannelMessage] = []
        sendable: List[DeliveryRecord] = []
        results: Dict[str, DeliveryRecord] = {}
        for record in records:
            try:
                messages.append(self._message(record))
                sendable.append(record)
            except PydanticValidationError as e:
                logger.warning(
                    "channel_message_invalid", record_id=record.id, error=str(e)
                )
                results[record.id] = self._settle(
                    record,
                    DeliveryStatus.FAILED,
                    error_message=f"Invalid recipient: {e}",
                )

        outcomes = self._executor.deliver_all(messages)
        for record, outcome in zip(sendable, outcomes):
            data = outcome.data if isinstance(outcome.data, dict) else {}
            external_id = data.get("external_id")
            if outcome.is_success and data.get(ACCEPTED):
                results[record.id] = self._accept(record, external_id)
            elif outcome.is_success:
                results[record.id] = self._settle(
                    record, DeliveryStatus.SUCCESS, external_id=external_id
                )
            else:
                results[record.id] = self._settle(
                    record,
                    DeliveryStatus.FAILED,
                    error_message=outcome.message,
                    external_id=external_id,
                )
        return [results[r.id] for r in records]

    def preview(
        self,
        context: Optional[Mapping[str, Any]] = None,
        notification_type_id: Optional[str] = None,
        template: Optional[str] = None,
        title: Optional[str] = None,
        event_type: Optional[str] = None,
    ) -> Dict[str, str]:
        """Render a title and body without writing to the ledger.

        Renders a stored type when ``notification_type_id`` is given,
        otherwise the supplied ``template`` (and optional ``title``) against
        the catalog of ``event_type`` or the default catalog.

        Raises:
            NotificationTypeNotFound: Unknown type id.
            UnknownEvent: Unknown ``event_type``.
            ValidationError: Neither a type id nor a template was given.
        """
        bindings = dict(context or {})
        if notification_type_id:
            notification_type = self._types.get(notification_type_id)
            title = notification_type.title
            template = notification_type.message_template
            event_type = notification_type.event_type
        elif not template:
            raise ValidationError(
                [
                    FieldError(
                        field="messageTemplate",
                        message="Provide a notificationTypeId or a messageTemplate",
                    )
                ]
            )
        catalog = self._registry.catalog(event_type)
        return {
            "title": render(title or "", bindings, catalog),
            "body": render(template, bindings, catalog),
        }

    def _audience(self, notification_type: NotificationType) -> List[PlatformUser]:
        seen: Dict[str, PlatformUser] = {}
        for user in self._directory.users_with_roles(notification_type.roles):
            seen.setdefault(user.id, user)
        return list(seen.values())

    def _message(self, record: DeliveryRecord) -> ChannelMessage:
        user = self._directory.get_user(record.recipient_user_id)
        return ChannelMessage(
            record_id=record.id,
            channel=record.channel.value,
            recipient_id=record.recipient_user_id,
            recipient_name=record.recipient_name,
            recipient_email=user.email if user else None,
            recipient_phone=user.phone_number if user else None,
            title=record.rendered_title,
            body=record.rendered_body,
            priority=record.priority.value,
            metadata={
                "event_type": record.event_type,
                "notification_type_id": record.notification_type_id,
                "emission_id": record.emission_id,
            },
        )

    def _settle(
        self, record: DeliveryRecord, status: DeliveryStatus, **kwargs: Any
    ) -> DeliveryRecord:
        try:
            return self._ledger.resolve(record.id, status, **kwargs)
        except RecordAlreadyResolved as e:
            logger.info(
                "delivery_already_resolved", record_id=record.id, status=e.status
            )
            return self._ledger.get(record.id)

    def _accept(
        self, record: DeliveryRecord, external_id: Optional[str]
    ) -> DeliveryRecord:
        try:
            return self._ledger.mark_sent(record.id, external_id=external_id)
        except RecordAlreadyResolved:
            return self._ledger.get(record.id)

