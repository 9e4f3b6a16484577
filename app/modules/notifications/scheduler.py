"""Delivery of scheduled notifications whose occurrence is due.

Run from the periodic job. Several workers may tick at the same time: each
unit of work (notification type, occurrence, emission) is claimed through
the idempotency cache before anything is sent, so only one worker
delivers it.
"""

from collections import OrderedDict
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from infrastructure.idempotency import IdempotencyCache, IdempotencyKeyBuilder
from infrastructure.logging import get_module_logger
from modules.notifications.dispatch import DispatchEngine
from modules.notifications.domain import (
    DeliveryRecord,
    DeliveryStatus,
    NotificationTypeNotFound,
    RecordAlreadyResolved,
)
from modules.notifications.ledger import DeliveryLedger
from modules.notifications.store import NotificationTypeStore

logger = get_module_logger()

TYPE_DELETED = "Notification type was deleted before the scheduled occurrence"
TYPE_INACTIVE = "Notification type is inactive"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScheduledDispatcher:
    def __init__(
        self,
        ledger: DeliveryLedger,
        types: NotificationTypeStore,
        engine: DispatchEngine,
        idempotency: IdempotencyCache,
        claim_ttl_seconds: int = 86400,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._ledger = ledger
        self._types = types
        self._engine = engine
        self._idempotency = idempotency
        self._claim_ttl_seconds = claim_ttl_seconds
        self._clock = clock
        self._keys = IdempotencyKeyBuilder(namespace="scheduled_notifications")

    def process_due(self, now: Optional[datetime] = None) -> Dict[str, int]:
        """Deliver every due scheduled record not already claimed elsewhere.

        Records of a type that was deactivated or deleted since the
        emission are resolved as failed instead of sent.

        Returns:
            Counters: due records, claimed and skipped groups, sent and
            failed records.
        """
        now = now or self._clock()
        due = self._ledger.pending_due(now)
        stats = {"due": len(due), "claimed": 0, "skipped": 0, "sent": 0, "failed": 0}
        if not due:
            return stats

        for (type_id, occurrence, emission_id), records in self._groups(due).items():
            key = self._keys.build(
                "dispatch",
                notification_type_id=type_id,
                occurrence=occurrence,
                emission_id=emission_id,
            )
            if not self._idempotency.claim(key, self._claim_ttl_seconds):
                stats["skipped"] += 1
                continue
            stats["claimed"] += 1

            try:
                resolved = self._dispatch_group(type_id, records)
            except Exception as e:
                self._idempotency.release(key)
                logger.error(
                    "scheduled_dispatch_failed",
                    notification_type_id=type_id,
                    occurrence=occurrence,
                    emission_id=emission_id,
                    error=str(e),
                    exc_info=True,
                )
                continue
            for record in resolved:
                if record.status == DeliveryStatus.FAILED:
                    stats["failed"] += 1
                else:
                    stats["sent"] += 1

        logger.info("scheduled_notifications_processed", **stats)
        return stats

    def _dispatch_group(
        self, type_id: str, records: List[DeliveryRecord]
    ) -> List[DeliveryRecord]:
        try:
            notification_type = self._types.get(type_id)
        except NotificationTypeNotFound:
            return self._fail_all(records, TYPE_DELETED)
        if not notification_type.is_active:
            return self._fail_all(records, TYPE_INACTIVE)
        return self._engine.deliver_records(records)

    def _fail_all(
        self, records: List[DeliveryRecord], reason: str
    ) -> List[DeliveryRecord]:
        resolved = []
        for record in records:
            try:
                resolved.append(
                    self._ledger.resolve(
                        record.id, DeliveryStatus.FAILED, error_message=reason
                    )
                )
            except RecordAlreadyResolved:
                resolved.append(self._ledger.get(record.id))
        return resolved

    @staticmethod
    def _groups(
        records: List[DeliveryRecord],
    ) -> "OrderedDict[Tuple[str, str, str], List[DeliveryRecord]]":
        groups: "OrderedDict[Tuple[str, str, str], List[DeliveryRecord]]" = OrderedDict()
        for record in records:
            occurrence = record.scheduled_for.isoformat()
            key = (record.notification_type_id, occurrence, record.emission_id)
            groups.setdefault(key, []).append(record)
        return groups
