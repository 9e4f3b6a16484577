"""Delivery ledger: one record per attempted send, with status transitions.

Records are append-only. The only mutation is the single move out of
``pending`` (plus send timestamps, error and provider id), performed as a
compare-and-set so that two resolvers of the same record cannot both win.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from infrastructure.logging import get_module_logger
from infrastructure.persistence import (
    ConditionFailedError,
    DocumentNotFoundError,
    DocumentStore,
)
from modules.notifications.domain import (
    DeliveryRecord,
    DeliveryRecordNotFound,
    DeliveryStatus,
    RecordAlreadyResolved,
)

logger = get_module_logger()

DELIVERIES_COLLECTION = "notification_deliveries"

EXPORT_COLUMNS = [
    "ID",
    "Notification Type",
    "Event",
    "User",
    "Role",
    "Channel",
    "Status",
    "Created At",
    "Sent At",
    "Delivered At",
    "Error",
]

TERMINAL_STATUSES = (DeliveryStatus.SUCCESS, DeliveryStatus.FAILED)


class DeliveryLedger:
    def __init__(self, store: DocumentStore):
        self._store = store

    def append(self, record: DeliveryRecord) -> DeliveryRecord:
        self._store.insert(
            DELIVERIES_COLLECTION, record.id, record.model_dump(mode="json")
        )
        return record

    def get(self, record_id: str) -> DeliveryRecord:
        document = self._store.get(DELIVERIES_COLLECTION, record_id)
        if document is None:
            raise DeliveryRecordNotFound(record_id)
        return DeliveryRecord.model_validate(document)

    def resolve(
        self,
        record_id: str,
        status: DeliveryStatus,
        error_message: Optional[str] = None,
        external_id: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> DeliveryRecord:
        """Move a pending record to a terminal status.

        Args:
            record_id: Delivery record id.
            status: ``success`` or ``failed``.
            error_message: Failure reason, recorded on failed records.
            external_id: Provider message id, when the channel returned one.
            at: Resolution time, defaults to now.

        Raises:
            DeliveryRecordNotFound: No such record.
            RecordAlreadyResolved: The record already left ``pending``.
        """
        status = DeliveryStatus(status)
        if status not in TERMINAL_STATUSES:
            raise ValueError(f"Cannot resolve a delivery record to {status.value}")

        resolved_at = (at or datetime.now(timezone.utc)).isoformat()
        changes: Dict[str, Any] = {"status": status.value}
        if status == DeliveryStatus.SUCCESS:
            changes["delivered_at"] = resolved_at
        else:
            changes["error_message"] = error_message or "Delivery failed"
        if external_id:
            changes["external_id"] = external_id

        current = self.get(record_id)
        if current.sent_at is None:
            changes["sent_at"] = resolved_at

        try:
            document = self._store.update(
                DELIVERIES_COLLECTION,
                record_id,
                changes,
                expected={"status": DeliveryStatus.PENDING.value},
            )
        except DocumentNotFoundError:
            raise DeliveryRecordNotFound(record_id)
        except ConditionFailedError:
            latest = self.get(record_id)
            raise RecordAlreadyResolved(record_id, latest.status.value)

        logger.info(
            "delivery_resolved",
            record_id=record_id,
            status=status.value,
            channel=document.get("channel"),
            error_message=changes.get("error_message"),
        )
        return DeliveryRecord.model_validate(document)

    def mark_sent(
        self,
        record_id: str,
        external_id: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> DeliveryRecord:
        """Record a provider hand-off for a record that stays pending.

        Used when a channel accepts a message and reports the outcome later
        through the status callback.
        """
        changes: Dict[str, Any] = {
            "sent_at": (at or datetime.now(timezone.utc)).isoformat()
        }
        if external_id:
            changes["external_id"] = external_id
        try:
            document = self._store.update(
                DELIVERIES_COLLECTION,
                record_id,
                changes,
                expected={"status": DeliveryStatus.PENDING.value},
            )
        except DocumentNotFoundError:
            raise DeliveryRecordNotFound(record_id)
        except ConditionFailedError:
            latest = self.get(record_id)
            raise RecordAlreadyResolved(record_id, latest.status.value)
        logger.info("delivery_accepted", record_id=record_id, external_id=external_id)
        return DeliveryRecord.model_validate(document)

    def query(
        self,
        status: Optional[str] = None,
        channel: Optional[str] = None,
        event_type: Optional[str] = None,
        notification_type_id: Optional[str] = None,
        recipient_user_id: Optional[str] = None,
        emission_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[DeliveryRecord]:
        """Records matching every given filter, newest first."""
        filters = {
            name: value
            for name, value in {
                "status": status,
                "channel": channel,
                "event_type": event_type,
                "notification_type_id": notification_type_id,
                "recipient_user_id": recipient_user_id,
                "emission_id": emission_id,
            }.items()
            if value is not None
        }
        records = [
            DeliveryRecord.model_validate(d)
            for d in self._store.list(DELIVERIES_COLLECTION, filters or None)
        ]
        if since is not None:
            records = [r for r in records if r.created_at >= _aware(since)]
        if until is not None:
            records = [r for r in records if r.created_at <= _aware(until)]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit] if limit else records

    def pending_due(self, now: Optional[datetime] = None) -> List[DeliveryRecord]:
        """Unsent scheduled records whose occurrence is at or before ``now``.

        Records a channel has accepted stay pending with ``sent_at`` set
        until the provider callback arrives; they are not due again.
        """
        now = _aware(now or datetime.now(timezone.utc))
        records = [
            DeliveryRecord.model_validate(d)
            for d in self._store.list(
                DELIVERIES_COLLECTION, {"status": DeliveryStatus.PENDING.value}
            )
        ]
        due = [
            r
            for r in records
            if r.sent_at is None
            and r.scheduled_for is not None
            and r.scheduled_for <= now
        ]
        return sorted(due, key=lambda r: (r.scheduled_for, r.created_at))

    def to_frame(self, records: List[DeliveryRecord]) -> pd.DataFrame:
        return pd.DataFrame(
            [r.model_dump(mode="json") for r in records],
            columns=list(DeliveryRecord.model_fields.keys()),
        )

    def export_csv(
        self,
        records: List[DeliveryRecord],
        type_titles: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Render records as CSV, labelling types by title when known."""
        titles = type_titles or {}
        frame = self.to_frame(records)
        export = pd.DataFrame(
            {
                "ID": frame["id"],
                "Notification Type": frame["notification_type_id"].map(
                    lambda type_id: titles.get(type_id, type_id)
                ),
                "Event": frame["event_type"],
                "User": frame["recipient_name"].where(
                    frame["recipient_name"].astype(bool), frame["recipient_user_id"]
                ),
                "Role": frame["recipient_role"],
                "Channel": frame["channel"],
                "Status": frame["status"],
                "Created At": frame["created_at"],
                "Sent At": frame["sent_at"],
                "Delivered At": frame["delivered_at"],
                "Error": frame["error_message"],
            },
            columns=EXPORT_COLUMNS,
        )
        return export.to_csv(index=False)

    def analytics(self, records: List[DeliveryRecord]) -> Dict[str, Any]:
        """Totals and success rates overall, per channel and per notification type.

        Success rate is successes over resolved (success + failed) records;
        0.0 while nothing is resolved.
        """
        frame = self.to_frame(records)
        return {
            **_status_summary(frame),
            "by_channel": _grouped_summary(frame, "channel"),
            "by_notification_type": _grouped_summary(frame, "notification_type_id"),
        }


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _status_summary(frame: pd.DataFrame) -> Dict[str, Any]:
    counts = frame["status"].value_counts()
    success = int(counts.get(DeliveryStatus.SUCCESS.value, 0))
    failed = int(counts.get(DeliveryStatus.FAILED.value, 0))
    pending = int(counts.get(DeliveryStatus.PENDING.value, 0))
    resolved = success + failed
    return {
        "total": int(len(frame)),
        "success": success,
        "failed": failed,
        "pending": pending,
        "success_rate": round(success / resolved, 4) if resolved else 0.0,
    }


def _grouped_summary(frame: pd.DataFrame, column: str) -> Dict[str, Dict[str, Any]]:
    return {
        str(name): _status_summary(group)
        for name, group in frame.groupby(column, sort=True)
    }
