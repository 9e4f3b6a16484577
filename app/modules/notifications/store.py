"""Notification type store: CRUD over notification configurations."""

import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from pydantic.alias_generators import to_snake

from infrastructure.logging import get_module_logger
from infrastructure.persistence import (
    ConditionFailedError,
    DocumentNotFoundError,
    DocumentStore,
)
from modules.notifications.domain import (
    NotificationType,
    NotificationTypeNotFound,
)
from modules.notifications.registry import EventRegistry
from modules.notifications.validation import as_payload, validate_draft

logger = get_module_logger()

TYPES_COLLECTION = "notification_types"

# Concurrent writers retry their read-modify-write this many times.
MAX_WRITE_ATTEMPTS = 5


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _snake_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {to_snake(k): v for k, v in data.items()}


class NotificationTypeStore:
    """Validated, soft-deleting store of notification types.

    Writes after creation are compare-and-set on a ``revision`` counter, so two
    operators editing the same type never silently overwrite each other's
    change; the loser re-reads and re-applies its patch.
    """

    def __init__(
        self,
        store: DocumentStore,
        registry: EventRegistry,
        known_roles: Iterable[str],
    ):
        self._store = store
        self._registry = registry
        self._known_roles = list(known_roles)

    def create(
        self, payload: Mapping[str, Any], actor: Optional[str] = None
    ) -> NotificationType:
        """Validate and store a new notification type.

        Raises:
            ValidationError: Listing every violated field.
        """
        draft = validate_draft(payload, self._registry, self._known_roles)
        now = _now()
        document = draft.model_dump(mode="json")
        document.update(
            {
                "id": str(uuid.uuid4()),
                "created_by": actor or draft.created_by,
                "updated_by": actor or draft.updated_by,
                "created_at": now,
                "updated_at": now,
                "deleted_at": None,
                "revision": 0,
            }
        )
        self._store.insert(TYPES_COLLECTION, document["id"], document)
        logger.info(
            "notification_type_created",
            notification_type_id=document["id"],
            event_type=document["event_type"],
            roles=document["roles"],
        )
        return NotificationType.model_validate(document)

    def get(self, notification_type_id: str) -> NotificationType:
        document = self._load(notification_type_id)
        return NotificationType.model_validate(document)

    def update(
        self,
        notification_type_id: str,
        patch: Mapping[str, Any],
        actor: Optional[str] = None,
    ) -> NotificationType:
        """Apply a partial update.

        ``channels`` and ``schedule`` patches merge onto the stored values;
        changing only ``schedule.time`` keeps the stored days and cron. A
        patch switching the schedule type replaces the schedule.

        Raises:
            NotificationTypeNotFound: Missing or deleted id.
            ValidationError: The merged configuration is invalid.
        """
        changes = _snake_keys(patch)
        for field in (
            "id", "created_at", "created_by", "updated_at", "deleted_at", "revision"
        ):
            changes.pop(field, None)

        def merge(current: Dict[str, Any]) -> Dict[str, Any]:
            merged = as_payload(current)
            for field, value in changes.items():
                if field == "channels" and isinstance(value, Mapping):
                    merged["channels"] = {
                        **merged.get("channels", {}),
                        **_snake_keys(value),
                    }
                elif field == "schedule" and isinstance(value, Mapping):
                    stored = merged.get("schedule") or {}
                    if value.get("type") and value.get("type") != stored.get("type"):
                        merged["schedule"] = dict(value)
                    else:
                        merged["schedule"] = {**stored, **value}
                else:
                    merged[field] = value
            draft = validate_draft(merged, self._registry, self._known_roles)
            updated = draft.model_dump(mode="json")
            updated["created_by"] = current.get("created_by")
            updated["updated_by"] = actor or draft.updated_by
            updated["updated_at"] = _now()
            updated["revision"] = current.get("revision", 0) + 1
            return updated

        document = self._write(notification_type_id, merge)
        logger.info(
            "notification_type_updated",
            notification_type_id=notification_type_id,
            fields=sorted(changes.keys()),
        )
        return NotificationType.model_validate(document)

    def toggle_active(
        self, notification_type_id: str, actor: Optional[str] = None
    ) -> bool:
        """Flip ``is_active`` and return the new value."""

        def flip(current: Dict[str, Any]) -> Dict[str, Any]:
            return {
                "is_active": not current.get("is_active", True),
                "updated_by": actor or current.get("updated_by"),
                "updated_at": _now(),
                "revision": current.get("revision", 0) + 1,
            }

        document = self._write(notification_type_id, flip)
        logger.info(
            "notification_type_toggled",
            notification_type_id=notification_type_id,
            is_active=document["is_active"],
        )
        return document["is_active"]

    def delete(self, notification_type_id: str, actor: Optional[str] = None) -> None:
        """Soft-delete: the type is retained but never listed or matched again."""

        def mark(current: Dict[str, Any]) -> Dict[str, Any]:
            now = _now()
            return {
                "deleted_at": now,
                "updated_by": actor or current.get("updated_by"),
                "updated_at": now,
                "revision": current.get("revision", 0) + 1,
            }

        self._write(notification_type_id, mark)
        logger.info(
            "notification_type_deleted", notification_type_id=notification_type_id
        )

    def list(
        self,
        is_active: Optional[bool] = None,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[NotificationType]:
        """Non-deleted types, newest first.

        Args:
            is_active: Keep only types with this active flag.
            role: Keep only types targeting this role.
            search: Case-insensitive substring of the title.
        """
        filters = {"is_active": is_active} if is_active is not None else None
        types = [
            NotificationType.model_validate(d)
            for d in self._store.list(TYPES_COLLECTION, filters)
            if d.get("deleted_at") is None
        ]
        if role:
            types = [t for t in types if role in t.roles]
        if search:
            needle = search.lower()
            types = [t for t in types if needle in t.title.lower()]
        return sorted(types, key=lambda t: t.created_at, reverse=True)

    def list_for_role(self, role: str) -> List[NotificationType]:
        return self.list(is_active=True, role=role)

    def active_for_event(self, event_key: str) -> List[NotificationType]:
        """Active, non-deleted types bound to ``event_key``, oldest first."""
        documents = self._store.list(
            TYPES_COLLECTION, {"event_type": event_key, "is_active": True}
        )
        types = [
            NotificationType.model_validate(d)
            for d in documents
            if d.get("deleted_at") is None
        ]
        return sorted(types, key=lambda t: t.created_at)

    def _load(self, notification_type_id: str) -> Dict[str, Any]:
        document = self._store.get(TYPES_COLLECTION, notification_type_id)
        if document is None or document.get("deleted_at") is not None:
            raise NotificationTypeNotFound(notification_type_id)
        return document

    def _write(
        self,
        notification_type_id: str,
        mutate: Callable[[Dict[str, Any]], Dict[str, Any]],
    ) -> Dict[str, Any]:
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            current = self._load(notification_type_id)
            changes = mutate(current)
            try:
                return self._store.update(
                    TYPES_COLLECTION,
                    notification_type_id,
                    changes,
                    expected={
                        "revision": current.get("revision", 0),
                        "deleted_at": None,
                    },
                )
            except DocumentNotFoundError:
                raise NotificationTypeNotFound(notification_type_id)
            except ConditionFailedError:
                logger.debug(
                    "notification_type_write_conflict",
                    notification_type_id=notification_type_id,
                    attempt=attempt,
                )
        raise ConditionFailedError(TYPES_COLLECTION, notification_type_id)
