"""Read side of the in-app channel: a user's notification inbox."""

from typing import Any, Dict, List

from infrastructure.logging import get_module_logger
from infrastructure.notifications import INBOX_COLLECTION
from infrastructure.persistence import ConditionFailedError, DocumentStore

logger = get_module_logger()


class Inbox:
    def __init__(self, store: DocumentStore):
        self._store = store

    def list(self, user_id: str, unread_only: bool = False) -> List[Dict[str, Any]]:
        """Inbox entries of ``user_id``, newest first."""
        filters: Dict[str, Any] = {"user_id": user_id}
        if unread_only:
            filters["is_read"] = False
        entries = self._store.list(INBOX_COLLECTION, filters)
        return sorted(entries, key=lambda e: e.get("created_at") or "", reverse=True)

    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread entry read. Returns how many changed."""
        changed = 0
        for entry in self.list(user_id, unread_only=True):
            try:
                self._store.update(
                    INBOX_COLLECTION,
                    entry["id"],
                    {"is_read": True},
                    expected={"is_read": False},
                )
                changed += 1
            except ConditionFailedError:
                # Marked read concurrently.
                continue
        logger.info("inbox_marked_read", user_id=user_id, changed=changed)
        return changed
