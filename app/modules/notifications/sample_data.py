"""Stored sample contexts operators use to test-fire events."""

from typing import Any, Dict, Mapping

from infrastructure.logging import get_module_logger
from infrastructure.persistence import DocumentStore
from modules.notifications.registry import EventRegistry

logger = get_module_logger()

SAMPLE_DATA_COLLECTION = "notification_test_data"


class SampleDataStore:
    """One sample context per registered event key."""

    def __init__(self, store: DocumentStore, registry: EventRegistry):
        self._store = store
        self._registry = registry

    def get(self, event_type: str) -> Dict[str, Any]:
        """Stored context for ``event_type``, empty when none was saved.

        Raises:
            UnknownEvent: ``event_type`` is not registered.
        """
        self._registry.get(event_type)
        document = self._store.get(SAMPLE_DATA_COLLECTION, event_type)
        return dict(document["context"]) if document else {}

    def put(self, event_type: str, context: Mapping[str, Any]) -> Dict[str, Any]:
        self._registry.get(event_type)
        self._store.put(
            SAMPLE_DATA_COLLECTION,
            event_type,
            {"event_type": event_type, "context": dict(context)},
        )
        logger.info(
            "notification_sample_data_saved",
            event_type=event_type,
            variables=sorted(context.keys()),
        )
        return dict(context)
