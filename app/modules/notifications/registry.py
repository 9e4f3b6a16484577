"""Event registry: the catalog of event keys notifications can bind to.

Events are discovered from an ``EventSource`` and reconciled into the
document store. A scan inserts keys it has not seen before and leaves
existing descriptors untouched, so scanning is safe to repeat at every
startup and from several instances at once.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.persistence import DocumentStore, DuplicateKeyError
from modules.notifications.catalog import (
    DEFAULT_EVENTS,
    DEFAULT_VARIABLES,
    EventDefinition,
    with_recipient_variables,
)
from modules.notifications.domain import (
    EventDescriptor,
    FieldError,
    RegistryUnavailable,
    TemplateVariable,
    UnknownEvent,
    ValidationError,
)

logger = get_module_logger()

EVENTS_COLLECTION = "notification_events"
VARIABLES_COLLECTION = "notification_template_variables"

EVENT_KEY_PATTERN = re.compile(r"^[a-z][a-z0-9_]{2,49}$")


class EventSource(ABC):
    """Enumerates the events the platform can emit."""

    @abstractmethod
    def list_events(self) -> List[EventDefinition]:
        """Return every emittable event.

        Raises:
            Exception: Any error means the source could not enumerate; the
                registry reports it as RegistryUnavailable.
        """
        pass


class StaticEventSource(EventSource):
    """Event source backed by a fixed list of definitions."""

    def __init__(self, events: Optional[Iterable[EventDefinition]] = None):
        self._events = list(events) if events is not None else list(DEFAULT_EVENTS)

    def list_events(self) -> List[EventDefinition]:
        return list(self._events)


@dataclass
class ScanResult:
    inserted: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    events: List[EventDescriptor] = field(default_factory=list)


class EventRegistry:
    """Persisted event descriptors and their template variable catalogs."""

    def __init__(self, store: DocumentStore, source: EventSource):
        self._store = store
        self._source = source

    def scan(self) -> ScanResult:
        """Reconcile the event source with stored descriptors.

        Enumeration and key validation complete before the first write, so a
        failing source or a malformed key leaves the registry unchanged.

        Returns:
            ScanResult with inserted keys, skipped (already known) keys and
            the full registry afterwards.

        Raises:
            RegistryUnavailable: The source could not enumerate events.
            ValidationError: The source reported malformed event keys.
        """
        try:
            definitions = self._source.list_events()
        except Exception as e:
            logger.error("event_source_unavailable", error=str(e))
            raise RegistryUnavailable(f"Event source unavailable: {e}") from e

        if not definitions:
            logger.warning("event_source_empty")

        unique: Dict[str, EventDefinition] = {}
        errors: List[FieldError] = []
        for index, definition in enumerate(definitions):
            if not EVENT_KEY_PATTERN.match(definition.key or ""):
                errors.append(
                    FieldError(
                        field=f"events[{index}].key",
                        message=f"Invalid event key: {definition.key!r}",
                    )
                )
                continue
            unique.setdefault(definition.key, definition)
        if errors:
            raise ValidationError(errors)

        result = ScanResult()
        now = datetime.now(timezone.utc).isoformat()
        for key, definition in unique.items():
            descriptor = {
                "key": key,
                "label": definition.display_label,
                "created_at": now,
            }
            try:
                self._store.insert(EVENTS_COLLECTION, key, descriptor)
            except DuplicateKeyError:
                result.skipped.append(key)
                continue
            if definition.variables:
                self._store.put(
                    VARIABLES_COLLECTION,
                    key,
                    {
                        "event_type": key,
                        "variables": [v.model_dump() for v in definition.variables],
                    },
                )
            result.inserted.append(key)

        result.events = self.list()
        logger.info(
            "event_registry_scanned",
            inserted=len(result.inserted),
            skipped=len(result.skipped),
            total=len(result.events),
        )
        return result

    def list(self) -> List[EventDescriptor]:
        documents = self._store.list(EVENTS_COLLECTION)
        return sorted(
            (EventDescriptor.model_validate(d) for d in documents),
            key=lambda e: e.key,
        )

    def get(self, key: str) -> EventDescriptor:
        document = self._store.get(EVENTS_COLLECTION, key)
        if document is None:
            raise UnknownEvent(key)
        return EventDescriptor.model_validate(document)

    def exists(self, key: str) -> bool:
        return self._store.get(EVENTS_COLLECTION, key) is not None

    def catalog(self, key: Optional[str] = None) -> List[TemplateVariable]:
        """Variables legal in templates of ``key``, recipient variables included.

        Events without a stored catalog, and calls without a key, get the
        platform-wide default catalog.

        Raises:
            UnknownEvent: ``key`` is given but not registered.
        """
        if key is None:
            return with_recipient_variables(DEFAULT_VARIABLES)
        if not self.exists(key):
            raise UnknownEvent(key)
        document = self._store.get(VARIABLES_COLLECTION, key)
        if document and document.get("variables"):
            variables = [
                TemplateVariable.model_validate(v) for v in document["variables"]
            ]
        else:
            variables = list(DEFAULT_VARIABLES)
        return with_recipient_variables(variables)

    def purge(self) -> int:
        """Delete every descriptor and catalog. Returns the descriptor count."""
        removed = self._store.clear(EVENTS_COLLECTION)
        self._store.clear(VARIABLES_COLLECTION)
        logger.warning("event_registry_purged", removed=removed)
        return removed
