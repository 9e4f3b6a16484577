"""Unit tests for the event registry."""

import threading

import pytest

from modules.notifications.catalog import DEFAULT_EVENTS, DEFAULT_VARIABLES, EventDefinition
from modules.notifications.domain import RegistryUnavailable, UnknownEvent, ValidationError
from modules.notifications.registry import EventRegistry, EventSource, StaticEventSource

pytestmark = pytest.mark.unit


class FailingSource(EventSource):
    def list_events(self):
        raise ConnectionError("events service down")


def default_keys():
    return sorted(e.key for e in DEFAULT_EVENTS)


class TestScan:
    """Tests for reconciling the event source into the registry."""

    def test_first_scan_inserts_every_event(self, document_store):
        registry = EventRegistry(document_store, StaticEventSource())

        result = registry.scan()

        assert sorted(result.inserted) == default_keys()
        assert result.skipped == []
        assert [e.key for e in result.events] == default_keys()

    def test_rescan_skips_known_keys(self, document_store):
        registry = EventRegistry(document_store, StaticEventSource())
        registry.scan()

        result = registry.scan()

        assert result.inserted == []
        assert sorted(result.skipped) == default_keys()
        assert len(registry.list()) == len(DEFAULT_EVENTS)

    def test_rescan_inserts_only_new_keys(self, document_store):
        EventRegistry(document_store, StaticEventSource()).scan()
        grown = StaticEventSource(list(DEFAULT_EVENTS) + [EventDefinition("lesson_completed")])

        result = EventRegistry(document_store, grown).scan()

        assert result.inserted == ["lesson_completed"]

    def test_concurrent_scans_insert_a_new_key_once(self, document_store):
        EventRegistry(document_store, StaticEventSource()).scan()
        grown = list(DEFAULT_EVENTS) + [EventDefinition("course_published")]
        results = []
        lock = threading.Lock()
        barrier = threading.Barrier(8)

        def scan():
            registry = EventRegistry(document_store, StaticEventSource(grown))
            barrier.wait()
            result = registry.scan()
            with lock:
                results.append(result)

        threads = [threading.Thread(target=scan) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sum("course_published" in r.inserted for r in results) == 1
        assert all(r.inserted in ([], ["course_published"]) for r in results)
        assert [e.key for e in results[0].events].count("course_published") == 1

    def test_empty_source_changes_nothing(self, document_store):
        EventRegistry(document_store, StaticEventSource()).scan()
        registry = EventRegistry(document_store, StaticEventSource(events=[]))

        result = registry.scan()

        assert result.inserted == []
        assert result.skipped == []
        assert [e.key for e in result.events] == default_keys()

    def test_empty_source_on_empty_registry_registers_nothing(self, document_store):
        registry = EventRegistry(document_store, StaticEventSource(events=[]))

        result = registry.scan()

        assert result.inserted == []
        assert registry.list() == []

    def test_duplicate_keys_are_inserted_once(self, document_store):
        source = StaticEventSource(
            [EventDefinition("lesson_completed"), EventDefinition("lesson_completed", label="Again")]
        )
        registry = EventRegistry(document_store, source)

        result = registry.scan()

        assert result.inserted == ["lesson_completed"]
        assert registry.get("lesson_completed").label == "Lesson Completed"

    def test_failing_source_raises_and_leaves_registry_unchanged(self, document_store):
        registry = EventRegistry(document_store, FailingSource())

        with pytest.raises(RegistryUnavailable):
            registry.scan()

        assert registry.list() == []

    def test_malformed_keys_are_rejected_before_any_write(self, document_store):
        source = StaticEventSource(
            [EventDefinition("lesson_completed"), EventDefinition("Bad Key"), EventDefinition("x")]
        )
        registry = EventRegistry(document_store, source)

        with pytest.raises(ValidationError) as exc_info:
            registry.scan()

        fields = [e.field for e in exc_info.value.errors]
        assert fields == ["events[1].key", "events[2].key"]
        assert registry.list() == []


class TestLookup:
    """Tests for reading registered events."""

    def test_list_is_sorted_by_key(self, registry):
        keys = [e.key for e in registry.list()]

        assert keys == sorted(keys)

    def test_get_returns_descriptor(self, registry):
        descriptor = registry.get("kyc_uploaded")

        assert descriptor.label == "KYC Uploaded"
        assert descriptor.created_at is not None

    def test_get_unknown_raises(self, registry):
        with pytest.raises(UnknownEvent):
            registry.get("nope_event")

    def test_exists(self, registry):
        assert registry.exists("creator_signup")
        assert not registry.exists("nope_event")

    def test_purge_removes_everything(self, registry):
        removed = registry.purge()

        assert removed == len(DEFAULT_EVENTS)
        assert registry.list() == []
        assert not registry.exists("creator_signup")


class TestCatalog:
    """Tests for template variable catalogs."""

    def test_default_catalog_includes_recipient_variables(self, registry):
        names = [v.variable for v in registry.catalog()]

        assert names[: len(DEFAULT_VARIABLES)] == [v.variable for v in DEFAULT_VARIABLES]
        assert "userEmail" in names
        assert "userRole" in names
        assert len(names) == len(set(names))

    def test_event_catalog_uses_declared_variables(self, registry):
        names = {v.variable for v in registry.catalog("kyc_uploaded")}

        assert {"documentType", "documentName", "documentNumber"} <= names
        assert "brandName" not in names
        assert {"userName", "userEmail", "userRole", "userId"} <= names

    def test_event_without_variables_gets_default_catalog(self, document_store):
        registry = EventRegistry(
            document_store, StaticEventSource([EventDefinition("lesson_completed")])
        )
        registry.scan()

        names = {v.variable for v in registry.catalog("lesson_completed")}

        assert {v.variable for v in DEFAULT_VARIABLES} <= names

    def test_catalog_of_unknown_event_raises(self, registry):
        with pytest.raises(UnknownEvent):
            registry.catalog("nope_event")
