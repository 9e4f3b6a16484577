"""Unit tests for the in-process event bus."""

import pytest

from infrastructure.events import (
    Event,
    clear_handlers,
    dispatch_event,
    get_registered_events,
    register_event_handler,
    unregister_event_handler,
)

pytestmark = pytest.mark.unit


class TestEventRegistration:
    """Tests for registering and removing handlers."""

    def test_register_handler(self):
        """Registered event types are listed."""

        @register_event_handler("kyc_approved")
        def handler(event):
            return event.payload

        assert "kyc_approved" in get_registered_events()

    def test_unregister_handler(self):
        """Removing the last handler removes the event type."""

        def handler(event):
            return None

        register_event_handler("kyc_approved")(handler)

        assert unregister_event_handler("kyc_approved", handler) is True
        assert "kyc_approved" not in get_registered_events()

    def test_unregister_unknown_handler_returns_false(self):
        assert unregister_event_handler("kyc_approved", lambda e: None) is False

    def test_clear_handlers(self):
        register_event_handler("kyc_approved")(lambda e: None)

        clear_handlers()

        assert get_registered_events() == []


class TestDispatch:
    """Tests for synchronous dispatch."""

    def test_dispatch_returns_handler_results(self):
        register_event_handler("creator_signup")(lambda e: e.payload["userName"])

        results = dispatch_event(Event(event_type="creator_signup", payload={"userName": "Cara"}))

        assert results == ["Cara"]

    def test_failing_handler_does_not_stop_others(self):
        def broken(event):
            raise RuntimeError("boom")

        register_event_handler("creator_signup")(broken)
        register_event_handler("creator_signup")(lambda e: "ok")

        results = dispatch_event(Event(event_type="creator_signup"))

        assert results == ["ok"]

    def test_dispatch_without_handlers(self):
        assert dispatch_event(Event(event_type="nobody_listens")) == []


def test_event_to_dict_serializes_ids_and_timestamps():
    event = Event(event_type="kyc_uploaded", payload={"documentType": "passport"}, actor="u-1")

    data = event.to_dict()

    assert data["event_type"] == "kyc_uploaded"
    assert isinstance(data["timestamp"], str)
    assert isinstance(data["correlation_id"], str)
    assert data["actor"] == "u-1"
