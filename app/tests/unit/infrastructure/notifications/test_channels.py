"""Unit tests for the dry-run and in-app channels."""

import pytest

from infrastructure.notifications import (
    INBOX_COLLECTION,
    ChannelMessage,
    DryRunChannel,
    InAppChannel,
)
from infrastructure.persistence import InMemoryDocumentStore

pytestmark = pytest.mark.unit


def message(record_id: str = "d-1", channel: str = "inApp") -> ChannelMessage:
    return ChannelMessage(
        record_id=record_id,
        channel=channel,
        recipient_id="u-1",
        title="Course assigned",
        body="You were assigned Pottery 101",
        priority="high",
        metadata={"event_type": "course_assigned"},
    )


class TestDryRunChannel:
    """Tests for the log-only channel."""

    def test_send_reports_success_with_external_id(self):
        channel = DryRunChannel("sms")

        result = channel.send(message(channel="sms"))

        assert result.is_success
        assert result.data["external_id"].startswith("dry-run-")
        assert channel.channel_name == "sms"

    def test_health_check(self):
        assert DryRunChannel("email").health_check().is_success


class TestInAppChannel:
    """Tests for the inbox-writing channel."""

    def test_send_stores_inbox_entry(self):
        store = InMemoryDocumentStore()
        channel = InAppChannel(store)

        result = channel.send(message())

        entry = store.get(INBOX_COLLECTION, "d-1")
        assert result.is_success
        assert entry["user_id"] == "u-1"
        assert entry["title"] == "Course assigned"
        assert entry["event_type"] == "course_assigned"
        assert entry["is_read"] is False

    def test_resending_same_record_keeps_one_entry(self):
        store = InMemoryDocumentStore()
        channel = InAppChannel(store)

        channel.send(message())
        result = channel.send(message())

        assert result.is_success
        assert len(store.list(INBOX_COLLECTION)) == 1
