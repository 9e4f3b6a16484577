"""Unit tests for timeout-bound channel delivery."""

import pytest

from infrastructure.notifications import ChannelMessage, DeliveryExecutor
from infrastructure.operations import OperationResult, OperationStatus
from tests.factories.notifications import RecordingChannel

pytestmark = pytest.mark.unit


def message(record_id: str = "d-1", channel: str = "email") -> ChannelMessage:
    return ChannelMessage(
        record_id=record_id,
        channel=channel,
        recipient_id="u-1",
        recipient_name="Ava",
        title="Hello",
        body="Hi Ava",
    )


@pytest.fixture
def make_executor():
    created = []

    def _factory(channels, timeout_seconds=1.0, max_workers=4):
        executor = DeliveryExecutor(
            channels, timeout_seconds=timeout_seconds, max_workers=max_workers
        )
        created.append(executor)
        return executor

    yield _factory
    for executor in created:
        executor.shutdown(wait=False)


class TestDeliverAll:
    """Tests for batch delivery outcomes."""

    def test_results_follow_message_order(self, make_executor):
        email = RecordingChannel("email")
        sms = RecordingChannel("sms")
        executor = make_executor({"email": email, "sms": sms})

        results = executor.deliver_all(
            [message("d-1", "email"), message("d-2", "sms"), message("d-3", "email")]
        )

        assert [r.data["external_id"] for r in results] == ["ext-d-1", "ext-d-2", "ext-d-3"]
        assert len(email.sent) == 2
        assert len(sms.sent) == 1

    def test_unknown_channel_is_permanent_error(self, make_executor):
        executor = make_executor({"email": RecordingChannel("email")})

        result = executor.deliver(message(channel="fax"))

        assert result.status == OperationStatus.PERMANENT_ERROR
        assert result.error_code == "CHANNEL_NOT_CONFIGURED"

    def test_channel_exception_becomes_error_result(self, make_executor):
        executor = make_executor(
            {"email": RecordingChannel("email", error=RuntimeError("smtp down"))}
        )

        result = executor.deliver(message())

        assert not result.is_success
        assert result.error_code == "CHANNEL_EXCEPTION"
        assert "smtp down" in result.message

    def test_slow_channel_times_out(self, make_executor):
        executor = make_executor(
            {"email": RecordingChannel("email", delay=0.5)}, timeout_seconds=0.05
        )

        result = executor.deliver(message())

        assert result.status == OperationStatus.TRANSIENT_ERROR
        assert result.error_code == "CHANNEL_TIMEOUT"

    def test_timeout_does_not_affect_other_channels(self, make_executor):
        executor = make_executor(
            {
                "email": RecordingChannel("email", delay=0.5),
                "sms": RecordingChannel("sms"),
            },
            timeout_seconds=0.1,
        )

        results = executor.deliver_all([message("d-1", "email"), message("d-2", "sms")])

        assert results[0].error_code == "CHANNEL_TIMEOUT"
        assert results[1].is_success

    def test_non_result_return_value_is_rejected(self, make_executor):
        class BrokenChannel(RecordingChannel):
            def send(self, message):
                return "sent"

        executor = make_executor({"email": BrokenChannel("email")})

        result = executor.deliver(message())

        assert result.error_code == "INVALID_CHANNEL_RESULT"

    def test_more_messages_than_workers(self, make_executor):
        executor = make_executor({"email": RecordingChannel("email")}, max_workers=2)

        results = executor.deliver_all([message(f"d-{i}") for i in range(5)])

        assert len(results) == 5
        assert all(r.is_success for r in results)

    def test_get_available_channels(self, make_executor):
        executor = make_executor({"email": RecordingChannel("email")})

        assert executor.get_available_channels() == ["email"]


def test_channel_message_rejects_non_e164_phone():
    with pytest.raises(ValueError):
        ChannelMessage(
            record_id="d-1",
            channel="sms",
            recipient_id="u-1",
            recipient_phone="514-555-0101",
            body="Hi",
        )


def test_operation_result_success_helpers():
    result = OperationResult.success(data={"external_id": "x"})

    assert result.is_success
    assert result.message == "ok"
