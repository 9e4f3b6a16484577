"""Unit tests for request-scoped logging context."""

import pytest

from infrastructure.logging import bind_request_context, get_correlation_id, get_module_logger

pytestmark = pytest.mark.unit


class TestBindRequestContext:
    """Tests for correlation id binding."""

    def test_binds_given_correlation_id(self):
        with bind_request_context(correlation_id="req-123") as correlation_id:
            assert correlation_id == "req-123"
            assert get_correlation_id() == "req-123"

        assert get_correlation_id() is None

    def test_generates_correlation_id_when_missing(self):
        with bind_request_context(request_path="/health") as correlation_id:
            assert correlation_id
            assert get_correlation_id() == correlation_id

    def test_sequential_blocks_do_not_leak_context(self):
        with bind_request_context(correlation_id="outer", actor="ops"):
            pass
        with bind_request_context(correlation_id="inner"):
            assert get_correlation_id() == "inner"


def test_module_logger_accepts_structured_events():
    logger = get_module_logger()

    logger.info("test_event", key="value")
