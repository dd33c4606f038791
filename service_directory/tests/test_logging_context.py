"""
Unit tests for log correlation context.
"""

import uuid

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.logging import (
    add_correlation_context,
    clear_context,
    operation_var,
    service_context,
    set_request_id,
    upstream_operation,
)


class TestLoggingContext:
    """Test cases for correlation processors."""

    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_set_request_id_generates_uuid(self):
        """Test a missing request ID is generated."""
        request_id = set_request_id(None)

        assert uuid.UUID(request_id)

    def test_set_request_id_keeps_caller_value(self):
        """Test an inbound request ID is kept."""
        assert set_request_id("req-1") == "req-1"

    def test_correlation_context_added(self):
        """Test request ID and upstream operation are stamped on events."""
        set_request_id("req-1")

        with upstream_operation("fetch_all"):
            event = add_correlation_context(None, "info", {"event": "x"})

        assert event["request_id"] == "req-1"
        assert event["upstream_operation"] == "fetch_all"
        assert operation_var.get() is None

    def test_no_context_adds_nothing(self):
        """Test events outside a request are left alone."""
        assert add_correlation_context(None, "info", {"event": "x"}) == {"event": "x"}

    def test_service_context(self):
        """Test the service name is stamped on events."""
        processor = service_context("directory")

        assert processor(None, "info", {"event": "x"})["service"] == "directory"
