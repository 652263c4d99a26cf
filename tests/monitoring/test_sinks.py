"""Tests for monitoring sinks."""

import json
import urllib.error
from unittest.mock import MagicMock, patch

from edgeguard.monitoring import (
    LogMonitoringSink,
    MemoryMonitoringSink,
    MonitoringEvent,
    MonitoringSink,
    WebhookMonitoringSink,
)


def _event(**overrides):
    fields = {
        "message": "Slot already booked",
        "code": "SLOT_TAKEN",
        "error_type": "AppError",
        "status_code": 409,
        "environment": "production",
    }
    fields.update(overrides)
    return MonitoringEvent(**fields)


class TestMonitoringEvent:
    def test_to_dict(self):
        d = _event().to_dict()
        assert d["code"] == "SLOT_TAKEN"
        assert d["status_code"] == 409
        assert d["environment"] == "production"
        assert "metadata" not in d

    def test_to_dict_omits_missing(self):
        d = _event(status_code=None, environment=None).to_dict()
        assert "status_code" not in d
        assert "environment" not in d


class TestWebhookMonitoringSink:
    @patch("urllib.request.urlopen")
    def test_posts_json(self, mock_urlopen):
        response = MagicMock()
        response.status = 202
        mock_urlopen.return_value.__enter__.return_value = response

        sink = WebhookMonitoringSink("https://hooks.example.com/errors", headers={"X-Token": "t"})
        result = sink.capture(_event())

        assert result.success is True
        assert result.response == {"status": 202}
        request = mock_urlopen.call_args[0][0]
        assert request.full_url == "https://hooks.example.com/errors"
        assert request.get_method() == "POST"
        assert request.get_header("X-token") == "t"
        assert json.loads(request.data)["code"] == "SLOT_TAKEN"

    @patch("urllib.request.urlopen")
    def test_connection_error_returns_failure(self, mock_urlopen):
        mock_urlopen.side_effect = urllib.error.URLError("connection refused")

        result = WebhookMonitoringSink("https://hooks.example.com/errors").capture(_event())

        assert result.success is False
        assert result.sink_name == "webhook"
        assert "connection refused" in result.message


class TestOtherSinks:
    def test_log_sink(self):
        assert LogMonitoringSink().capture(_event()).success is True

    def test_memory_sink(self):
        sink = MemoryMonitoringSink()
        sink.capture(_event())
        assert [e.code for e in sink.events] == ["SLOT_TAKEN"]

    def test_protocol(self):
        for sink in (LogMonitoringSink(), MemoryMonitoringSink(), WebhookMonitoringSink("http://x")):
            assert isinstance(sink, MonitoringSink)
