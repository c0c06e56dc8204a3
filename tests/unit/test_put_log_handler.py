"""
Unit tests for the put_log Lambda handler.
"""

import json
import re
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest

import src.lambdas.put_log.handler as put_log
from src.common.cloudwatch import CloudWatchHandler
from src.common.records import Level
from tests.unit.fixtures import STREAM_NAME_PATTERN, client_error


@pytest.fixture
def moto_handler(logs_client: Any, monkeypatch: pytest.MonkeyPatch) -> CloudWatchHandler:
    """Point the Lambda at a fresh handler backed by moto."""
    handler = CloudWatchHandler(logs_client)
    monkeypatch.setattr(put_log, "cloudwatch_handler", handler)
    return handler


@pytest.fixture
def recording_handler(recording_client: MagicMock, monkeypatch: pytest.MonkeyPatch) -> CloudWatchHandler:
    """Point the Lambda at a fresh handler backed by a recording client."""
    handler = CloudWatchHandler(recording_client)
    monkeypatch.setattr(put_log, "cloudwatch_handler", handler)
    return handler


def only_event(logs_client: Any, log_group: str) -> Dict[str, Any]:
    streams = logs_client.describe_log_streams(logGroupName=log_group)["logStreams"]
    assert len(streams) == 1
    events = logs_client.get_log_events(
        logGroupName=log_group, logStreamName=streams[0]["logStreamName"]
    )["events"]
    assert len(events) == 1
    return json.loads(events[0]["message"])


class TestPutLogHandler:
    """Tests for the put_log handler."""

    def test_writes_event(self, moto_handler: CloudWatchHandler, logs_client: Any, lambda_context: Any) -> None:
        """Test a valid request creates the group and stream and writes the event."""
        event = {
            "log_group": "g1",
            "level": "warn",
            "message": "disk full",
            "attributes": [{"key": "disk", "value": "/dev/sda1"}],
        }

        response = put_log.handler(event, lambda_context)

        assert response == {"success": True, "message": "Log written successfully"}
        stream_names = list(moto_handler.cache.created_streams.values())
        assert len(stream_names) == 1
        assert re.match(STREAM_NAME_PATTERN, stream_names[0])
        body = only_event(logs_client, "g1")
        assert body["level"] == "WARN"
        assert body["message"] == "disk full"
        assert body["disk"] == "/dev/sda1"

    def test_nested_attribute_values(self, moto_handler: CloudWatchHandler, logs_client: Any, lambda_context: Any) -> None:
        """Test object-valued attributes arrive as nested JSON."""
        event = {
            "log_group": "g1",
            "message": "request",
            "attributes": [
                {"key": "http", "value": {"method": "GET", "status": 200}},
                {"key": "dropped", "value": None},
            ],
        }

        put_log.handler(event, lambda_context)

        body = only_event(logs_client, "g1")
        assert body["http"] == {"method": "GET", "status": 200}
        assert "dropped" not in body

    def test_retention_days_applied(self, moto_handler: CloudWatchHandler, logs_client: Any, lambda_context: Any) -> None:
        """Test retention from the request is set on the new group."""
        put_log.handler({"log_group": "g1", "message": "m", "retention_days": 14}, lambda_context)

        group = logs_client.describe_log_groups(logGroupNamePrefix="g1")["logGroups"][0]
        assert group["retentionInDays"] == 14

    @pytest.mark.parametrize("event", [{"log_group": "", "message": "m"}, {"message": "m"}])
    def test_log_group_required(
        self,
        event: Dict[str, Any],
        recording_handler: CloudWatchHandler,
        recording_client: MagicMock,
        lambda_context: Any,
    ) -> None:
        """Test a missing log group fails without any AWS call."""
        response = put_log.handler(event, lambda_context)

        assert response == {"success": False, "error": "log_group is required"}
        assert recording_client.mock_calls == []

    def test_second_request_reuses_resources(
        self, recording_handler: CloudWatchHandler, recording_client: MagicMock, lambda_context: Any
    ) -> None:
        """Test a warm container does not recreate the group or stream."""
        put_log.handler({"log_group": "g1", "message": "one"}, lambda_context)
        put_log.handler({"log_group": "g1", "message": "two"}, lambda_context)

        recording_client.create_log_group.assert_called_once()
        recording_client.create_log_stream.assert_called_once()
        puts = recording_client.put_log_events.call_args_list
        assert len(puts) == 2
        assert puts[0].kwargs["logStreamName"] == puts[1].kwargs["logStreamName"]

    def test_unknown_level_defaults_to_info(
        self, recording_handler: CloudWatchHandler, recording_client: MagicMock, lambda_context: Any
    ) -> None:
        """Test unrecognized level text is logged at INFO."""
        put_log.handler({"log_group": "g1", "level": "LOUD", "message": "m"}, lambda_context)

        message = recording_client.put_log_events.call_args.kwargs["logEvents"][0]["message"]
        assert json.loads(message)["level"] == "INFO"

    @pytest.mark.parametrize(
        "event",
        [
            {"log_group": "g1", "message": 5},
            {"log_group": "g1", "attributes": [{"value": 1}]},
            {"log_group": "g1", "retention_days": 0},
            {"log_group": 42},
        ],
    )
    def test_invalid_request(
        self,
        event: Dict[str, Any],
        recording_handler: CloudWatchHandler,
        recording_client: MagicMock,
        lambda_context: Any,
    ) -> None:
        """Test schema violations are reported and nothing is sent."""
        response = put_log.handler(event, lambda_context)

        assert response["success"] is False
        assert response["error"].startswith("invalid request")
        recording_client.put_log_events.assert_not_called()

    def test_put_failure_reported(
        self, recording_handler: CloudWatchHandler, recording_client: MagicMock, lambda_context: Any
    ) -> None:
        """Test a failed put is reported as the request's error."""
        recording_client.put_log_events.side_effect = client_error("ThrottlingException", "PutLogEvents")

        response = put_log.handler({"log_group": "g1", "message": "m"}, lambda_context)

        assert response["success"] is False
        assert "failed to put log events" in response["error"]

    def test_provisioning_failure_not_reported(
        self, recording_handler: CloudWatchHandler, recording_client: MagicMock, lambda_context: Any
    ) -> None:
        """Test group creation problems never reach the caller."""
        recording_client.create_log_group.side_effect = client_error("AccessDeniedException")

        response = put_log.handler({"log_group": "g1", "message": "m"}, lambda_context)

        assert response["success"] is True

    def test_below_threshold_succeeds_without_sending(
        self, recording_client: MagicMock, monkeypatch: pytest.MonkeyPatch, lambda_context: Any
    ) -> None:
        """Test records under the threshold are accepted but not shipped."""
        monkeypatch.setattr(
            put_log, "cloudwatch_handler", CloudWatchHandler(recording_client, level=Level.ERROR)
        )

        response = put_log.handler({"log_group": "g1", "level": "debug", "message": "m"}, lambda_context)

        assert response["success"] is True
        assert recording_client.mock_calls == []

    def test_missing_configuration(self, monkeypatch: pytest.MonkeyPatch, lambda_context: Any) -> None:
        """Test the handler fails cleanly when cold start setup failed."""
        monkeypatch.setattr(put_log, "cloudwatch_handler", None)

        response = put_log.handler({"log_group": "g1", "message": "m"}, lambda_context)

        assert response == {"success": False, "error": "Internal server configuration error"}

    def test_cold_start_built_root_handler(self) -> None:
        """Test the module-level handler was configured from config/test.yaml."""
        assert isinstance(put_log.cloudwatch_handler, CloudWatchHandler)
        assert put_log.cloudwatch_handler.level is Level.DEBUG
        assert put_log.cloudwatch_handler.stream_name == "log-stream"
