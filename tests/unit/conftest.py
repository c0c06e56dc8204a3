"""
Test fixtures for the log relay tests.

Provides fake AWS settings, recording CloudWatch Logs clients and moto-backed
clients.
"""

import os
from dataclasses import dataclass
from typing import Any, Generator
from unittest.mock import MagicMock

# The put_log Lambda loads config and builds its boto3 client at import time,
# so these must be in place before any test module imports it.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")

import boto3  # noqa: E402
import pytest  # noqa: E402
from moto import mock_aws  # noqa: E402

from tests.unit.fixtures import FIXED_NOW  # noqa: E402


@dataclass
class FakeLambdaContext:
    """Minimal stand-in for the Lambda context Powertools reads."""

    function_name: str = "put-log"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = "arn:aws:lambda:us-east-1:123456789012:function:put-log"
    aws_request_id: str = "52fdfc07-2182-154f-163f-5f0f9a621d72"


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    return FakeLambdaContext()


@pytest.fixture
def recording_client() -> MagicMock:
    """A CloudWatch Logs client double that records calls and always succeeds."""
    client = MagicMock()
    client.create_log_group.return_value = {}
    client.create_log_stream.return_value = {}
    client.put_retention_policy.return_value = {}
    client.put_log_events.return_value = {"nextSequenceToken": "token-1"}
    return client


@pytest.fixture
def fixed_clock() -> Any:
    return lambda: FIXED_NOW


@pytest.fixture
def logs_client() -> Generator[Any, None, None]:
    """A moto-backed CloudWatch Logs client."""
    with mock_aws():
        yield boto3.client("logs", region_name="us-east-1")
