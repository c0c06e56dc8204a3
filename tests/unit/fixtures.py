"""Shared test helpers and constants."""

from datetime import datetime, timezone

from botocore.exceptions import ClientError

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)
STREAM_NAME_PATTERN = r"^log-stream-\d{4}-\d{2}-\d{2}-\d{2}-\d{2}-\d{2}$"


def client_error(code: str, operation: str = "CreateLogGroup") -> ClientError:
    """Build a botocore ClientError carrying the given AWS error code."""
    return ClientError({"Error": {"Code": code, "Message": f"{code} raised"}}, operation)
