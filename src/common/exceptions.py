# src/common/exceptions.py

"""
Typed exceptions to keep the relay's failure modes explicit and testable.

Provisioning problems (a log group or stream that already exists, or could
not be created) are never raised; they are logged and swallowed by the
provisioning cache. Everything below is surfaced to the caller.
"""


class LogRelayError(RuntimeError):
    """Base class for errors the front end reports back to the invoker."""


class LogGroupRequiredError(LogRelayError):
    """No log group was supplied for the record."""

    def __init__(self, message: str = "log_group is required"):
        super().__init__(message)


class SubmissionError(LogRelayError):
    """CloudWatch Logs rejected or failed the put_log_events call."""


class EncodingError(LogRelayError):
    """A record payload could not be rendered to JSON."""


class RequestValidationError(LogRelayError):
    """Inbound event does not match the log request schema."""


class ConfigError(LogRelayError):
    """Configuration missing/invalid."""
