# src/common/cloudwatch.py

import threading
from typing import Any, Iterable, Optional, Sequence, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from src.common.attributes import Attribute, encode_payload
from src.common.exceptions import LogGroupRequiredError, SubmissionError
from src.common.logging import logger
from src.common.provisioning import DEFAULT_STREAM_TIMESTAMP_FORMAT, ProvisioningCache
from src.common.records import Level, LogRecord, LogTarget

DEFAULT_STREAM_NAME = "log-stream"


class CloudWatchHandler:
    """
    Ships structured records to CloudWatch Logs, one event per call.

    Purpose:
        Encodes each record as a JSON object, makes sure the destination log
        group and this process's log stream exist, and submits the event.
        Handlers are cheap to derive: `with_attributes` and `with_group`
        return new handlers that carry extra context but share the
        provisioning cache and the boto3 client with their parent.

    Example:
        handler = CloudWatchHandler(create_logs_client(), level=Level.INFO)
        request_handler = handler.with_attributes([Attribute("request_id", rid)])
        request_handler.log(LogTarget("my-app"), Level.WARN, "disk full")
    """

    def __init__(
        self,
        client: Any,
        level: Level = Level.DEBUG,
        stream_name: str = DEFAULT_STREAM_NAME,
        stream_timestamp_format: str = DEFAULT_STREAM_TIMESTAMP_FORMAT,
        cache: Optional[ProvisioningCache] = None,
    ):
        """
        Initializes a root handler.

        Args:
            client: A boto3 CloudWatch Logs client.
            level (Level): Records below this level are discarded.
            stream_name (str): Base name of the per-process log stream.
            stream_timestamp_format (str): strftime format of the stream suffix.
            cache (Optional[ProvisioningCache]): Cache to share. A new one
                                                 bound to `client` if omitted.
        """
        self.client = client
        self.level = level
        self.stream_name = stream_name
        self.cache = cache or ProvisioningCache(
            client, stream_timestamp_format=stream_timestamp_format
        )
        self.attributes: Tuple[Attribute, ...] = ()
        self.groups: Tuple[str, ...] = ()
        self.sequence_token: Optional[str] = None
        self._lock = threading.Lock()

    def enabled(self, level: Level) -> bool:
        return level >= self.level

    def log(
        self,
        target: LogTarget,
        level: Level,
        message: str,
        attributes: Iterable[Attribute] = (),
    ) -> bool:
        """
        Logs a message if `level` passes the threshold.

        Returns:
            bool: False if the record was discarded by the severity gate,
                  True once it has been submitted.

        Raises:
            LogGroupRequiredError, EncodingError, SubmissionError: see `handle`.
        """
        if not self.enabled(level):
            return False
        self.handle(LogRecord(level, message, tuple(attributes)), target)
        return True

    def handle(self, record: LogRecord, target: Optional[LogTarget]) -> None:
        """
        Submits one record to CloudWatch Logs.

        Purpose:
            Encodes the record, then, holding this handler's lock, ensures the
            log group and log stream exist and puts a single event. Failures
            to create the group or stream are never raised; only the put
            itself can fail the call.

        Args:
            record (LogRecord): The record to submit.
            target (Optional[LogTarget]): Destination log group and optional
                                          retention for a newly created group.

        Raises:
            LogGroupRequiredError: If no log group was given. No AWS call is made.
            EncodingError: If an attribute value cannot be rendered to JSON.
            SubmissionError: If put_log_events fails. The call is not retried.
        """
        if target is None or not target.log_group:
            raise LogGroupRequiredError()

        message = encode_payload(record, self.attributes, self.groups).to_json()

        with self._lock:
            self.cache.ensure_group(target.log_group, target.retention_days)
            stream_name = self.cache.ensure_stream(target.log_group, self.stream_name)

            try:
                response = self.client.put_log_events(
                    logGroupName=target.log_group,
                    logStreamName=stream_name,
                    logEvents=[
                        {"timestamp": record.timestamp_millis, "message": message}
                    ],
                )
            except (BotoCoreError, ClientError) as e:
                logger.error(
                    "Failed to put log events.",
                    extra={
                        "log_group": target.log_group,
                        "log_stream": stream_name,
                        "error": str(e),
                    },
                )
                raise SubmissionError(f"failed to put log events: {e}") from e

            self.sequence_token = response.get("nextSequenceToken")

    def with_attributes(self, attributes: Sequence[Attribute]) -> "CloudWatchHandler":
        """Returns a handler that also writes `attributes` on every record."""
        child = self._derive()
        child.attributes = self.attributes + tuple(attributes)
        return child

    def with_group(self, name: str) -> "CloudWatchHandler":
        """Returns a handler whose records list `name` under the `groups` key."""
        child = self._derive()
        if name:
            child.groups = self.groups + (name,)
        return child

    def _derive(self) -> "CloudWatchHandler":
        child = CloudWatchHandler(
            self.client,
            level=self.level,
            stream_name=self.stream_name,
            cache=self.cache,
        )
        child.attributes = self.attributes
        child.groups = self.groups
        child.sequence_token = self.sequence_token
        return child
