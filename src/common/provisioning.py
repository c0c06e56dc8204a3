# src/common/provisioning.py

import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, FrozenSet, Optional, Set

from botocore.exceptions import BotoCoreError, ClientError

from src.common.aws import error_code, is_already_exists
from src.common.logging import logger

DEFAULT_STREAM_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProvisioningCache:
    """
    Remembers which log groups and log streams this process has provisioned.

    Purpose:
        CloudWatch Logs rejects events for groups or streams that do not
        exist, but creating them on every call would double or triple the
        number of API requests. This cache makes at most one creation attempt
        per log group and per (log group, base stream name) pair for the
        lifetime of the process, then answers from memory.

    Stream names are made unique per process by suffixing the base name with
    the time of first use, at second granularity. Two containers starting in
    the same second under the same group would share a stream; that is
    accepted.

    A single lock guards both maps. The create call runs while the lock is
    held, so a caller that loses a race waits and then reuses the winner's
    result instead of issuing its own create call.

    One cache is shared by a handler and every handler derived from it.
    Entries are only ever added.
    """

    def __init__(
        self,
        client: Any,
        stream_timestamp_format: str = DEFAULT_STREAM_TIMESTAMP_FORMAT,
        clock: Callable[[], datetime] = _utc_now,
    ):
        """
        Initializes the cache.

        Args:
            client: A boto3 CloudWatch Logs client (or anything with the same
                    create_log_group / create_log_stream / put_retention_policy
                    methods).
            stream_timestamp_format (str): strftime format for stream suffixes.
            clock (Callable[[], datetime]): Source of the current time.
        """
        self.client = client
        self.stream_timestamp_format = stream_timestamp_format
        self._clock = clock
        self._lock = threading.Lock()
        self._groups: Set[str] = set()
        self._streams: Dict[str, str] = {}

    @property
    def created_groups(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._groups)

    @property
    def created_streams(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._streams)

    def ensure_group(self, group_name: str, retention_days: Optional[int] = None) -> None:
        """
        Makes sure `group_name` has been created once by this process.

        Any creation error, "already exists" included, is logged and
        swallowed; the group is still marked as handled so later calls skip
        the network. Retention is only applied when this call actually created
        the group, and a failure to apply it is logged and ignored.
        """
        with self._lock:
            if group_name in self._groups:
                return

            created = self._create_group(group_name)
            self._groups.add(group_name)

            if created and retention_days is not None:
                self._put_retention(group_name, retention_days)

    def ensure_stream(self, group_name: str, base_stream_name: str) -> str:
        """
        Returns the stream this process uses for `base_stream_name` in `group_name`.

        The first call synthesizes `<base>-<timestamp>`, attempts to create it
        and caches the name whether or not creation succeeded. Every later
        call returns the cached name without touching the network.
        """
        key = f"{group_name}/{base_stream_name}"
        with self._lock:
            existing = self._streams.get(key)
            if existing is not None:
                return existing

            stream_name = self._stream_name_for(base_stream_name)
            try:
                self.client.create_log_stream(
                    logGroupName=group_name, logStreamName=stream_name
                )
                logger.info(
                    "Created log stream.",
                    extra={"log_group": group_name, "log_stream": stream_name},
                )
            except (BotoCoreError, ClientError) as e:
                self._log_create_failure("log stream", e, group_name, stream_name)

            self._streams[key] = stream_name
            return stream_name

    def _stream_name_for(self, base_stream_name: str) -> str:
        suffix = self._clock().strftime(self.stream_timestamp_format)
        return f"{base_stream_name}-{suffix}"

    def _create_group(self, group_name: str) -> bool:
        try:
            self.client.create_log_group(logGroupName=group_name)
        except (BotoCoreError, ClientError) as e:
            self._log_create_failure("log group", e, group_name)
            return False
        logger.info("Created log group.", extra={"log_group": group_name})
        return True

    def _put_retention(self, group_name: str, retention_days: int) -> None:
        try:
            self.client.put_retention_policy(
                logGroupName=group_name, retentionInDays=retention_days
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning(
                "Could not set log group retention.",
                extra={
                    "log_group": group_name,
                    "retention_days": retention_days,
                    "error_code": error_code(e),
                    "error": str(e),
                },
            )

    @staticmethod
    def _log_create_failure(
        resource: str, e: Exception, group_name: str, stream_name: Optional[str] = None
    ) -> None:
        extra = {"log_group": group_name, "error_code": error_code(e)}
        if stream_name:
            extra["log_stream"] = stream_name
        if is_already_exists(e):
            logger.debug(f"The {resource} already exists.", extra=extra)
        else:
            # Not fatal: the put that follows reports the real problem, if any.
            logger.warning(
                f"Failed to create {resource}.", extra={**extra, "error": str(e)}
            )
