# src/common/aws.py

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

# Initialize logger
logger = logging.getLogger(__name__)

ALREADY_EXISTS_CODE = "ResourceAlreadyExistsException"

# Timeouts only. Retries stay with botocore defaults.
_LOGS_CLIENT_CONFIG = Config(connect_timeout=5, read_timeout=10)


def create_logs_client(session: Optional[boto3.Session] = None) -> Any:
    """
    Creates a CloudWatch Logs client.

    Purpose:
        One client is created per Lambda container and shared by every
        handler derived from the root handler. The region is sourced from the
        Lambda environment variable AWS_REGION (or the local AWS profile when
        run from scripts/).

    Args:
        session (Optional[boto3.Session]): Session to build the client from.
                                           A fresh default session if omitted.

    Returns:
        A boto3 `logs` client.
    """
    session = session or boto3.Session()
    logger.debug("Creating CloudWatch Logs client.")
    return session.client("logs", config=_LOGS_CLIENT_CONFIG)


def error_code(error: Exception) -> Optional[str]:
    """Returns the AWS error code of a ClientError, or None for anything else."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def is_already_exists(error: Exception) -> bool:
    """True when CloudWatch reported that the resource being created exists."""
    return error_code(error) == ALREADY_EXISTS_CODE
