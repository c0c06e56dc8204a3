# src/common/logging.py

from aws_lambda_powertools import Logger

# ==============================================================================
# Centralized Logger Initialization
# ==============================================================================
#
# Purpose:
#   A single, pre-configured AWS Lambda Powertools Logger for the relay's own
#   diagnostics (provisioning conflicts, retention failures, rejected
#   requests). This is NOT the logger that ships records to CloudWatch Logs;
#   that is the CloudWatchHandler in src/common/cloudwatch.py.
#
# How it Works:
#   1. The Logger is created here at module level.
#   2. The put_log Lambda loads its environment config (e.g. config/dev.yaml)
#      at cold start and applies the service name and log level to this
#      instance.
#   3. Powertools injects the Lambda request ID and cold start flag into every
#      diagnostic record.
#
# Usage in other files:
#   from src.common.logging import logger
#
#   logger.debug("Log group already exists.", extra={"log_group": name})
#
# ==============================================================================

logger = Logger()


def apply_logging_config(logging_config: dict) -> None:
    """Applies the `logging` section of the app config to the shared logger."""
    service = logging_config.get("powertools_service_name")
    if service:
        logger.append_keys(service=service)
    level = logging_config.get("level")
    if level:
        logger.setLevel(level)
