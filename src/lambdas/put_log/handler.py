# src/lambdas/put_log/handler.py

from typing import Any, Dict

from aws_lambda_powertools.utilities.typing import LambdaContext

# Import our common modules
from src.common import aws, config, schema
from src.common.attributes import attributes_from_pairs
from src.common.cloudwatch import CloudWatchHandler
from src.common.exceptions import LogGroupRequiredError, LogRelayError
from src.common.logging import apply_logging_config, logger
from src.common.records import Level, LogTarget

SUCCESS_MESSAGE = "Log written successfully"

# ==============================================================================
# Global Scope: Load configuration, schema and the root handler once per
# container reuse
# ==============================================================================
# The provisioning cache lives on the root handler, so a warm container keeps
# reusing the log groups and the log stream it already created.

try:
    app_config = config.load_config()
    apply_logging_config(app_config.get("logging", {}))

    settings = config.handler_settings(app_config)
    log_request_schema = schema.load_schema(schema.LOG_REQUEST_SCHEMA)

    cloudwatch_handler = CloudWatchHandler(
        aws.create_logs_client(),
        level=settings.level,
        stream_name=settings.stream_name,
        stream_timestamp_format=settings.stream_timestamp_format,
    )

except (ValueError, FileNotFoundError, LogRelayError) as e:
    # The Lambda cannot operate without config; fail every invocation cleanly.
    logger.error(
        "FATAL: Could not load configuration or schema.", extra={"error": str(e)}
    )
    app_config = None
    log_request_schema = None
    cloudwatch_handler = None


def _failure(error: str) -> Dict[str, Any]:
    return {"success": False, "error": error}


# ==============================================================================
# Lambda Handler
# ==============================================================================


@logger.inject_lambda_context(log_event=True)
def handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    AWS Lambda handler that writes one structured log record to CloudWatch Logs.

    Purpose:
        Decodes a log request, validates it, and hands it to the shared
        CloudWatchHandler. Creating the log group and stream is the handler's
        job and is never reported as a separate failure.

    Args:
        event (Dict[str, Any]): The log request. `log_group` is required;
                                `level`, `message`, `attributes` and
                                `retention_days` are optional.
        context (LambdaContext): The AWS Lambda context object.

    Returns:
        Dict[str, Any]: `{"success": True, "message": ...}` once the event is
                        written, `{"success": False, "error": ...}` otherwise.
    """
    if not cloudwatch_handler or not log_request_schema:
        logger.error("Handler cannot execute due to missing configuration.")
        return _failure("Internal server configuration error")

    # 1. The log group is a hard precondition, checked before anything else
    if not isinstance(event, dict) or not event.get("log_group"):
        logger.warning("Incoming event is missing 'log_group'.")
        return _failure(str(LogGroupRequiredError()))

    try:
        # 2. Validate the rest of the request against the schema
        schema.validate_log_request(event, log_request_schema)

        level = Level.parse(event.get("level"))
        target = LogTarget(
            log_group=event["log_group"],
            retention_days=event.get("retention_days"),
        )
        attributes = attributes_from_pairs(event.get("attributes") or [])

        # 3. Ship the record
        cloudwatch_handler.log(
            target, level, event.get("message") or "", attributes
        )
    except LogRelayError as e:
        logger.error("Failed to write log record.", extra={"error": str(e)})
        return _failure(str(e))

    logger.info(
        "Log record written.",
        extra={"log_group": target.log_group, "level": level.name},
    )
    return {"success": True, "message": SUCCESS_MESSAGE}
