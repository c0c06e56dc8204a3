# src/common/schema.py

import json
from typing import Any, Dict

from jsonschema import ValidationError, validate

from src.common.config import project_root
from src.common.exceptions import RequestValidationError
from src.common.logging import logger

LOG_REQUEST_SCHEMA = "log_request.schema.json"


def load_schema(name: str) -> Dict[str, Any]:
    """Reads a JSON schema from the project's `schemas/` directory."""
    schema_path = project_root / "schemas" / name
    with open(schema_path, "r") as f:
        return json.load(f)


def validate_log_request(event: Dict[str, Any], schema: Dict[str, Any]) -> None:
    """
    Validates an inbound log request against the log request JSON schema.

    Purpose:
        To reject malformed requests (a non-string message, attributes without
        keys, a negative retention) before anything is sent to CloudWatch.

    Args:
        event (Dict[str, Any]): The Lambda event.
        schema (Dict[str, Any]): The JSON schema to validate against.

    Raises:
        RequestValidationError: If the event does not match the schema. The
                                message names the offending path.
    """
    try:
        validate(instance=event, schema=schema)
        logger.debug("Log request validation successful.")
    except ValidationError as e:
        path = ".".join(str(part) for part in e.absolute_path) or "<root>"
        # Expected failure mode for bad input, not a system error.
        logger.warning(
            "Log request failed validation.",
            extra={
                "error_message": e.message,
                "validator": e.validator,
                "path": path,
            },
        )
        raise RequestValidationError(f"invalid request: {path}: {e.message}") from e
