"""
Structured logger shared by the Lambda handlers.

Exceptions are flattened onto a single line so each failure is one log
record in CloudWatch. Handlers bind the user they serve with ``bind_user``
so every record of an invocation carries it.
"""
import os
import sys
import json
import traceback
from typing import Optional
from aws_lambda_powertools import Logger


def format_exception(exc_info) -> Optional[str]:
    """Render exception info as one line, frames separated by ' | '."""
    if exc_info is True:
        exc_info = sys.exc_info()

    if not (isinstance(exc_info, tuple) and len(exc_info) == 3 and exc_info[0] is not None):
        return None
    try:
        lines = traceback.format_exception(*exc_info)
    except Exception as e:
        return f"Error formatting exception: {str(e)}"
    return " | ".join(line.rstrip("\n").replace("\n", " | ") for line in lines).strip()


class SingleLineLogger(Logger):
    """Powertools logger whose ``exception`` output fits in one record."""

    def exception(self, msg, *args, **kwargs):
        extra = dict(kwargs.pop("extra", None) or {})
        extra["exception"] = format_exception(kwargs.pop("exc_info", True))
        super().error(msg, *args, extra=extra, **kwargs)


def bind_user(user_id: str) -> None:
    """Attach the user id to every following log record of this invocation."""
    logger.append_keys(user_id=user_id)


logger = SingleLineLogger(
    service=os.environ.get("POWERTOOLS_SERVICE_NAME", "cycle_tracker"),
    level=os.environ.get("LOG_LEVEL", "INFO"),
    log_uncaught_exceptions=True,
    json_serializer=json.dumps,
    use_rfc3339=True
)

logger.append_keys(
    region=os.environ.get("AWS_REGION"),
    function=os.environ.get("AWS_LAMBDA_FUNCTION_NAME"),
    version=os.environ.get("AWS_LAMBDA_FUNCTION_VERSION")
)
