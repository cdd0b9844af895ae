"""Logging utilities for the Trello semantic layer.

Module code logs through plain ``logging.getLogger("trello_semantic.<area>")``
loggers. The tool runner additionally emits one JSON line per call through
``log_info`` / ``log_warn`` / ``log_error`` so a call can be followed by its
request id.
"""

import json
import logging
import uuid
from typing import Any, Dict, Optional


TOOL_LOGGER_NAME = "trello_semantic.tools"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger, configuring a console handler on first use."""

    logger = logging.getLogger(name or "trello_semantic")

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    return logger


def generate_request_id() -> str:
    """Generate a unique request identifier for correlating logs."""

    return str(uuid.uuid4())


def _format_structured_message(
    message: str,
    tool: Optional[str] = None,
    request_id: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> str:
    payload: Dict[str, Any] = {"message": message}
    if tool is not None:
        payload["tool"] = tool
    if request_id is not None:
        payload["request_id"] = request_id
    if extra:
        payload["extra"] = extra
    return json.dumps(payload, default=str)


def _emit(level: int, msg: str, tool: Optional[str], request_id: Optional[str], extra: Dict[str, Any]) -> None:
    get_logger(TOOL_LOGGER_NAME).log(
        level,
        _format_structured_message(msg, tool=tool, request_id=request_id, extra=extra or None),
    )


def log_info(msg: str, tool: Optional[str] = None, request_id: Optional[str] = None, **extra: Any) -> None:
    """Log tool activity at INFO as a JSON line."""

    _emit(logging.INFO, msg, tool, request_id, extra)


def log_warn(msg: str, tool: Optional[str] = None, request_id: Optional[str] = None, **extra: Any) -> None:
    _emit(logging.WARNING, msg, tool, request_id, extra)


def log_error(msg: str, tool: Optional[str] = None, request_id: Optional[str] = None, **extra: Any) -> None:
    _emit(logging.ERROR, msg, tool, request_id, extra)
