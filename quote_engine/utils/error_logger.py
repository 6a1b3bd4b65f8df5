"""Error logging utilities for capturing exceptions with request context."""
import sys
import traceback
from typing import Optional, Dict, Any
from flask import request, has_request_context

from quote_engine.utils.logger import get_logger

logger = get_logger(__name__)

SENSITIVE_KEYS = ("access_token", "accessToken", "token", "password", "authorization")


def _strip_sensitive(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in SENSITIVE_KEYS}


def get_request_context() -> Dict[str, Any]:
    """
    Extract request context information safely.

    Returns:
        Dictionary with method, path, endpoint, route arguments and a
        sanitized copy of the JSON body. Empty outside a request.
    """
    if not has_request_context():
        return {}

    try:
        context = {
            "method": request.method,
            "path": request.path,
            "endpoint": request.endpoint or "unknown",
            "remote_addr": request.remote_addr,
            "user_agent": request.headers.get("User-Agent"),
        }

        if request.view_args:
            context["view_args"] = dict(request.view_args)

        if request.args:
            context["query_params"] = _strip_sensitive(dict(request.args))

        if request.method in ("POST", "PUT", "PATCH") and request.is_json:
            data = request.get_json(silent=True)
            if isinstance(data, dict):
                safe_data = _strip_sensitive(data)
                # Line items can be long; the count is enough to correlate
                if isinstance(safe_data.get("lineItems"), list):
                    safe_data["lineItems"] = f"<{len(safe_data['lineItems'])} items>"
                if safe_data:
                    context["request_data"] = safe_data
    except Exception as e:
        context = {"context_extraction_error": str(e)}

    return context


def log_exception(
    exception: Exception,
    status_code: Optional[int] = None,
    additional_context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log an exception with stack trace and request information.

    Args:
        exception: The exception to log
        status_code: Optional HTTP status code (for APIError)
        additional_context: Optional additional context to include in log
    """
    try:
        log_data = {
            "exception_type": type(exception).__name__,
            "exception_message": str(exception),
            "status_code": status_code,
        }

        if exception.__traceback__:
            log_data["stack_trace"] = ''.join(
                traceback.format_exception(type(exception), exception, exception.__traceback__)
            )
        else:
            log_data["stack_trace"] = traceback.format_exc()

        request_context = get_request_context()
        if request_context:
            log_data["request"] = request_context

        if additional_context:
            log_data.update(additional_context)

        logger.error(
            f"Exception occurred: {type(exception).__name__}: {str(exception)}",
            extra=log_data
        )
    except Exception as log_error:
        print(
            f"CRITICAL: Failed to log exception: {log_error}",
            f"Original exception: {exception}",
            file=sys.stderr
        )


def log_error_message(
    message: str,
    status_code: Optional[int] = None,
    additional_context: Optional[Dict[str, Any]] = None
) -> None:
    """
    Log an error message (not an exception) with request context.

    Args:
        message: Error message to log
        status_code: Optional HTTP status code
        additional_context: Optional additional context to include in log
    """
    try:
        log_data = {
            "error_message": message,
            "status_code": status_code,
        }

        request_context = get_request_context()
        if request_context:
            log_data["request"] = request_context

        if additional_context:
            log_data.update(additional_context)

        logger.error(message, extra=log_data)
    except Exception as log_error:
        print(
            f"CRITICAL: Failed to log error message: {log_error}",
            f"Original message: {message}",
            file=sys.stderr
        )
