"""Error handling utilities."""
from typing import Any, Dict, List, Optional
from flask import jsonify


class APIError(Exception):
    """
    Custom exception for API errors.
    Can be raised in route handlers and will be caught by error handler.
    """
    def __init__(self, message: str, status_code: int = 400, code: Optional[str] = None):
        self.message = message
        self.status_code = status_code
        self.code = code or "API_ERROR"
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        return {
            "error": self.message,
            "code": self.code
        }


class QuoteEngineError(Exception):
    """Base class for quote engine errors."""


class ValidationFailure:
    """A single failed validation rule."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message

    def __eq__(self, other):
        if not isinstance(other, ValidationFailure):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __repr__(self):
        return f"<ValidationFailure(code={self.code})>"

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


class QuoteValidationError(QuoteEngineError):
    """
    Local, pre-submission validation failure.
    Always recoverable by editing and resubmitting.
    """
    def __init__(self, failures: List[ValidationFailure]):
        if not failures:
            raise ValueError("QuoteValidationError requires at least one failure")
        self.failures = list(failures)
        self.message = self.failures[0].message
        super().__init__(self.message)

    @property
    def first(self) -> ValidationFailure:
        return self.failures[0]

    @property
    def codes(self) -> List[str]:
        return [failure.code for failure in self.failures]


class TransportError(QuoteEngineError):
    """
    Network failure or non-2xx response from the quote backend.
    Retryable; the builder state is left untouched.
    """
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class QuoteStateError(QuoteEngineError):
    """Transition attempted from a lifecycle state that does not allow it."""

    def __init__(self, current: Any, attempted: str):
        self.current = current
        self.attempted = attempted
        current_name = getattr(current, "value", current)
        super().__init__(f"Cannot {attempted} a quote in state '{current_name}'")


class QuoteConflictError(Exception):
    """Server-side transition requested from the wrong stored state."""


def error_response(code: str, message: str, status_code: int = 400, details: Optional[Dict[str, Any]] = None) -> tuple:
    """
    Create standardized error response.

    Args:
        code: Error code (e.g., "QUOTE_NOT_FOUND")
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional error details

    Returns:
        Tuple of (response, status_code) for Flask
    """
    response = {
        "error": message,
        "code": code
    }

    if details:
        response["details"] = details

    return jsonify(response), status_code


def success_response(data: Any, status_code: int = 200, metadata: Optional[Dict[str, Any]] = None) -> tuple:
    """
    Create standardized success response.

    Args:
        data: Response data
        status_code: HTTP status code
        metadata: Optional metadata

    Returns:
        Tuple of (response, status_code) for Flask
    """
    response = {"success": True, "data": data}

    if metadata:
        response["metadata"] = metadata

    return jsonify(response), status_code
