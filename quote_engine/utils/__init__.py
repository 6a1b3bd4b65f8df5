"""Utility functions package."""
from quote_engine.utils.validators import (
    sanitize_string,
    sanitize_float,
    clamp,
    is_blank
)
from quote_engine.utils.errors import (
    APIError,
    QuoteEngineError,
    QuoteValidationError,
    TransportError,
    QuoteStateError,
    QuoteConflictError,
    ValidationFailure,
    error_response,
    success_response
)

__all__ = [
    "APIError",
    "QuoteEngineError",
    "QuoteValidationError",
    "TransportError",
    "QuoteStateError",
    "QuoteConflictError",
    "ValidationFailure",
    "error_response",
    "success_response",
    "sanitize_string",
    "sanitize_float",
    "clamp",
    "is_blank"
]
