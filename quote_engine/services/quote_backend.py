"""Client for the quote backend (server of record)."""
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from quote_engine.config.settings import QUOTE_API_BASE_URL, QUOTE_API_TIMEOUT
from quote_engine.utils.errors import TransportError
from quote_engine.utils.logger import get_logger

logger = get_logger(__name__)

GENERATE_FAILED = "Failed to generate quote"
ACCEPT_FAILED = "Failed to accept quote"
REJECT_FAILED = "Failed to decline quote"


@dataclass(frozen=True)
class SubmittedQuote:
    """Client-side view of the server-of-record quote."""
    request_id: str
    status: str
    totals: Dict[str, Any] = field(default_factory=dict)
    line_items: List[Dict[str, Any]] = field(default_factory=list)
    quote_id: Optional[str] = None
    quoted_at: Optional[str] = None
    accepted_at: Optional[str] = None
    rejected_at: Optional[str] = None
    rejection_reason: Optional[str] = None

    @property
    def total(self) -> float:
        return float(self.totals.get("total") or 0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubmittedQuote":
        return cls(
            request_id=str(data.get("request_id", "")),
            status=data.get("status", ""),
            totals=dict(data.get("totals") or {}),
            line_items=list(data.get("line_items") or []),
            quote_id=data.get("quote_id"),
            quoted_at=data.get("quoted_at"),
            accepted_at=data.get("accepted_at"),
            rejected_at=data.get("rejected_at"),
            rejection_reason=data.get("rejection_reason"),
        )


class QuoteBackend(ABC):
    """Lifecycle calls into the server of record. Failures raise TransportError."""

    @abstractmethod
    def submit(self, request_id: str, payload: Dict[str, Any]) -> SubmittedQuote:
        """Persist a quote for request_id; the server recomputes totals."""

    @abstractmethod
    def accept(self, request_id: str) -> SubmittedQuote:
        """Accept the submitted quote."""

    @abstractmethod
    def reject(self, request_id: str, reason: Optional[str] = None) -> SubmittedQuote:
        """Reject the submitted quote."""


class HttpQuoteBackend(QuoteBackend):
    """QuoteBackend over HTTPS JSON with bearer-token authentication."""

    def __init__(self, base_url: str = QUOTE_API_BASE_URL, access_token: str = "", timeout: int = QUOTE_API_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.timeout = timeout

    def submit(self, request_id: str, payload: Dict[str, Any]) -> SubmittedQuote:
        return self._post(f"/quotes/{request_id}", payload, GENERATE_FAILED)

    def accept(self, request_id: str) -> SubmittedQuote:
        return self._post(f"/quotes/{request_id}/accept", {}, ACCEPT_FAILED)

    def reject(self, request_id: str, reason: Optional[str] = None) -> SubmittedQuote:
        body = {"reason": reason} if reason else {}
        return self._post(f"/quotes/{request_id}/reject", body, REJECT_FAILED)

    def _post(self, path: str, body: Dict[str, Any], failure_message: str) -> SubmittedQuote:
        url = f"{self.base_url}{path}"
        try:
            response = requests.post(
                url,
                headers={
                    'Content-Type': 'application/json',
                    'Authorization': f'Bearer {self.access_token}'
                },
                data=json.dumps(body),
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.warning("Quote backend unreachable", extra={"url": url, "error": str(e)})
            raise TransportError(failure_message) from e

        if not 200 <= response.status_code < 300:
            message = _error_message(response) or failure_message
            logger.warning(
                "Quote backend rejected request",
                extra={"url": url, "status_code": response.status_code, "error": message}
            )
            raise TransportError(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(failure_message, status_code=response.status_code) from e

        if isinstance(data, dict) and isinstance(data.get("data"), dict):
            data = data["data"]
        if not isinstance(data, dict):
            raise TransportError(failure_message, status_code=response.status_code)
        return SubmittedQuote.from_dict(data)


def _error_message(response) -> Optional[str]:
    """Extract the server's error text from a {error: ...} body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    return error if isinstance(error, str) and error else None
