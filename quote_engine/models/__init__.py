"""Models package initialization."""
from quote_engine.models.service_request import ServiceRequest
from quote_engine.models.quote import Quote
from quote_engine.models.quote_line_item import QuoteLineItem
from quote_engine.models.quote_draft import QuoteDraftRecord

__all__ = [
    "ServiceRequest",
    "Quote",
    "QuoteLineItem",
    "QuoteDraftRecord"
]
