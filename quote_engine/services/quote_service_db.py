"""Database-backed quote service (server of record)."""
from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from quote_engine.models.quote import (
    Quote,
    QUOTE_STATUS_SUBMITTED,
    QUOTE_STATUS_ACCEPTED,
    QUOTE_STATUS_REJECTED
)
from quote_engine.models.quote_line_item import QuoteLineItem
from quote_engine.models.service_request import (
    ServiceRequest,
    STATUS_QUOTED,
    STATUS_QUOTE_ACCEPTED,
    STATUS_QUOTE_REJECTED
)
from quote_engine.services.line_items import AREA_UOM, LineItem, LineItemCategory
from quote_engine.services.notification_service import (
    QuoteNotifier,
    get_default_notifier,
    QUOTE_GENERATED,
    QUOTE_ACCEPTED,
    QUOTE_REJECTED
)
from quote_engine.services.pricing_calculator import calculate_totals, line_subtotal
from quote_engine.services.quote_parameters import QuoteParameters
from quote_engine.services.rate_table import risk_multiplier
from quote_engine.utils.errors import QuoteConflictError
from quote_engine.utils.logger import get_logger
from quote_engine.utils.validators import sanitize_float, sanitize_string

logger = get_logger(__name__)

MAX_REASON_LENGTH = 2000


def _category(value: Any) -> LineItemCategory:
    try:
        return LineItemCategory(sanitize_string(value, max_length=30) or LineItemCategory.PROFESSIONAL_SERVICE)
    except ValueError:
        return LineItemCategory.PROFESSIONAL_SERVICE


def parse_submitted_lines(entries: Any) -> List[Dict[str, Any]]:
    """
    Sanitize submitted line items.

    Rows without a description are dropped; quantity and unit price are
    clamped to >= 0; sort order defaults to the row position.

    Returns:
        List of dicts with a LineItem under "item" and its "sort_order"
    """
    if not isinstance(entries, list):
        return []

    parsed = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            continue
        description = sanitize_string(entry.get("description"), max_length=500)
        if not description:
            continue
        item = LineItem(
            id=str(index),
            description=description,
            quantity=sanitize_float(entry.get("quantity"), 0.0, min_value=0.0),
            unit_price=sanitize_float(entry.get("unitPrice"), 0.0, min_value=0.0),
            uom=sanitize_string(entry.get("uom"), max_length=50, default=AREA_UOM),
            category=_category(entry.get("category")),
        )
        parsed.append({
            "item": item,
            "sort_order": int(sanitize_float(entry.get("sortOrder"), float(index), min_value=0.0)),
        })
    return parsed


class QuoteServiceDB:
    """Database-backed quote service."""

    @staticmethod
    def get_request(db: Session, request_id: str) -> Optional[ServiceRequest]:
        return db.query(ServiceRequest).filter(ServiceRequest.request_id == request_id).first()

    @staticmethod
    def get_quote(db: Session, request_id: str) -> Optional[Quote]:
        """Get the quote for a request, or None."""
        return db.query(Quote).filter(Quote.request_id == request_id).first()

    @staticmethod
    def generate_quote(
        db: Session,
        request_id: str,
        payload: Dict[str, Any],
        notifier: Optional[QuoteNotifier] = None
    ) -> Optional[Quote]:
        """
        Create the quote for a request from a submit payload.

        Totals are recomputed here from the submitted rows and parameters;
        client-side totals are never trusted. The request moves to 'quoted'
        in the same transaction.

        Returns:
            The persisted Quote, or None if the request does not exist

        Raises:
            QuoteConflictError: If the request already has a quote
            ValueError: If the recomputed total is not positive
        """
        request = QuoteServiceDB.get_request(db, request_id)
        if not request:
            return None

        if QuoteServiceDB.get_quote(db, request_id) is not None:
            raise QuoteConflictError("Quote already generated")

        lines = parse_submitted_lines(payload.get("lineItems"))
        items = [line["item"] for line in lines]
        params = QuoteParameters.from_submit_payload(payload)

        # Discount is capped at the subtotal before it is applied
        subtotal = line_subtotal(items) + params.initiation_total
        safe_discount = min(params.discount_amount, subtotal)
        totals = calculate_totals(items, params)

        if totals.total <= 0:
            raise ValueError("Total must be greater than 0")

        now = datetime.utcnow()
        previous_status = request.status
        quote = Quote(
            request_id=request_id,
            status=QUOTE_STATUS_SUBMITTED,
            service_factor=params.service_factor,
            risk_profile=params.risk_profile.value,
            risk_multiplier=risk_multiplier(params.risk_profile),
            area_discounted_sqm=params.area_discounted_sqm,
            service_head_count=params.service_head_count,
            clearance_access_cost=params.clearance_cost,
            mobilization_cost=params.mobilization_cost,
            accommodation_cost=params.accommodation_cost,
            data_collection_days=params.data_collection_days,
            evaluation_days=params.evaluation_days,
            estimated_weeks=params.estimated_weeks,
            admin_notes=params.admin_notes.strip() or None,
            line_subtotal=totals.line_subtotal,
            initiation_total=totals.initiation_total,
            subtotal=totals.subtotal,
            discount_amount=safe_discount,
            total_cost_jmd=totals.total,
            total_cost_usd=round(totals.usd_total, 2),
            prepayment_pct=params.prepayment_pct,
            prepayment_amount=totals.prepay_amount,
            balance_pct=totals.balance_pct,
            balance_amount=totals.balance_amount,
            quoted_at=now,
        )
        quote.items = [
            QuoteLineItem(
                description=line["item"].description,
                quantity=line["item"].quantity,
                unit_price=line["item"].unit_price,
                uom=line["item"].uom,
                total_price=line["item"].amount,
                category=line["item"].category.value,
                sort_order=line["sort_order"],
            )
            for line in lines
        ]

        try:
            db.add(quote)
            request.status = STATUS_QUOTED
            db.commit()
            db.refresh(quote)
        except Exception:
            db.rollback()
            logger.error(
                "Failed to persist quote",
                extra={"request_id": request_id, "previous_status": previous_status}
            )
            raise

        logger.info(
            "Quote generated",
            extra={"request_id": request_id, "previous_status": previous_status, "total_jmd": totals.total}
        )
        (notifier or get_default_notifier()).notify(QUOTE_GENERATED, request_id, {
            "total_jmd": totals.total,
            "total_usd": quote.total_cost_usd,
            "line_item_count": len(lines),
        })
        return quote

    @staticmethod
    def accept_quote(
        db: Session,
        request_id: str,
        notifier: Optional[QuoteNotifier] = None
    ) -> Optional[Quote]:
        """
        Accept a submitted quote.

        Returns:
            The updated Quote, or None if there is no quote for the request

        Raises:
            QuoteConflictError: If the quote is not in 'submitted'
        """
        quote = QuoteServiceDB.get_quote(db, request_id)
        if not quote:
            return None

        if quote.status != QUOTE_STATUS_SUBMITTED:
            raise QuoteConflictError("Quote can only be accepted when status is 'submitted'")

        try:
            quote.status = QUOTE_STATUS_ACCEPTED
            quote.accepted_at = datetime.utcnow()
            quote.request.status = STATUS_QUOTE_ACCEPTED
            db.commit()
            db.refresh(quote)
        except Exception:
            db.rollback()
            raise

        logger.info("Quote accepted", extra={"request_id": request_id})
        (notifier or get_default_notifier()).notify(QUOTE_ACCEPTED, request_id)
        return quote

    @staticmethod
    def reject_quote(
        db: Session,
        request_id: str,
        reason: Optional[str] = None,
        notifier: Optional[QuoteNotifier] = None
    ) -> Optional[Quote]:
        """
        Reject a submitted quote, optionally recording a reason.

        Returns:
            The updated Quote, or None if there is no quote for the request

        Raises:
            QuoteConflictError: If the quote is not in 'submitted'
        """
        quote = QuoteServiceDB.get_quote(db, request_id)
        if not quote:
            return None

        if quote.status != QUOTE_STATUS_SUBMITTED:
            raise QuoteConflictError("Quote can only be rejected when status is 'submitted'")

        reason = sanitize_string(reason, max_length=MAX_REASON_LENGTH) or None
        try:
            quote.status = QUOTE_STATUS_REJECTED
            quote.rejected_at = datetime.utcnow()
            quote.rejection_reason = reason
            quote.request.status = STATUS_QUOTE_REJECTED
            db.commit()
            db.refresh(quote)
        except Exception:
            db.rollback()
            raise

        logger.info("Quote rejected", extra={"request_id": request_id, "has_reason": reason is not None})
        (notifier or get_default_notifier()).notify(QUOTE_REJECTED, request_id, {"reason": reason})
        return quote
