"""Quote model: the server-of-record priced document."""
from sqlalchemy import Column, String, Float, Integer, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
import uuid

from quote_engine.database.base import BaseModel

QUOTE_STATUS_SUBMITTED = "submitted"
QUOTE_STATUS_ACCEPTED = "accepted"
QUOTE_STATUS_REJECTED = "rejected"


def _iso(value):
    return value.isoformat() if value else None


class Quote(BaseModel):
    """
    Submitted quote. Parameters, line items and totals are frozen at
    submission; only status, decision timestamps and the rejection reason
    change afterwards.
    """
    __tablename__ = "quotes"

    quote_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    request_id = Column(String(64), ForeignKey("service_requests.request_id"), nullable=False, unique=True, index=True)
    status = Column(String(20), nullable=False, default=QUOTE_STATUS_SUBMITTED, index=True)

    # Pricing inputs
    service_factor = Column(Float, nullable=True)
    risk_profile = Column(String(10), nullable=True)
    risk_multiplier = Column(Integer, nullable=True)
    area_discounted_sqm = Column(Float, nullable=True)
    service_head_count = Column(Integer, nullable=False, default=1)
    clearance_access_cost = Column(Float, nullable=False, default=0.0)
    mobilization_cost = Column(Float, nullable=False, default=0.0)
    accommodation_cost = Column(Float, nullable=False, default=0.0)
    data_collection_days = Column(Float, nullable=True)
    evaluation_days = Column(Float, nullable=True)
    estimated_weeks = Column(Float, nullable=True)
    admin_notes = Column(Text, nullable=True)

    # Server-computed totals (JMD unless noted)
    line_subtotal = Column(Float, nullable=False, default=0.0)
    initiation_total = Column(Float, nullable=False, default=0.0)
    subtotal = Column(Float, nullable=False, default=0.0)
    discount_amount = Column(Float, nullable=False, default=0.0)
    total_cost_jmd = Column(Float, nullable=False)
    total_cost_usd = Column(Float, nullable=False)
    prepayment_pct = Column(Float, nullable=False, default=40.0)
    prepayment_amount = Column(Float, nullable=False, default=0.0)
    balance_pct = Column(Float, nullable=False, default=60.0)
    balance_amount = Column(Float, nullable=False, default=0.0)

    # Lifecycle
    quoted_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    request = relationship("ServiceRequest", back_populates="quote")
    items = relationship(
        "QuoteLineItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteLineItem.sort_order"
    )

    __table_args__ = (
        CheckConstraint("status IN ('submitted', 'accepted', 'rejected')", name="check_quote_status"),
        CheckConstraint("prepayment_pct >= 0 AND prepayment_pct <= 100", name="check_prepayment_pct"),
        CheckConstraint("total_cost_jmd > 0", name="check_total_positive"),
    )

    def __repr__(self):
        return f"<Quote(quote_id={self.quote_id}, request_id={self.request_id}, status={self.status})>"

    def to_dict(self):
        """Convert quote to the wire representation returned by the API."""
        return {
            "quote_id": self.quote_id,
            "request_id": self.request_id,
            "status": self.status,
            "parameters": {
                "service_factor": self.service_factor,
                "risk_profile": self.risk_profile,
                "risk_multiplier": self.risk_multiplier,
                "area_discounted_sqm": self.area_discounted_sqm,
                "service_head_count": self.service_head_count,
                "clearance_access_cost": self.clearance_access_cost,
                "mobilization_cost": self.mobilization_cost,
                "accommodation_cost": self.accommodation_cost,
                "data_collection_days": self.data_collection_days,
                "evaluation_days": self.evaluation_days,
                "estimated_weeks": self.estimated_weeks,
                "admin_notes": self.admin_notes,
            },
            "line_items": [item.to_dict() for item in self.items],
            "totals": {
                "line_subtotal": self.line_subtotal,
                "initiation_total": self.initiation_total,
                "subtotal": self.subtotal,
                "discount_amount": self.discount_amount,
                "total": self.total_cost_jmd,
                "usd_total": self.total_cost_usd,
                "prepayment_pct": self.prepayment_pct,
                "prepay_amount": self.prepayment_amount,
                "balance_pct": self.balance_pct,
                "balance_amount": self.balance_amount,
            },
            "quoted_at": _iso(self.quoted_at),
            "accepted_at": _iso(self.accepted_at),
            "rejected_at": _iso(self.rejected_at),
            "rejection_reason": self.rejection_reason,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
