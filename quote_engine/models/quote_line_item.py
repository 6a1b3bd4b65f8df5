"""QuoteLineItem model: a frozen row of a submitted quote."""
from sqlalchemy import Column, String, Float, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
import uuid

from quote_engine.database.base import BaseModel


class QuoteLineItem(BaseModel):
    """Line item persisted with a submitted quote."""
    __tablename__ = "quote_line_items"
    
    item_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quote_id = Column(String(36), ForeignKey("quotes.quote_id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(String(500), nullable=False)
    quantity = Column(Float, nullable=False, default=0.0)
    unit_price = Column(Float, nullable=False, default=0.0)
    uom = Column(String(50), nullable=False, default="SQ M.")
    total_price = Column(Float, nullable=False, default=0.0)
    category = Column(String(30), nullable=False, default="professional_service")
    sort_order = Column(Integer, nullable=False, default=0)
    
    quote = relationship("Quote", back_populates="items")
    
    __table_args__ = (
        CheckConstraint("quantity >= 0 AND unit_price >= 0", name="check_non_negative"),
        CheckConstraint(
            "category IN ('initiation', 'professional_service', 'other')",
            name="check_category"
        ),
    )
    
    def __repr__(self):
        return f"<QuoteLineItem(item_id={self.item_id}, description={self.description})>"
    
    def to_dict(self):
        return {
            "id": self.item_id,
            "description": self.description,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "uom": self.uom,
            "total_price": self.total_price,
            "category": self.category,
            "sort_order": self.sort_order,
        }
