"""QuoteDraftRecord model: durable key-value storage for quote drafts."""
from sqlalchemy import Column, String, Text

from quote_engine.database.base import BaseModel


class QuoteDraftRecord(BaseModel):
    """One row per draft key (quote-draft:<request_id>); payload is draft JSON."""
    __tablename__ = "quote_drafts"
    
    draft_key = Column(String(255), primary_key=True)
    request_id = Column(String(64), nullable=False, index=True)
    payload = Column(Text, nullable=False)
    
    def __repr__(self):
        return f"<QuoteDraftRecord(draft_key={self.draft_key})>"
